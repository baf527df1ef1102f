"""Skeleton shapes for the four document types."""

from __future__ import annotations

from dataclasses import dataclass

import yaml

from agent_discover.core.analyser import DomainAnalysis
from agent_discover.core.documents import DocumentType

GLOB_HINTS: dict[str, str] = {
    "python": "**/*.py",
    "django": "**/*.py",
    "fastapi": "**/*.py",
    "flask": "**/*.py",
    "typescript": "**/*.ts,**/*.tsx",
    "react": "**/*.tsx,**/*.jsx",
    "javascript": "**/*.js,**/*.mjs",
    "node": "**/*.js,**/*.ts",
    "go": "**/*.go",
    "golang": "**/*.go",
    "rust": "**/*.rs",
    "java": "**/*.java",
    "kotlin": "**/*.kt",
    "csharp": "**/*.cs",
    "c#": "**/*.cs",
    "ruby": "**/*.rb",
    "php": "**/*.php",
    "terraform": "**/*.tf",
    "docker": "**/Dockerfile,**/*.dockerfile",
    "kubernetes": "**/*.yaml,**/*.yml",
    "sql": "**/*.sql",
    "css": "**/*.css,**/*.scss",
    "markdown": "**/*.md",
    "shell": "**/*.sh",
    "bash": "**/*.sh",
}


@dataclass(frozen=True)
class Shape:
    doc_type: DocumentType
    sections: tuple[str, ...]


SHAPES: dict[DocumentType, Shape] = {
    DocumentType.AGENT: Shape(
        DocumentType.AGENT, ("Expertise", "Behaviours", "Boundaries", "Related Agents")
    ),
    DocumentType.INSTRUCTION: Shape(
        DocumentType.INSTRUCTION, ("Guidelines", "Conventions", "Examples")
    ),
    DocumentType.PROMPT: Shape(DocumentType.PROMPT, ("Goal", "Inputs", "Workflow", "Output")),
    DocumentType.CHATMODE: Shape(DocumentType.CHATMODE, ("Purpose", "Behaviour", "Tool Usage")),
}


def title_case(domain: str) -> str:
    return " ".join(w if w.isupper() else w.capitalize() for w in domain.split())


def apply_to(analysis: DomainAnalysis) -> str:
    """Glob for an instruction file, guessed from the domain words."""
    for word in analysis.domain.lower().replace("/", " ").split():
        if word in GLOB_HINTS:
            return GLOB_HINTS[word]
    return "**"


def front_matter(analysis: DomainAnalysis) -> dict:
    doc_type = analysis.suggested_type
    description = f"{title_case(analysis.domain)} {_noun(doc_type)}"
    meta: dict = {}
    if doc_type == DocumentType.AGENT:
        meta["name"] = analysis.slug
    if doc_type == DocumentType.PROMPT:
        meta["mode"] = "agent"
    meta["description"] = description
    if doc_type == DocumentType.INSTRUCTION:
        meta["applyTo"] = apply_to(analysis)
    else:
        meta["tools"] = list(analysis.tools)
    if analysis.subjects:
        meta["subjects"] = list(analysis.subjects[:6])
    return meta


def _noun(doc_type: DocumentType) -> str:
    return {
        DocumentType.AGENT: "specialist agent",
        DocumentType.INSTRUCTION: "coding guidelines",
        DocumentType.PROMPT: "workflow prompt",
        DocumentType.CHATMODE: "chat mode",
    }[doc_type]


def _bullets(items: list[str], fallback: str) -> str:
    if not items:
        return f"- {fallback}"
    return "\n".join(f"- {item}" for item in items)


def section_body(section: str, analysis: DomainAnalysis) -> str:
    domain = analysis.domain
    vocab = analysis.vocabulary
    related = [h.name for h in analysis.related[:5]]
    if section in ("Expertise", "Purpose", "Goal"):
        lead = f"<Describe the {domain} focus in two or three sentences.>"
        return lead + "\n\nKey concepts:\n" + _bullets(vocab[:8], f"<core {domain} concepts>")
    if section in ("Behaviours", "Behaviour", "Guidelines", "Workflow"):
        steps = [f"{term}: <how it applies>" for term in vocab[8:14]]
        return _bullets(steps, f"<how to approach {domain} tasks>")
    if section == "Boundaries":
        return _bullets([], f"<what falls outside {domain}, and who to hand off to>")
    if section == "Conventions":
        conventions = [f"{s}: <convention>" for s in analysis.subjects[:5]]
        return _bullets(conventions, "<naming and layout>")
    if section == "Inputs":
        return "- `${input:target}`: <what the user supplies>"
    if section == "Tool Usage":
        return _bullets([f"`{t}`: <when to use it>" for t in analysis.tools], "<allowed tools>")
    if section == "Related Agents":
        return _bullets(related, "None found in the corpus")
    if section == "Examples":
        return "```\n<a short before/after example>\n```"
    if section == "Output":
        return f"<Describe the {domain} deliverable and its format.>"
    return "<fill in>"


def render(analysis: DomainAnalysis) -> str:
    """Render a skeleton document for ``analysis.suggested_type``."""
    shape = SHAPES[analysis.suggested_type]
    meta = yaml.safe_dump(front_matter(analysis), sort_keys=False, allow_unicode=True).strip()
    parts = [f"---\n{meta}\n---", f"# {title_case(analysis.domain)}"]
    for section in shape.sections:
        parts.append(f"## {section}\n\n{section_body(section, analysis)}")
    return "\n\n".join(parts) + "\n"
