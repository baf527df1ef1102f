"""Corpus documents — Markdown with optional YAML front matter.

Four document shapes exist, told apart by file-name suffix:

- ``*.agent.md``         persona definitions
- ``*.instructions.md``  coding guidelines applied to matching files
- ``*.prompt.md``        reusable task workflows
- ``*.chatmode.md``      interactive session configurations

Files without a suffix are typed by the nearest ``agents/``, ``instructions/``,
``prompts/`` or ``chatmodes/`` parent directory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from agent_discover.utils.text import keywords


class DocumentParseError(ValueError):
    """Raised when a corpus file has unreadable front matter."""


class DocumentType(str, Enum):
    AGENT = "agent"
    INSTRUCTION = "instruction"
    PROMPT = "prompt"
    CHATMODE = "chatmode"

    @property
    def suffix(self) -> str:
        return SUFFIXES[self]


SUFFIXES: dict[DocumentType, str] = {
    DocumentType.AGENT: ".agent.md",
    DocumentType.INSTRUCTION: ".instructions.md",
    DocumentType.PROMPT: ".prompt.md",
    DocumentType.CHATMODE: ".chatmode.md",
}

DIRECTORY_TYPES: dict[str, DocumentType] = {
    "agents": DocumentType.AGENT,
    "instructions": DocumentType.INSTRUCTION,
    "prompts": DocumentType.PROMPT,
    "chatmodes": DocumentType.CHATMODE,
}

SKIP_DIRS = {"node_modules", "__pycache__", "venv", ".venv"}
VISIBLE_HIDDEN_DIRS = {".github", ".claude"}
NON_CORPUS_NAMES = {"readme.md", "changelog.md", "contributing.md", "license.md"}


@dataclass
class CorpusDocument:
    """A parsed corpus document."""

    name: str
    doc_type: DocumentType
    description: str = ""
    subjects: list[str] = field(default_factory=list)
    tools: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    path: Path | None = None


def detect_type(path: Path, root: Path | None = None) -> DocumentType | None:
    """Document type for a path, or None when the file is not part of the corpus.

    With ``root`` given, only ``root`` and directories below it count for
    directory typing.
    """
    name = path.name.lower()
    if not name.endswith(".md"):
        return None
    for doc_type, suffix in SUFFIXES.items():
        if name.endswith(suffix):
            return doc_type
    if name in NON_CORPUS_NAMES:
        return None
    for parent in path.parents:
        if root is not None and parent != root and root not in parent.parents:
            break
        if parent.name.lower() in DIRECTORY_TYPES:
            return DIRECTORY_TYPES[parent.name.lower()]
    return None


def strip_suffix(filename: str, doc_type: DocumentType) -> str:
    lower = filename.lower()
    if lower.endswith(doc_type.suffix):
        return filename[: -len(doc_type.suffix)]
    if lower.endswith(".md"):
        return filename[:-3]
    return filename


def split_front_matter(text: str, path: Path | str = "<text>") -> tuple[str | None, str]:
    """Split text into (front matter, body). Front matter is None when absent."""
    lines = text.lstrip("\ufeff").lstrip("\n").splitlines(keepends=True)
    # delimiters are whole "---" lines; a "----" rule is body text
    if not lines or lines[0].rstrip() != "---":
        return None, text

    for i, line in enumerate(lines[1:], start=1):
        if line.rstrip() == "---":
            front = "".join(lines[1:i]).rstrip("\r\n")
            return front, "".join(lines[i + 1 :])
    raise DocumentParseError(f"Unterminated front matter in {path}")


def _load_yaml(front: str, path: Path | str) -> dict[str, Any]:
    if not front.strip():
        return {}
    try:
        result = yaml.safe_load(front)
    except yaml.YAMLError as exc:
        raise DocumentParseError(f"Invalid YAML front matter in {path}: {exc}") from exc
    if result is None:
        return {}
    if not isinstance(result, dict):
        raise DocumentParseError(
            f"Front matter must be a mapping, got {type(result).__name__}: {path}"
        )
    return result


def _as_str_list(value: Any) -> list[str]:
    """Coerce a YAML value (list, comma-separated string, scalar) into strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part.strip() for part in str(value).split(",") if part.strip()]


def _first_paragraph(body: str) -> str:
    paragraph: list[str] = []
    in_fence = False
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith("```"):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        if not stripped:
            if paragraph:
                break
            continue
        if stripped.startswith("#"):
            if paragraph:
                break
            continue
        paragraph.append(stripped)
    return " ".join(paragraph)


def parse_text(text: str, path: Path, doc_type: DocumentType | None = None) -> CorpusDocument:
    """Parse document text. ``doc_type`` defaults to the type detected from ``path``."""
    doc_type = doc_type or detect_type(path)
    if doc_type is None:
        raise DocumentParseError(f"Not a corpus document: {path}")

    front, body = split_front_matter(text, path)
    meta = _load_yaml(front, path) if front is not None else {}

    name = str(meta.get("name") or meta.get("title") or strip_suffix(path.name, doc_type))
    description = str(meta.get("description") or _first_paragraph(body)).strip()

    subjects = _as_str_list(meta.get("subjects")) or _as_str_list(meta.get("tags"))
    if not subjects:
        subjects = keywords(f"{name.replace('-', ' ')} {description}", top_n=5)

    return CorpusDocument(
        name=name,
        doc_type=doc_type,
        description=description,
        subjects=[s.lower() for s in subjects],
        tools=_as_str_list(meta.get("tools")),
        metadata=meta,
        body=body.strip(),
        path=path,
    )


def parse_document(path: Path) -> CorpusDocument:
    """Read and parse a corpus file."""
    text = path.read_text(encoding="utf-8")
    return parse_text(text, path)


def _skipped(dirname: str) -> bool:
    if dirname in SKIP_DIRS:
        return True
    return dirname.startswith(".") and dirname not in VISIBLE_HIDDEN_DIRS


def discover_documents(root: Path) -> list[Path]:
    """All corpus files under ``root``, sorted. A file root is returned as-is if typed."""
    if root.is_file():
        return [root] if detect_type(root, root.parent) else []
    found = []
    for path in root.rglob("*.md"):
        rel_parts = path.relative_to(root).parts[:-1]
        if any(_skipped(p) for p in rel_parts):
            continue
        if detect_type(path, root):
            found.append(path)
    return sorted(found)
