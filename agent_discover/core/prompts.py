"""Prompt text emitted by ``create --prompt-only``.

The output is meant to be pasted into an assistant, which then writes the
document.
"""

SHAPE_GUIDES = {
    "agent": """\
File: `{filename}`
Front matter: `name`, `description`, `tools`.
Sections: Expertise, Behaviours, Boundaries, Related Agents.
An agent defines a persona: what it knows, how it works, and where it stops.""",
    "instruction": """\
File: `{filename}`
Front matter: `description`, `applyTo` (a glob of the files it governs).
Sections: Guidelines, Conventions, Examples.
An instruction is applied automatically to matching files. Keep it prescriptive.""",
    "prompt": """\
File: `{filename}`
Front matter: `mode: agent`, `description`, `tools`.
Sections: Goal, Inputs, Workflow, Output.
A prompt is a reusable task workflow with numbered steps and a defined deliverable.""",
    "chatmode": """\
File: `{filename}`
Front matter: `description`, `tools`.
Sections: Purpose, Behaviour, Tool Usage.
A chatmode configures an interactive session: tone, allowed tools, and focus.""",
}

GENERATION_PROMPT = """\
You are writing a new {doc_type} document for an AI coding assistant corpus.

## Domain

{domain}

## Shape

{shape_guide}

## Vocabulary from related documents

{vocabulary}

## Subjects

{subjects}

## Tools used by related documents

{tools}

## Related documents

{related}

## Requirements

1. Match the tone and structure of the related documents, but do not copy them.
2. Stay inside the domain. Name neighbouring documents for anything outside it.
3. Use concrete, checkable guidance rather than general advice.
4. Output only the Markdown file, starting with the `---` front matter line.
"""
