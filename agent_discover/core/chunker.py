"""Split documents into heading-sized chunks for embedding."""

from __future__ import annotations

import re
from dataclasses import dataclass

from agent_discover.core.documents import CorpusDocument

HEADING_RE = re.compile(r"^(#{1,3})\s+(.+?)\s*#*\s*$")


@dataclass
class Chunk:
    """An embeddable slice of a document."""

    index: int
    heading: str
    text: str


def split_sections(body: str) -> list[tuple[str, str]]:
    """Split a Markdown body into (heading, content) pairs.

    Text before the first heading gets an empty heading. Headings inside
    fenced code blocks are content.
    """
    sections: list[tuple[str, list[str]]] = [("", [])]
    in_fence = False
    for line in body.splitlines():
        if line.lstrip().startswith(("```", "~~~")):
            in_fence = not in_fence
        match = None if in_fence else HEADING_RE.match(line)
        if match:
            sections.append((match.group(2).strip(), []))
        else:
            sections[-1][1].append(line)
    return [
        (heading, "\n".join(lines).strip())
        for heading, lines in sections
        if heading or "\n".join(lines).strip()
    ]


def window(text: str, max_chars: int, overlap: int) -> list[str]:
    """Cut text into overlapping windows, preferring paragraph then word breaks."""
    if len(text) <= max_chars:
        return [text]
    overlap = min(overlap, max_chars // 2)
    pieces: list[str] = []
    start = 0
    n = len(text)
    while start < n:
        end = min(start + max_chars, n)
        if end < n:
            brk = text.rfind("\n\n", start + max_chars // 2, end)
            if brk == -1:
                brk = text.rfind(" ", start + max_chars // 2, end)
            if brk != -1:
                end = brk
        pieces.append(text[start:end].strip())
        if end >= n:
            break
        start = max(end - overlap, start + 1)
    return [p for p in pieces if p]


def context_header(doc: CorpusDocument) -> str:
    header = f"{doc.name} ({doc.doc_type.value})"
    if doc.description:
        header += ": " + " ".join(doc.description.split())
    return header


def chunk_document(doc: CorpusDocument, max_chars: int = 1200, overlap: int = 150) -> list[Chunk]:
    """Chunk a document. Always returns at least one chunk."""
    header = context_header(doc)
    chunks: list[Chunk] = []
    for heading, content in split_sections(doc.body):
        if not content:
            continue
        for piece in window(content, max_chars, overlap):
            prefix = f"{header}\n## {heading}\n" if heading else f"{header}\n"
            chunks.append(Chunk(index=len(chunks), heading=heading, text=prefix + piece))

    if not chunks:
        chunks.append(Chunk(index=0, heading="", text=header))
    return chunks
