"""Lint corpus documents before they are ingested."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from agent_discover.core.documents import (
    DocumentParseError,
    DocumentType,
    discover_documents,
    parse_document,
)


@dataclass
class Finding:
    """A single validation finding."""

    path: str
    rule: str
    severity: str  # warning, error
    message: str


@dataclass
class ValidationResult:
    """Result of validating a corpus path."""

    checked: int = 0
    findings: list[Finding] = field(default_factory=list)

    @property
    def errors(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == "error"]

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == "warning"]

    @property
    def ok(self) -> bool:
        return not self.errors


class CorpusValidator:
    """Checks front matter conventions for each document type."""

    def __init__(self, min_description: int = 20) -> None:
        self.min_description = min_description

    def validate(self, root: Path) -> ValidationResult:
        if not root.exists():
            raise ValueError(f"Corpus path does not exist: {root}")
        base = root if root.is_dir() else root.parent
        result = ValidationResult()
        for path in discover_documents(root):
            result.checked += 1
            result.findings.extend(self.check(path, path.relative_to(base).as_posix()))
        return result

    def check(self, path: Path, label: str) -> list[Finding]:
        findings: list[Finding] = []
        try:
            doc = parse_document(path)
        except (DocumentParseError, UnicodeDecodeError) as e:
            return [Finding(label, "parse", "error", str(e))]

        meta = doc.metadata
        if not doc.body:
            findings.append(Finding(label, "empty-body", "error", "Document has no body"))

        if not meta.get("description"):
            findings.append(
                Finding(label, "description", "warning", "Front matter has no description")
            )
        elif len(str(meta["description"])) < self.min_description:
            findings.append(
                Finding(
                    label,
                    "description",
                    "warning",
                    f"Description is shorter than {self.min_description} characters",
                )
            )

        if doc.doc_type == DocumentType.INSTRUCTION and not meta.get("applyTo"):
            findings.append(
                Finding(label, "apply-to", "error", "Instruction file has no applyTo glob")
            )
        if doc.doc_type == DocumentType.AGENT and not meta.get("name"):
            findings.append(
                Finding(label, "name", "warning", "Agent has no name; the file name is used")
            )
        if "tools" in meta and not isinstance(meta["tools"], (list, str)):
            findings.append(
                Finding(label, "tools", "error", "tools must be a list or comma-separated string")
            )
        return findings
