"""Template generator — skeletons and generation prompts for a new domain."""

from __future__ import annotations

from pathlib import Path

import structlog

from agent_discover.core.analyser import DomainAnalyser, DomainAnalysis
from agent_discover.core.prompts import GENERATION_PROMPT, SHAPE_GUIDES
from agent_discover.core.templates import render
from agent_discover.utils.text import excerpt

logger = structlog.get_logger()


def _list_block(items: list[str], empty: str = "(none found)") -> str:
    if not items:
        return empty
    return "\n".join(f"- {item}" for item in items)


class TemplateGenerator:
    """Drives ``agent-discover create``."""

    def __init__(self, analyser: DomainAnalyser) -> None:
        self.analyser = analyser

    def analyse(self, domain: str, doc_type: str | None = None) -> DomainAnalysis:
        return self.analyser.analyse(domain, doc_type=doc_type)

    def build_prompt(self, analysis: DomainAnalysis, exemplars: int = 3) -> str:
        """LLM-ready prompt quoting the closest related documents."""
        doc_type = analysis.suggested_type.value
        related = []
        for hit in analysis.related[:exemplars]:
            quote = excerpt(hit.snippet or hit.description, 400)
            related.append(
                f"### {hit.name} ({hit.doc_type}, {hit.percent:.0f}% match)\n"
                f"{hit.description}\n\n> {quote}"
            )
        return GENERATION_PROMPT.format(
            doc_type=doc_type,
            domain=analysis.domain,
            shape_guide=SHAPE_GUIDES[doc_type].format(filename=analysis.filename),
            vocabulary=", ".join(analysis.vocabulary) or "(none found)",
            subjects=", ".join(analysis.subjects) or "(none found)",
            tools=_list_block([f"`{t}`" for t in analysis.tools]),
            related="\n\n".join(related) or "(the corpus has no related documents yet)",
        )

    def render(self, analysis: DomainAnalysis) -> str:
        return render(analysis)

    def create(
        self,
        domain: str,
        doc_type: str | None = None,
        output_dir: Path | str = ".",
        force: bool = False,
    ) -> tuple[Path, DomainAnalysis]:
        """Analyse, render and write the skeleton. Returns the written path."""
        analysis = self.analyse(domain, doc_type)
        target = Path(output_dir) / analysis.filename
        if target.exists() and not force:
            raise FileExistsError(f"{target} already exists (use --force to overwrite)")

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.render(analysis), encoding="utf-8")
        logger.info(
            "generator.created",
            path=str(target),
            type=analysis.suggested_type.value,
            related=len(analysis.related),
        )
        return target, analysis
