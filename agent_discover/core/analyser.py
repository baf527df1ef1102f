"""Domain analyser — what the corpus already knows about a new domain."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

import structlog

from agent_discover.config import get_settings
from agent_discover.core.documents import DocumentType
from agent_discover.core.retriever import CorpusRetriever, SearchHit, get_retriever, score_percent
from agent_discover.utils.text import content_tokens, slugify

logger = structlog.get_logger()


@dataclass
class DomainAnalysis:
    """Related documents and vocabulary for a domain."""

    domain: str
    slug: str
    suggested_type: DocumentType
    type_explicit: bool = False
    related: list[SearchHit] = field(default_factory=list)
    vocabulary: list[str] = field(default_factory=list)
    subjects: list[str] = field(default_factory=list)
    tools: list[str] = field(default_factory=list)
    top_score: float = 0.0
    target_score: float = 0.6

    @property
    def meets_target(self) -> bool:
        return self.top_score >= self.target_score

    @property
    def filename(self) -> str:
        return f"{self.slug}{self.suggested_type.suffix}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain": self.domain,
            "slug": self.slug,
            "suggested_type": self.suggested_type.value,
            "type_explicit": self.type_explicit,
            "filename": self.filename,
            "top_score": round(self.top_score, 4),
            "top_percent": score_percent(self.top_score),
            "target_score": self.target_score,
            "meets_target": self.meets_target,
            "vocabulary": self.vocabulary,
            "subjects": self.subjects,
            "tools": self.tools,
            "related": [h.to_dict() for h in self.related],
        }


def vote_type(hits: list[SearchHit]) -> DocumentType:
    """Score-weighted majority type of the related documents."""
    weights: Counter = Counter()
    for hit in hits:
        try:
            weights[DocumentType(hit.doc_type)] += max(hit.score, 0.0)
        except ValueError:
            continue
    if not weights or max(weights.values()) <= 0:
        return DocumentType.AGENT
    return max(weights, key=lambda t: (weights[t], t == DocumentType.AGENT))


class DomainAnalyser:
    """Retrieves related documents and extracts reusable vocabulary."""

    def __init__(
        self,
        retriever: CorpusRetriever,
        target_score: float = 0.6,
        vocabulary_size: int = 20,
    ) -> None:
        self.retriever = retriever
        self.target_score = target_score
        self.vocabulary_size = vocabulary_size

    def analyse(
        self,
        domain: str,
        doc_type: str | None = None,
        limit: int = 8,
    ) -> DomainAnalysis:
        slug = slugify(domain)
        if not slug:
            raise ValueError(f"Domain '{domain}' has no usable characters")

        explicit = DocumentType(doc_type) if doc_type else None
        hits = self.retriever.search(domain, limit=limit)
        suggested = explicit or vote_type(hits)

        domain_words = set(content_tokens(domain))
        vocab: Counter = Counter()
        subjects: Counter = Counter()
        tools: Counter = Counter()
        for hit in hits:
            weight = max(hit.score, 0.0) + 0.01
            for term in set(content_tokens(f"{hit.description} {hit.snippet}")):
                if term not in domain_words and not term.isdigit():
                    vocab[term] += weight
            for subject in hit.subjects:
                if subject not in domain_words:
                    subjects[subject] += weight
            for tool in hit.tools:
                tools[tool] += 1

        analysis = DomainAnalysis(
            domain=domain,
            slug=slug,
            suggested_type=suggested,
            type_explicit=explicit is not None,
            related=hits,
            vocabulary=_ranked(vocab, self.vocabulary_size),
            subjects=_ranked(subjects, 10),
            tools=_ranked(tools, 12),
            top_score=hits[0].score if hits else 0.0,
            target_score=self.target_score,
        )
        logger.info(
            "analyser.analysed",
            domain=domain,
            related=len(hits),
            suggested_type=suggested.value,
            top_score=round(analysis.top_score, 3),
        )
        return analysis


def _ranked(counter: Counter, n: int) -> list[str]:
    return [k for k, _ in sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))[:n]]


@lru_cache
def get_analyser() -> DomainAnalyser:
    """Get cached analyser using the configured target score."""
    return DomainAnalyser(get_retriever(), target_score=get_settings().target_score)
