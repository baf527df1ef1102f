"""Corpus retriever — similarity search grouped by document."""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
from functools import lru_cache
from typing import Any

import structlog

from agent_discover.core.documents import DocumentType
from agent_discover.core.embeddings import Embedder, get_default_embedder
from agent_discover.db.client import VectorStoreClient, get_vector_store
from agent_discover.utils.text import excerpt

logger = structlog.get_logger()

# chunks fetched per requested document
OVERFETCH = 4


def score_percent(score: float) -> float:
    """Relevance as a percentage, clamped to [0, 100]."""
    return round(max(0.0, min(1.0, score)) * 100, 1)


@dataclass
class SearchHit:
    """A document matched by a query, scored by its best chunk."""

    name: str
    doc_type: str
    description: str
    path: str
    score: float
    subjects: list[str] = field(default_factory=list)
    tools: list[str] = field(default_factory=list)
    heading: str = ""
    snippet: str = ""
    matched_chunks: int = 1

    @property
    def percent(self) -> float:
        return score_percent(self.score)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["score"] = round(self.score, 4)
        data["percent"] = self.percent
        return data


def _validate_type(doc_type: str | None) -> str | None:
    if doc_type is None:
        return None
    try:
        return DocumentType(doc_type).value
    except ValueError:
        valid = ", ".join(t.value for t in DocumentType)
        raise ValueError(f"Unknown document type '{doc_type}' (expected one of: {valid})") from None


def _chunk_body(text: str) -> str:
    """Chunk text without the context header the chunker prepends."""
    lines = text.splitlines()[1:]
    if lines and lines[0].startswith("## "):
        lines = lines[1:]
    return "\n".join(lines)


class CorpusRetriever:
    """Answers similarity queries against the corpus collection."""

    def __init__(self, store: VectorStoreClient, embedder: Embedder) -> None:
        self.store = store
        self.embedder = embedder

    def search(
        self,
        query: str,
        limit: int = 10,
        doc_type: str | None = None,
        min_score: float = 0.0,
    ) -> list[SearchHit]:
        """Documents most similar to ``query``, best first."""
        if not query or not query.strip():
            raise ValueError("Search query must not be empty")
        if limit < 1:
            raise ValueError("limit must be at least 1")
        doc_type = _validate_type(doc_type)

        vector = self.embedder.embed([query])[0]
        filters = {"doc_type": doc_type} if doc_type else None
        points = self.store.search(vector, limit=limit * OVERFETCH, filters=filters)

        hits: dict[str, SearchHit] = {}
        for point in points:
            payload = point.payload
            key = payload.get("path") or payload.get("doc_name", point.id)
            hit = hits.get(key)
            if hit is not None:
                hit.matched_chunks += 1
                continue
            # points arrive best-first, so the first chunk per document is its best
            hits[key] = SearchHit(
                name=payload.get("doc_name", ""),
                doc_type=payload.get("doc_type", ""),
                description=payload.get("description", ""),
                path=payload.get("path", ""),
                score=point.score,
                subjects=list(payload.get("subjects") or []),
                tools=list(payload.get("tools") or []),
                heading=payload.get("heading", ""),
                snippet=excerpt(_chunk_body(payload.get("text", ""))),
            )

        results = [h for h in hits.values() if h.score >= min_score]
        results.sort(key=lambda h: (-h.score, h.name))
        logger.debug("retriever.search", query=query, candidates=len(points), hits=len(results))
        return results[:limit]

    def stats(self) -> dict[str, Any]:
        """Document and chunk counts, per type."""
        if not self.store.collection_exists():
            return {"collection": self.store.collection, "documents": 0, "chunks": 0, "by_type": {}}

        docs_by_type: dict[str, set[str]] = {}
        chunks = 0
        for payload in self.store.scroll():
            chunks += 1
            docs_by_type.setdefault(payload.get("doc_type", "unknown"), set()).add(
                payload.get("path", "")
            )
        by_type = Counter({t: len(paths) for t, paths in docs_by_type.items()})
        return {
            "collection": self.store.collection,
            "documents": sum(by_type.values()),
            "chunks": chunks,
            "by_type": dict(sorted(by_type.items())),
        }


@lru_cache
def get_retriever() -> CorpusRetriever:
    """Get cached retriever over the configured collection."""
    return CorpusRetriever(get_vector_store(), get_default_embedder())
