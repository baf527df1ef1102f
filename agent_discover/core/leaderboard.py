"""Subject leaderboard — which documents cover a subject best."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Any

import structlog

from agent_discover.core.retriever import CorpusRetriever, get_retriever, score_percent

logger = structlog.get_logger()

SUBJECT_BONUS = 0.15


@dataclass
class LeaderboardEntry:
    rank: int
    name: str
    doc_type: str
    path: str
    score: float
    similarity: float
    subject_match: bool

    @property
    def percent(self) -> float:
        return score_percent(self.score)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["score"] = round(self.score, 4)
        data["similarity"] = round(self.similarity, 4)
        data["percent"] = self.percent
        return data


def _declares_subject(subjects: list[str], subject: str) -> bool:
    wanted = subject.strip().lower()
    return any(s.strip().lower() == wanted for s in subjects)


class Leaderboard:
    """Ranks documents for a subject: similarity plus a bonus for declared subjects."""

    def __init__(self, retriever: CorpusRetriever, bonus: float = SUBJECT_BONUS) -> None:
        self.retriever = retriever
        self.bonus = bonus

    def rank(
        self,
        subject: str,
        limit: int = 10,
        doc_type: str | None = None,
    ) -> list[LeaderboardEntry]:
        if not subject or not subject.strip():
            raise ValueError("Subject must not be empty")

        # wider candidate pool than the board, bonus can reorder it
        hits = self.retriever.search(subject, limit=limit * 3, doc_type=doc_type)

        scored = []
        for hit in hits:
            match = _declares_subject(hit.subjects, subject)
            score = min(1.0, hit.score + self.bonus) if match else hit.score
            scored.append((score, hit, match))
        scored.sort(key=lambda item: (-item[0], item[1].name))

        entries = [
            LeaderboardEntry(
                rank=i,
                name=hit.name,
                doc_type=hit.doc_type,
                path=hit.path,
                score=score,
                similarity=hit.score,
                subject_match=match,
            )
            for i, (score, hit, match) in enumerate(scored[:limit], start=1)
        ]
        logger.debug("leaderboard.ranked", subject=subject, entries=len(entries))
        return entries


@lru_cache
def get_leaderboard() -> Leaderboard:
    """Get cached leaderboard."""
    return Leaderboard(get_retriever())
