"""Pydantic request/response models for the API."""

from __future__ import annotations

from pydantic import BaseModel, Field

DOC_TYPE_PATTERN = r"^(agent|instruction|prompt|chatmode)$"


# --- Search ---


class SearchHitResponse(BaseModel):
    name: str
    doc_type: str
    description: str
    path: str
    score: float
    percent: float
    subjects: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)
    heading: str = ""
    snippet: str = ""
    matched_chunks: int = 1


# --- Leaderboard ---


class LeaderboardEntryResponse(BaseModel):
    rank: int
    name: str
    doc_type: str
    path: str
    score: float
    similarity: float
    percent: float
    subject_match: bool


# --- Analysis ---


class AnalyzeRequest(BaseModel):
    """Analyse a domain before creating a document for it."""

    domain: str = Field(..., min_length=1, max_length=200)
    type: str | None = Field(default=None, pattern=DOC_TYPE_PATTERN)


class AnalysisResponse(BaseModel):
    domain: str
    slug: str
    suggested_type: str
    type_explicit: bool
    filename: str
    top_score: float
    top_percent: float
    target_score: float
    meets_target: bool
    vocabulary: list[str]
    subjects: list[str]
    tools: list[str]
    related: list[SearchHitResponse]


# --- Stats ---


class StatsResponse(BaseModel):
    collection: str
    documents: int
    chunks: int
    by_type: dict[str, int]
