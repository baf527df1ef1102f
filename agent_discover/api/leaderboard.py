"""Subject leaderboard endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from agent_discover.api.models import DOC_TYPE_PATTERN, LeaderboardEntryResponse
from agent_discover.core.embeddings import EmbeddingError
from agent_discover.core.leaderboard import Leaderboard, get_leaderboard
from agent_discover.db.client import VectorStoreError

router = APIRouter()


@router.get("/leaderboard", response_model=list[LeaderboardEntryResponse])
async def leaderboard(
    subject: str = Query(..., min_length=1),
    type: str | None = Query(default=None, pattern=DOC_TYPE_PATTERN),
    limit: int = Query(default=10, ge=1, le=100),
    board: Leaderboard = Depends(get_leaderboard),
) -> list[LeaderboardEntryResponse]:
    """Documents ranked for a subject."""
    try:
        entries = board.rank(subject, limit=limit, doc_type=type)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (VectorStoreError, EmbeddingError) as e:
        raise HTTPException(status_code=503, detail=str(e))
    return [LeaderboardEntryResponse(**e.to_dict()) for e in entries]
