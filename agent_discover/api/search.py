"""Search and stats endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from agent_discover.api.models import DOC_TYPE_PATTERN, SearchHitResponse, StatsResponse
from agent_discover.core.embeddings import EmbeddingError
from agent_discover.core.retriever import CorpusRetriever, get_retriever
from agent_discover.db.client import VectorStoreError

router = APIRouter()


@router.get("/search", response_model=list[SearchHitResponse])
async def search(
    q: str = Query(..., min_length=1),
    type: str | None = Query(default=None, pattern=DOC_TYPE_PATTERN),
    limit: int = Query(default=10, ge=1, le=100),
    min_score: float = Query(default=0.0, ge=0.0, le=1.0),
    retriever: CorpusRetriever = Depends(get_retriever),
) -> list[SearchHitResponse]:
    """Documents most similar to the query."""
    try:
        hits = retriever.search(q, limit=limit, doc_type=type, min_score=min_score)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (VectorStoreError, EmbeddingError) as e:
        raise HTTPException(status_code=503, detail=str(e))
    return [SearchHitResponse(**h.to_dict()) for h in hits]


@router.get("/stats", response_model=StatsResponse)
async def stats(retriever: CorpusRetriever = Depends(get_retriever)) -> StatsResponse:
    """Document and chunk counts in the collection."""
    try:
        return StatsResponse(**retriever.stats())
    except VectorStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
