"""Domain analysis endpoint, the API side of ``create --analyze-only``."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from agent_discover.api.models import AnalysisResponse, AnalyzeRequest
from agent_discover.core.analyser import DomainAnalyser, get_analyser
from agent_discover.core.embeddings import EmbeddingError
from agent_discover.db.client import VectorStoreError

router = APIRouter()


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze(
    data: AnalyzeRequest,
    analyser: DomainAnalyser = Depends(get_analyser),
) -> AnalysisResponse:
    """Related documents, vocabulary and suggested type for a domain."""
    try:
        analysis = analyser.analyse(data.domain, doc_type=data.type)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (VectorStoreError, EmbeddingError) as e:
        raise HTTPException(status_code=503, detail=str(e))
    return AnalysisResponse(**analysis.to_dict())
