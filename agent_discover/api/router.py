"""Main API router — aggregates all endpoint modules."""

from fastapi import APIRouter

from agent_discover.api.analyze import router as analyze_router
from agent_discover.api.leaderboard import router as leaderboard_router
from agent_discover.api.search import router as search_router

api_router = APIRouter()

api_router.include_router(search_router, tags=["search"])
api_router.include_router(leaderboard_router, tags=["leaderboard"])
api_router.include_router(analyze_router, tags=["analysis"])
