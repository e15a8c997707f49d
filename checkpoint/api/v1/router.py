"""Main API router for v1."""
from fastapi import APIRouter

from checkpoint.api.v1.endpoints import scans, sessions, stats

api_router = APIRouter(prefix="/api/v1")

# Include all endpoint routers
api_router.include_router(scans.router, prefix="/stations", tags=["Stations"])
api_router.include_router(sessions.router, prefix="/redemption-sessions", tags=["Redemption Sessions"])
api_router.include_router(stats.router, prefix="/stats", tags=["Stats"])
