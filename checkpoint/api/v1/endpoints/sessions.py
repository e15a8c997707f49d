"""Redemption session endpoints."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from checkpoint.api.deps import get_db
from checkpoint.core.rate_limit import RATE_LIMITS, limiter
from checkpoint.schemas import RedemptionSessionResponse, SessionStats
from checkpoint.services.redemption_ledger import get_active_sessions
from checkpoint.services.stats import get_session_stats

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/active", response_model=List[RedemptionSessionResponse])
@limiter.limit(RATE_LIMITS["read"])
async def active_sessions_endpoint(request: Request, db: Session = Depends(get_db)):
    """
    Sessions a food station may select.

    Read fresh on every call; switching a session off takes effect at the
    next scan without any station restart.
    """
    try:
        return get_active_sessions(db)
    except Exception as e:
        logger.exception(f"Error retrieving active sessions: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/stats", response_model=List[SessionStats])
@limiter.limit(RATE_LIMITS["read"])
async def session_stats_endpoint(request: Request, db: Session = Depends(get_db)):
    """Served count per session and the share of checked-in participants it covers."""
    try:
        return get_session_stats(db)
    except Exception as e:
        logger.exception(f"Error computing session stats: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
