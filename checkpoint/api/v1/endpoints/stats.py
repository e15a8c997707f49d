"""Event dashboard endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from checkpoint.api.deps import get_db
from checkpoint.core.constants import RECENT_ACTIVITY_LIMIT
from checkpoint.core.rate_limit import RATE_LIMITS, limiter
from checkpoint.schemas import EventStats, RecentActivity
from checkpoint.services.stats import get_event_stats, get_recent_activity

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=EventStats)
@limiter.limit(RATE_LIMITS["read"])
async def event_stats_endpoint(request: Request, db: Session = Depends(get_db)):
    """Participants, people inside, day-one check-ins, meals served and teams."""
    try:
        return get_event_stats(db)
    except Exception as e:
        logger.exception(f"Error computing event stats: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/activity", response_model=RecentActivity)
@limiter.limit(RATE_LIMITS["read"])
async def recent_activity_endpoint(
    request: Request,
    limit: int = Query(RECENT_ACTIVITY_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Latest attendance scans and meal redemptions, newest first."""
    try:
        return get_recent_activity(db, limit)
    except Exception as e:
        logger.exception(f"Error retrieving recent activity: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
