"""Shared API dependencies."""
from typing import Optional

from fastapi import Depends, Header, HTTPException, Path

from checkpoint.core.sanitization import normalize_staff_id, sanitize_station_id
from checkpoint.db import SessionLocal, get_db
from checkpoint.middleware.logging import STAFF_ID_HEADER
from checkpoint.services.dispatcher import ScanDispatcher
from checkpoint.services.stations import StationRegistry

# Stations live as long as the process; each scan opens its own session
station_registry = StationRegistry(SessionLocal)


def get_stations() -> StationRegistry:
    """Dependency returning the process-wide station registry."""
    return station_registry


def get_staff_id(
    x_staff_id: Optional[str] = Header(None, alias=STAFF_ID_HEADER),
) -> Optional[str]:
    """
    Acting staff id as supplied by the identity layer in front of this service.

    It is stamped on audit rows as-is; no permission check happens here.
    """
    try:
        return normalize_staff_id(x_staff_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def get_station(
    station_id: str = Path(...),
    stations: StationRegistry = Depends(get_stations),
) -> ScanDispatcher:
    try:
        return stations.get(sanitize_station_id(station_id))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


__all__ = ["get_db", "get_stations", "get_staff_id", "get_station"]
