"""Scanner station endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from checkpoint.api.deps import get_staff_id, get_station, get_stations
from checkpoint.core.rate_limit import RATE_LIMITS, get_station_key, limiter
from checkpoint.schemas import ScanRequest, ScanResponse, StationConfig, StationStatus
from checkpoint.services.dispatcher import ScanDispatcher
from checkpoint.services.errors import ScanInProgress
from checkpoint.services.stations import StationRegistry

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[StationStatus])
async def list_stations_endpoint(stations: StationRegistry = Depends(get_stations)):
    """List every station this process has seen, with its current state."""
    return stations.statuses()


@router.get("/{station_id}", response_model=StationStatus)
async def get_station_endpoint(station: ScanDispatcher = Depends(get_station)):
    """Current state, mode, selected session and unacknowledged result of a station."""
    return station.status()


@router.post("/{station_id}/scans", response_model=ScanResponse)
@limiter.limit(RATE_LIMITS["scan"], key_func=get_station_key)
def scan_endpoint(
    request: Request,
    scan: ScanRequest,
    station: ScanDispatcher = Depends(get_station),
    staff_id: Optional[str] = Depends(get_staff_id),
):
    """
    Process one scanned badge at a station.

    The station resolves the token, then either toggles venue attendance or
    claims the selected meal session, and settles on a single result. The
    result stays on the station until it is acknowledged through the reset
    endpoint; scans arriving before that are refused with 409.

    Declared as a plain function so FastAPI runs it in the threadpool and a
    slow write at one station does not hold up the others.

    Args:
        request: FastAPI Request (for rate limiting)
        scan: ScanRequest with the decoded token, optional mode and session key
        station: Station dispatcher (resolved from the path)
        staff_id: Acting staff id from the X-Staff-Id header, may be absent

    Returns:
        ScanResponse with success flag, operator message and participant

    Raises:
        HTTPException: 409 if the station is busy or awaiting acknowledgement

    Example:
        Request:
            POST /api/v1/stations/gate-a/scans
            X-Staff-Id: volunteer-17
            {
                "token": "abc123",
                "mode": "attendance"
            }

        Response (200):
            {
                "success": true,
                "message": "Entry Recorded",
                "outcome": "entry",
                "mode": "attendance",
                "participant": {"id": 4, "name": "Ada", "team_name": "Null Pointers", ...},
                "scanned_at": "2026-03-14T09:02:11.120000+00:00"
            }

        Request (food station, repeat claim):
            POST /api/v1/stations/canteen/scans
            {
                "token": "abc123",
                "mode": "food",
                "session_key": "LUNCH_DAY1"
            }

        Response (200):
            {
                "success": false,
                "message": "Already claimed this meal!",
                "outcome": "already_claimed",
                ...
            }

    Note:
        Denials (unknown badge, no session, already claimed, storage failure)
        are regular 200 responses with success=false; they are results to
        show the operator, not API errors.
    """
    result = station.process(
        scan.token,
        mode=scan.mode,
        staff_id=staff_id,
        session_key=scan.session_key,
    )

    if result is None:
        logger.info(f"Scan refused at station {station.station_id} (state={station.state.value})")
        raise HTTPException(
            status_code=409,
            detail="Station is busy or has an unacknowledged result; reset it first",
        )

    return result.to_dict()


@router.post("/{station_id}/reset", response_model=StationStatus)
@limiter.limit(RATE_LIMITS["station_control"], key_func=get_station_key)
def reset_station_endpoint(request: Request, station: ScanDispatcher = Depends(get_station)):
    """Acknowledge the displayed result so the station accepts the next scan."""
    station.reset()
    return station.status()


@router.put("/{station_id}/config", response_model=StationStatus)
@limiter.limit(RATE_LIMITS["station_control"], key_func=get_station_key)
def configure_station_endpoint(
    request: Request,
    config: StationConfig,
    station: ScanDispatcher = Depends(get_station),
):
    """
    Set a station's mode and meal session.

    Clears any unacknowledged result. Refused with 409 while a scan is running.
    """
    try:
        station.configure(mode=config.mode, session_key=config.session_key)
    except ScanInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    return station.status()
