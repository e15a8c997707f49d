"""Pydantic schemas for request/response validation."""
from checkpoint.schemas.participant import ParticipantSummary
from checkpoint.schemas.scan import ScanRequest, ScanResponse, StationConfig, StationStatus
from checkpoint.schemas.session import RedemptionSessionResponse, SessionStats
from checkpoint.schemas.stats import (
    AttendanceActivity,
    EventStats,
    RecentActivity,
    RedemptionActivity,
)

__all__ = [
    "ParticipantSummary",
    "ScanRequest",
    "ScanResponse",
    "StationConfig",
    "StationStatus",
    "RedemptionSessionResponse",
    "SessionStats",
    "EventStats",
    "AttendanceActivity",
    "RedemptionActivity",
    "RecentActivity",
]
