from .attendance_gate import AttendanceOutcome, toggle
from .dispatcher import ScanDispatcher, ScanMode, ScanOutcome, ScanResult, ScanState
from .errors import (
    ScanError,
    ScanInProgress,
    SessionInactive,
    SessionNotSelected,
    StorageError,
    TokenNotFound,
)
from .redemption_ledger import (
    RedemptionOutcome,
    RedemptionStatus,
    get_active_sessions,
    redeem,
    redemption_counts,
)
from .scan_session import CameraUnavailable, ScanSession
from .stations import StationRegistry
from .stats import get_event_stats, get_recent_activity, get_session_stats
from .token_resolver import resolve

__all__ = [
    # token resolution
    "resolve",
    # attendance
    "AttendanceOutcome",
    "toggle",
    # redemption
    "RedemptionOutcome",
    "RedemptionStatus",
    "get_active_sessions",
    "redeem",
    "redemption_counts",
    # dispatch
    "ScanDispatcher",
    "ScanMode",
    "ScanOutcome",
    "ScanResult",
    "ScanState",
    "StationRegistry",
    # capture
    "CameraUnavailable",
    "ScanSession",
    # stats
    "get_event_stats",
    "get_recent_activity",
    "get_session_stats",
    # errors
    "ScanError",
    "ScanInProgress",
    "SessionInactive",
    "SessionNotSelected",
    "StorageError",
    "TokenNotFound",
]
