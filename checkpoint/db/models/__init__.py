"""Database models."""
from checkpoint.db.models.team import Team
from checkpoint.db.models.participant import Participant
from checkpoint.db.models.attendance_record import AttendanceRecord, ScanDirection
from checkpoint.db.models.redemption_session import RedemptionSession
from checkpoint.db.models.redemption import Redemption

__all__ = [
    "Team",
    "Participant",
    "AttendanceRecord",
    "ScanDirection",
    "RedemptionSession",
    "Redemption",
]
