"""AttendanceRecord model."""
import enum
from datetime import datetime, timezone as tz

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from checkpoint.db.base import Base


class ScanDirection(str, enum.Enum):
    ENTRY = "entry"
    EXIT = "exit"


class AttendanceRecord(Base):
    """Append-only audit row, one per successful attendance scan."""

    __tablename__ = "attendance_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    participant_id = Column(Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    direction = Column(String(5), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    staff_id = Column(String(64), nullable=True)  # NULL for unattended scans

    # Relationships
    participant = relationship("Participant", back_populates="attendance_records")

    __table_args__ = (
        Index("idx_attendance_records_participant", "participant_id"),
        Index("idx_attendance_records_timestamp", "timestamp"),
        CheckConstraint("direction IN ('entry', 'exit')", name="ck_attendance_direction"),
    )
