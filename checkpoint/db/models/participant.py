"""Participant model."""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, false
from sqlalchemy.orm import relationship

from checkpoint.db.base import Base


class Participant(Base):
    """
    Badge holder. Rows are created by registration/import and never deleted here.

    Only the attendance gate mutates ``is_inside_venue``, ``last_scan_at`` and
    ``checked_in_day1``; ``checked_in_day1`` only ever goes from False to True.
    """

    __tablename__ = "participants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True)
    qr_token = Column(String(255), unique=True, nullable=False, index=True)
    is_inside_venue = Column(Boolean, nullable=False, default=False, server_default=false())
    last_scan_at = Column(DateTime(timezone=True), nullable=True)
    checked_in_day1 = Column(Boolean, nullable=False, default=False, server_default=false())
    dietary_restrictions = Column(String(255), nullable=True)

    # Relationships
    team = relationship("Team", back_populates="participants")
    attendance_records = relationship("AttendanceRecord", back_populates="participant")
    redemptions = relationship("Redemption", back_populates="participant")
