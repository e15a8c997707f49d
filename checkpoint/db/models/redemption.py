"""Redemption model."""
from datetime import datetime, timezone as tz

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from checkpoint.core.constants import REDEMPTION_UNIQUE_CONSTRAINT
from checkpoint.db.base import Base


class Redemption(Base):
    """
    Append-only claim row.

    The unique constraint on (participant_id, session_key) is what makes a
    claim happen at most once, no matter how many stations race on it.
    """

    __tablename__ = "redemptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    participant_id = Column(Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    session_key = Column(
        String(50),
        ForeignKey("redemption_sessions.session_key", onupdate="CASCADE"),
        nullable=False,
    )
    timestamp = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    staff_id = Column(String(64), nullable=True)

    # Relationships
    participant = relationship("Participant", back_populates="redemptions")
    session = relationship("RedemptionSession", back_populates="redemptions")

    __table_args__ = (
        Index("idx_redemptions_session", "session_key"),
        UniqueConstraint("participant_id", "session_key", name=REDEMPTION_UNIQUE_CONSTRAINT),
    )
