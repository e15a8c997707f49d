"""RedemptionSession model."""
from datetime import datetime, timezone as tz

from sqlalchemy import Boolean, Column, DateTime, Integer, String, true
from sqlalchemy.orm import relationship

from checkpoint.db.base import Base


class RedemptionSession(Base):
    """A claimable window such as a meal. Managed by admins, read-only here."""

    __tablename__ = "redemption_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_key = Column(String(50), unique=True, nullable=False, index=True)
    display_label = Column(String(200), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    redemptions = relationship("Redemption", back_populates="session")
