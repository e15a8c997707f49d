"""Redemption session schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class RedemptionSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    session_key: str
    display_label: str
    is_active: bool
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class SessionStats(BaseModel):
    session_key: str
    display_label: str
    is_active: bool
    redeemed: int
    redemption_rate: Optional[float] = None
