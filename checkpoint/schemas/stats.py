"""Dashboard schemas."""
from typing import List, Optional
from pydantic import BaseModel


class EventStats(BaseModel):
    total_participants: int
    inside_venue: int
    checked_in_day1: int
    total_redemptions: int
    total_teams: int


class AttendanceActivity(BaseModel):
    id: int
    participant_id: int
    participant_name: Optional[str] = None
    direction: str
    timestamp: Optional[str] = None
    staff_id: Optional[str] = None


class RedemptionActivity(BaseModel):
    id: int
    participant_id: int
    participant_name: Optional[str] = None
    session_key: str
    timestamp: Optional[str] = None
    staff_id: Optional[str] = None


class RecentActivity(BaseModel):
    attendance: List[AttendanceActivity]
    redemptions: List[RedemptionActivity]
