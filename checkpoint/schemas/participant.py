"""Participant schemas."""
from typing import Optional
from pydantic import BaseModel


class ParticipantSummary(BaseModel):
    id: int
    name: str
    team_name: Optional[str] = None
    table_number: Optional[str] = None
    is_inside_venue: bool
    checked_in_day1: bool
    last_scan_at: Optional[str] = None
    dietary_restrictions: Optional[str] = None
