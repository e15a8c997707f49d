"""Scan and station schemas."""
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from checkpoint.core.constants import MAX_SESSION_KEY_LENGTH
from checkpoint.core.sanitization import sanitize_session_key
from checkpoint.schemas.participant import ParticipantSummary
from checkpoint.services.dispatcher import ScanMode, ScanOutcome, ScanState


def _optional_session_key(v: Optional[str]) -> Optional[str]:
    if v is None or not v.strip():
        return None
    return sanitize_session_key(v)


class ScanRequest(BaseModel):
    # Not validated here: an empty, odd or over-long token must still settle as "Invalid QR code"
    token: str
    mode: Optional[ScanMode] = None
    session_key: Optional[str] = Field(None, max_length=MAX_SESSION_KEY_LENGTH)

    @field_validator('session_key')
    @classmethod
    def sanitize_session_key_field(cls, v: Optional[str]) -> Optional[str]:
        return _optional_session_key(v)


class ScanResponse(BaseModel):
    success: bool
    message: str
    outcome: ScanOutcome
    mode: ScanMode
    participant: Optional[ParticipantSummary] = None
    scanned_at: str


class StationConfig(BaseModel):
    mode: Optional[ScanMode] = None
    session_key: Optional[str] = Field(None, max_length=MAX_SESSION_KEY_LENGTH)

    @field_validator('session_key')
    @classmethod
    def sanitize_session_key_field(cls, v: Optional[str]) -> Optional[str]:
        return _optional_session_key(v)


class StationStatus(BaseModel):
    station_id: str
    state: ScanState
    mode: ScanMode
    session_key: Optional[str] = None
    result: Optional[ScanResponse] = None
