"""Shared utilities for service layer."""
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session, joinedload

from checkpoint.core.utils import isoformat_utc
from checkpoint.db.models import Participant


def get_participant_by_token(db: Session, token: str) -> Optional[Participant]:
    """
    Get participant by exact badge token.

    Uses the unique index on ``qr_token``; the team is loaded in the same
    query since every scan result displays it.

    Args:
        db: Database session
        token: Token decoded from the badge

    Returns:
        Participant if found, None otherwise
    """
    return (
        db.query(Participant)
        .options(joinedload(Participant.team))
        .filter(Participant.qr_token == token)
        .first()
    )


@dataclass(frozen=True)
class ParticipantSnapshot:
    """Detached copy of a participant for display after the session closes."""

    id: int
    name: str
    team_name: Optional[str]
    table_number: Optional[str]
    is_inside_venue: bool
    checked_in_day1: bool
    last_scan_at: Optional[datetime]
    dietary_restrictions: Optional[str]

    @classmethod
    def from_model(cls, participant: Participant) -> "ParticipantSnapshot":
        team = participant.team
        return cls(
            id=participant.id,
            name=participant.name,
            team_name=team.team_name if team else None,
            table_number=team.table_number if team else None,
            is_inside_venue=bool(participant.is_inside_venue),
            checked_in_day1=bool(participant.checked_in_day1),
            last_scan_at=participant.last_scan_at,
            dietary_restrictions=participant.dietary_restrictions,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["last_scan_at"] = isoformat_utc(self.last_scan_at)
        return data
