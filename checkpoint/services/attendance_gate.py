"""Venue entry/exit toggle."""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from checkpoint.core.constants import MSG_UPDATE_FAILED
from checkpoint.core.logging_config import get_logger
from checkpoint.db.models import AttendanceRecord, Participant, ScanDirection
from checkpoint.services.errors import StorageError
from checkpoint.services.utils import ParticipantSnapshot

logger = get_logger(__name__)


@dataclass(frozen=True)
class AttendanceOutcome:
    direction: ScanDirection
    participant: ParticipantSnapshot
    record_id: int


def toggle(db: Session, participant: Participant, staff_id: Optional[str] = None) -> AttendanceOutcome:
    """Flip a participant between inside and outside the venue.

    The new state is the negation of the stored one, whatever the physical
    direction was; two quick scans of one badge log an entry and an exit.
    The read-modify-write is not guarded against another station toggling
    the same badge at the same instant.

    The participant update and the audit row are committed together, so an
    audit row never exists without its state change and vice versa.

    Args:
        db: Database session the participant was loaded from
        participant: Participant to toggle
        staff_id: Acting staff member, None for unattended scans

    Returns:
        AttendanceOutcome with the direction taken and the updated participant

    Raises:
        StorageError: if the transaction could not be committed
    """
    inside = not participant.is_inside_venue
    direction = ScanDirection.ENTRY if inside else ScanDirection.EXIT
    now = datetime.now(timezone.utc)
    participant_id = participant.id

    participant.is_inside_venue = inside
    participant.last_scan_at = now
    # Sticky: once checked in, a later exit never clears it
    participant.checked_in_day1 = bool(participant.checked_in_day1) or inside

    record = AttendanceRecord(
        participant_id=participant_id,
        direction=direction.value,
        timestamp=now,
        staff_id=staff_id,
    )

    try:
        db.add(record)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            "attendance_write_failed",
            participant_id=participant_id,
            direction=direction.value,
            error=str(e),
        )
        raise StorageError(MSG_UPDATE_FAILED) from e

    logger.info(
        "attendance_recorded",
        participant_id=participant_id,
        direction=direction.value,
        record_id=record.id,
    )

    return AttendanceOutcome(
        direction=direction,
        participant=ParticipantSnapshot.from_model(participant),
        record_id=record.id,
    )
