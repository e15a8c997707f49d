"""Claim-once redemption ledger."""
import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from checkpoint.core.config import settings
from checkpoint.core.constants import MSG_RECORD_FAILED, REDEMPTION_UNIQUE_CONSTRAINT
from checkpoint.core.logging_config import get_logger
from checkpoint.core.utils import is_within_window
from checkpoint.db.models import Participant, Redemption, RedemptionSession
from checkpoint.services.errors import SessionInactive, SessionNotSelected, StorageError

logger = get_logger(__name__)


class RedemptionStatus(str, enum.Enum):
    GRANTED = "granted"
    ALREADY_CLAIMED = "already_claimed"


class WriteResult(str, enum.Enum):
    INSERTED = "inserted"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class RedemptionOutcome:
    status: RedemptionStatus
    session_key: str
    display_label: str
    redemption_id: Optional[int] = None

    @property
    def granted(self) -> bool:
        return self.status is RedemptionStatus.GRANTED


def get_active_sessions(db: Session) -> List[RedemptionSession]:
    """Sessions a station may currently select, ordered by start time then key."""
    return (
        db.query(RedemptionSession)
        .filter(RedemptionSession.is_active.is_(True))
        .order_by(RedemptionSession.start_time, RedemptionSession.session_key)
        .all()
    )


def get_session(db: Session, session_key: str) -> Optional[RedemptionSession]:
    return db.query(RedemptionSession).filter(RedemptionSession.session_key == session_key).first()


def require_active_session(
    db: Session, session_key: Optional[str], now: Optional[datetime] = None
) -> RedemptionSession:
    """
    Load the session a redemption is made against.

    Raises:
        SessionNotSelected: if no key was given
        SessionInactive: if the key is unknown, the session is switched off,
            or the time window is enforced and currently closed
    """
    if not session_key:
        raise SessionNotSelected()

    session = get_session(db, session_key)
    if session is None or not session.is_active:
        raise SessionInactive()

    if settings.ENFORCE_SESSION_WINDOW and not is_within_window(
        session.start_time,
        session.end_time,
        buffer_minutes=settings.SESSION_WINDOW_GRACE_MINUTES,
        now=now,
    ):
        raise SessionInactive()

    return session


def has_redeemed(db: Session, participant_id: int, session_key: str) -> bool:
    existing = (
        db.query(Redemption.id)
        .filter(
            Redemption.participant_id == participant_id,
            Redemption.session_key == session_key,
        )
        .first()
    )
    return existing is not None


def _is_claim_conflict(error: IntegrityError) -> bool:
    """True if the integrity error is the claim-once constraint firing."""
    if getattr(error.orig, "pgcode", None) == "23505":
        return True
    message = str(error).lower()
    return REDEMPTION_UNIQUE_CONSTRAINT in message or "unique constraint" in message


def _insert_redemption(
    db: Session, participant_id: int, session_key: str, staff_id: Optional[str]
) -> Tuple[WriteResult, Optional[Redemption]]:
    """Append a redemption row, reporting a lost race as CONFLICT instead of raising."""
    record = Redemption(
        participant_id=participant_id,
        session_key=session_key,
        timestamp=datetime.now(timezone.utc),
        staff_id=staff_id,
    )

    try:
        db.add(record)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if _is_claim_conflict(e):
            return WriteResult.CONFLICT, None
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            "redemption_write_failed",
            participant_id=participant_id,
            session_key=session_key,
            error=str(e),
        )
        raise StorageError(MSG_RECORD_FAILED) from e

    return WriteResult.INSERTED, record


def redeem(
    db: Session, participant: Participant, session_key: Optional[str], staff_id: Optional[str] = None
) -> RedemptionOutcome:
    """Claim a session's resource for a participant, at most once ever.

    The pre-check answers repeat scans without a failed write; the unique
    constraint on insert is what actually decides a race between stations,
    and its violation is reported exactly like the pre-check hit.

    Raises:
        SessionNotSelected: if session_key is empty
        SessionInactive: if the session cannot be redeemed against right now
        StorageError: if the write failed for any other reason than a conflict
    """
    session = require_active_session(db, session_key)
    key, label = session.session_key, session.display_label
    participant_id = participant.id

    if has_redeemed(db, participant_id, key):
        logger.info("redemption_already_claimed", participant_id=participant_id, session_key=key)
        return RedemptionOutcome(RedemptionStatus.ALREADY_CLAIMED, key, label)

    result, record = _insert_redemption(db, participant_id, key, staff_id)

    if result is WriteResult.CONFLICT:
        logger.warning(
            "redemption_race_conflict",
            participant_id=participant_id,
            session_key=key,
        )
        return RedemptionOutcome(RedemptionStatus.ALREADY_CLAIMED, key, label)

    logger.info(
        "redemption_granted",
        participant_id=participant_id,
        session_key=key,
        redemption_id=record.id,
    )
    return RedemptionOutcome(RedemptionStatus.GRANTED, key, label, redemption_id=record.id)


def redemption_counts(db: Session) -> Dict[str, int]:
    """Number of redemptions per session key."""
    rows = (
        db.query(Redemption.session_key, func.count(Redemption.id))
        .group_by(Redemption.session_key)
        .all()
    )
    return {key: count for key, count in rows}
