"""Read-only event figures for dashboards."""
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from checkpoint.core.constants import RECENT_ACTIVITY_LIMIT
from checkpoint.core.utils import isoformat_utc
from checkpoint.db.models import AttendanceRecord, Participant, Redemption, RedemptionSession, Team
from checkpoint.services.redemption_ledger import redemption_counts


def _count(db: Session, *criteria) -> int:
    query = db.query(func.count(Participant.id))
    if criteria:
        query = query.filter(*criteria)
    return query.scalar() or 0


def get_event_stats(db: Session) -> Dict[str, int]:
    """Headline counters for the event dashboard."""
    return {
        "total_participants": _count(db),
        "inside_venue": _count(db, Participant.is_inside_venue.is_(True)),
        "checked_in_day1": _count(db, Participant.checked_in_day1.is_(True)),
        "total_redemptions": db.query(func.count(Redemption.id)).scalar() or 0,
        "total_teams": db.query(func.count(Team.id)).scalar() or 0,
    }


def get_session_stats(db: Session) -> List[Dict[str, Any]]:
    """
    Served counts for every redemption session, active or not.

    The rate is relative to participants who have checked in, since only
    they could have claimed anything.
    """
    counts = redemption_counts(db)
    checked_in = _count(db, Participant.checked_in_day1.is_(True))

    sessions = (
        db.query(RedemptionSession)
        .order_by(RedemptionSession.start_time, RedemptionSession.session_key)
        .all()
    )

    stats = []
    for session in sessions:
        redeemed = counts.get(session.session_key, 0)
        stats.append({
            "session_key": session.session_key,
            "display_label": session.display_label,
            "is_active": bool(session.is_active),
            "redeemed": redeemed,
            "redemption_rate": round(redeemed / checked_in, 4) if checked_in else None,
        })
    return stats


def get_recent_activity(db: Session, limit: int = RECENT_ACTIVITY_LIMIT) -> Dict[str, List[Dict[str, Any]]]:
    """Latest attendance and redemption rows, newest first."""
    attendance = (
        db.query(AttendanceRecord)
        .options(joinedload(AttendanceRecord.participant))
        .order_by(AttendanceRecord.timestamp.desc(), AttendanceRecord.id.desc())
        .limit(limit)
        .all()
    )
    redemptions = (
        db.query(Redemption)
        .options(joinedload(Redemption.participant))
        .order_by(Redemption.timestamp.desc(), Redemption.id.desc())
        .limit(limit)
        .all()
    )

    return {
        "attendance": [
            {
                "id": record.id,
                "participant_id": record.participant_id,
                "participant_name": record.participant.name if record.participant else None,
                "direction": record.direction,
                "timestamp": isoformat_utc(record.timestamp),
                "staff_id": record.staff_id,
            }
            for record in attendance
        ],
        "redemptions": [
            {
                "id": record.id,
                "participant_id": record.participant_id,
                "participant_name": record.participant.name if record.participant else None,
                "session_key": record.session_key,
                "timestamp": isoformat_utc(record.timestamp),
                "staff_id": record.staff_id,
            }
            for record in redemptions
        ],
    }
