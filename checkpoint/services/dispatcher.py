"""Per-station scan orchestration.

A dispatcher owns the state of one checkpoint:

    IDLE -> RESOLVING -> ROUTING -> SETTLED

``process`` drives a single scan to SETTLED and keeps the result until the
operator acknowledges it with ``reset``. While a scan is in flight or a
result is waiting, new input is ignored, which serializes scans within a
station. Different stations run independently against the shared store.
"""
import enum
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session

from checkpoint.core.constants import (
    MSG_ALREADY_CLAIMED,
    MSG_ENTRY_RECORDED,
    MSG_EXIT_RECORDED,
    MSG_INVALID_TOKEN,
    MSG_MEAL_GRANTED,
    MSG_SCAN_FAILED,
    MSG_SELECT_SESSION,
    TOKEN_LOG_PREFIX,
)
from checkpoint.core.logging_config import get_logger
from checkpoint.core.sanitization import mask_token
from checkpoint.db.models import ScanDirection
from checkpoint.services import attendance_gate, redemption_ledger, token_resolver
from checkpoint.services.errors import (
    ScanInProgress,
    SessionInactive,
    SessionNotSelected,
    StorageError,
    TokenNotFound,
)
from checkpoint.services.utils import ParticipantSnapshot

logger = get_logger(__name__)

_UNSET = object()


class ScanMode(str, enum.Enum):
    ATTENDANCE = "attendance"
    FOOD = "food"


class ScanState(str, enum.Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    ROUTING = "routing"
    SETTLED = "settled"


class ScanOutcome(str, enum.Enum):
    ENTRY = "entry"
    EXIT = "exit"
    GRANTED = "granted"
    ALREADY_CLAIMED = "already_claimed"
    INVALID_TOKEN = "invalid_token"
    SESSION_NOT_SELECTED = "session_not_selected"
    SESSION_INACTIVE = "session_inactive"
    STORAGE_ERROR = "storage_error"
    ERROR = "error"


@dataclass(frozen=True)
class ScanResult:
    """Uniform result handed to whatever displays it."""

    success: bool
    message: str
    outcome: ScanOutcome
    mode: ScanMode
    participant: Optional[ParticipantSnapshot] = None
    scanned_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "outcome": self.outcome.value,
            "mode": self.mode.value,
            "participant": self.participant.to_dict() if self.participant else None,
            "scanned_at": self.scanned_at.isoformat(),
        }


class ScanDispatcher:
    """Run scans for one checkpoint station."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        station_id: str = "default",
        mode: ScanMode = ScanMode.ATTENDANCE,
        session_key: Optional[str] = None,
    ):
        self.station_id = station_id
        self._session_factory = session_factory
        self._lock = threading.Lock()
        self._state = ScanState.IDLE
        self._result: Optional[ScanResult] = None
        self._mode = ScanMode(mode)
        self._session_key = session_key or None

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def result(self) -> Optional[ScanResult]:
        return self._result

    @property
    def mode(self) -> ScanMode:
        return self._mode

    @property
    def session_key(self) -> Optional[str]:
        return self._session_key

    def configure(self, mode: Optional[ScanMode] = None, session_key: Any = _UNSET) -> None:
        """Select the station's mode and/or redemption session.

        A settled result that has not been acknowledged is cleared, since it
        belongs to the previous configuration.

        Raises:
            ScanInProgress: if a scan is being processed right now
        """
        with self._lock:
            if self._state in (ScanState.RESOLVING, ScanState.ROUTING):
                raise ScanInProgress()
            if mode is not None:
                self._mode = ScanMode(mode)
            if session_key is not _UNSET:
                self._session_key = session_key or None
            self._state = ScanState.IDLE
            self._result = None

        logger.info(
            "station_configured",
            station_id=self.station_id,
            mode=self._mode.value,
            session_key=self._session_key,
        )

    def reset(self) -> None:
        """Acknowledge the settled result and accept the next scan."""
        with self._lock:
            if self._state in (ScanState.RESOLVING, ScanState.ROUTING):
                # Nothing to acknowledge yet; the running scan will settle on its own
                return
            self._state = ScanState.IDLE
            self._result = None

    def process(
        self,
        raw_token: str,
        mode: Optional[ScanMode] = None,
        staff_id: Optional[str] = None,
        session_key: Optional[str] = None,
    ) -> Optional[ScanResult]:
        """Run one scan to a settled result.

        Args:
            raw_token: Text decoded from the badge
            mode: Attendance or food; defaults to the station's configured mode
            staff_id: Acting staff member, stamped on audit rows as-is
            session_key: Redemption session for food scans; defaults to the
                station's selected session

        Returns:
            The settled ScanResult, or None if the input was ignored because
            the station is busy or still showing an unacknowledged result
        """
        with self._lock:
            if self._state is not ScanState.IDLE:
                logger.debug("scan_ignored", station_id=self.station_id, state=self._state.value)
                return None
            self._state = ScanState.RESOLVING
            scan_mode = ScanMode(mode) if mode is not None else self._mode
            scan_session_key = session_key or self._session_key

        try:
            result = self._run(raw_token, scan_mode, staff_id, scan_session_key)
        except Exception:
            # _run settles every expected failure; this is the last line of defence
            logger.exception("scan_crashed", station_id=self.station_id)
            result = ScanResult(False, MSG_SCAN_FAILED, ScanOutcome.ERROR, scan_mode)

        with self._lock:
            self._state = ScanState.SETTLED
            self._result = result

        logger.info(
            "scan_settled",
            station_id=self.station_id,
            mode=scan_mode.value,
            outcome=result.outcome.value,
            success=result.success,
            participant_id=result.participant.id if result.participant else None,
        )
        return result

    def status(self) -> Dict[str, Any]:
        with self._lock:
            state, mode, session_key, result = (
                self._state, self._mode, self._session_key, self._result
            )
        return {
            "station_id": self.station_id,
            "state": state.value,
            "mode": mode.value,
            "session_key": session_key,
            "result": result.to_dict() if result else None,
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _run(
        self,
        raw_token: str,
        mode: ScanMode,
        staff_id: Optional[str],
        session_key: Optional[str],
    ) -> ScanResult:
        # Tokens are opaque; only an empty read is rejected before lookup
        if not isinstance(raw_token, str) or not raw_token.strip():
            return ScanResult(False, MSG_INVALID_TOKEN, ScanOutcome.INVALID_TOKEN, mode)

        snapshot = None
        with self._session_factory() as db:
            try:
                participant = token_resolver.resolve(db, raw_token)
                snapshot = ParticipantSnapshot.from_model(participant)
                with self._lock:
                    self._state = ScanState.ROUTING

                if mode is ScanMode.ATTENDANCE:
                    return self._toggle_attendance(db, participant, staff_id)

                if not session_key:
                    return ScanResult(
                        False, MSG_SELECT_SESSION, ScanOutcome.SESSION_NOT_SELECTED, mode
                    )
                return self._redeem(db, participant, snapshot, session_key, staff_id)

            except TokenNotFound as e:
                return ScanResult(False, e.message, ScanOutcome.INVALID_TOKEN, mode)
            except SessionNotSelected as e:
                return ScanResult(False, e.message, ScanOutcome.SESSION_NOT_SELECTED, mode)
            except SessionInactive as e:
                return ScanResult(False, e.message, ScanOutcome.SESSION_INACTIVE, mode, snapshot)
            except StorageError as e:
                logger.warning(
                    "scan_storage_error",
                    station_id=self.station_id,
                    token=mask_token(raw_token, TOKEN_LOG_PREFIX),
                    error=e.message,
                )
                return ScanResult(False, e.message, ScanOutcome.STORAGE_ERROR, mode, snapshot)

    def _toggle_attendance(self, db: Session, participant, staff_id: Optional[str]) -> ScanResult:
        outcome = attendance_gate.toggle(db, participant, staff_id)
        if outcome.direction is ScanDirection.ENTRY:
            return ScanResult(
                True, MSG_ENTRY_RECORDED, ScanOutcome.ENTRY, ScanMode.ATTENDANCE, outcome.participant
            )
        return ScanResult(
            True, MSG_EXIT_RECORDED, ScanOutcome.EXIT, ScanMode.ATTENDANCE, outcome.participant
        )

    def _redeem(
        self,
        db: Session,
        participant,
        snapshot: ParticipantSnapshot,
        session_key: str,
        staff_id: Optional[str],
    ) -> ScanResult:
        outcome = redemption_ledger.redeem(db, participant, session_key, staff_id)
        if outcome.granted:
            return ScanResult(True, MSG_MEAL_GRANTED, ScanOutcome.GRANTED, ScanMode.FOOD, snapshot)
        return ScanResult(
            False, MSG_ALREADY_CLAIMED, ScanOutcome.ALREADY_CLAIMED, ScanMode.FOOD, snapshot
        )
