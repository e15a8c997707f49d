"""Unit tests for the claim-once redemption ledger."""
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock, patch
from sqlalchemy.exc import IntegrityError, OperationalError

from checkpoint.core.config import settings
from checkpoint.core.constants import MSG_RECORD_FAILED
from checkpoint.db.models import Redemption
from checkpoint.services import redemption_ledger
from checkpoint.services.errors import SessionInactive, SessionNotSelected, StorageError
from checkpoint.services.redemption_ledger import (
    RedemptionStatus,
    get_active_sessions,
    has_redeemed,
    redeem,
    redemption_counts,
    require_active_session,
)


@pytest.mark.unit
class TestRequireActiveSession:
    """Test session validation before a claim."""

    def test_returns_active_session(self, db_session, make_redemption_session):
        make_redemption_session("LUNCH_DAY1", display_label="Lunch Day 1")

        session = require_active_session(db_session, "LUNCH_DAY1")

        assert session.display_label == "Lunch Day 1"

    def test_missing_key_raises_not_selected(self, db_session):
        with pytest.raises(SessionNotSelected, match="Please select a meal session"):
            require_active_session(db_session, None)
        with pytest.raises(SessionNotSelected):
            require_active_session(db_session, "")

    def test_unknown_key_raises_inactive(self, db_session):
        with pytest.raises(SessionInactive):
            require_active_session(db_session, "BREAKFAST_DAY9")

    def test_inactive_session_raises_inactive(self, db_session, make_redemption_session):
        make_redemption_session("DINNER_DAY1", is_active=False)

        with pytest.raises(SessionInactive, match="Meal session is not active"):
            require_active_session(db_session, "DINNER_DAY1")

    def test_window_ignored_unless_enforced(self, db_session, make_redemption_session, monkeypatch):
        monkeypatch.setattr(settings, "ENFORCE_SESSION_WINDOW", False)
        past = datetime.now(timezone.utc) - timedelta(days=1)
        make_redemption_session("LUNCH_DAY1", start_time=past - timedelta(hours=2), end_time=past)

        assert require_active_session(db_session, "LUNCH_DAY1").session_key == "LUNCH_DAY1"

    def test_closed_window_raises_when_enforced(self, db_session, make_redemption_session, monkeypatch):
        monkeypatch.setattr(settings, "ENFORCE_SESSION_WINDOW", True)
        past = datetime.now(timezone.utc) - timedelta(days=1)
        make_redemption_session("LUNCH_DAY1", start_time=past - timedelta(hours=2), end_time=past)

        with pytest.raises(SessionInactive):
            require_active_session(db_session, "LUNCH_DAY1")

    def test_grace_period_before_start_when_enforced(self, db_session, make_redemption_session, monkeypatch):
        monkeypatch.setattr(settings, "ENFORCE_SESSION_WINDOW", True)
        monkeypatch.setattr(settings, "SESSION_WINDOW_GRACE_MINUTES", 15)
        now = datetime.now(timezone.utc)
        make_redemption_session(
            "LUNCH_DAY1",
            start_time=now + timedelta(minutes=10),
            end_time=now + timedelta(hours=2),
        )

        assert require_active_session(db_session, "LUNCH_DAY1", now=now).session_key == "LUNCH_DAY1"
        with pytest.raises(SessionInactive):
            require_active_session(db_session, "LUNCH_DAY1", now=now - timedelta(minutes=10))


@pytest.mark.unit
class TestRedeem:
    """Test claim-once redemption against a real database."""

    def test_first_claim_is_granted(self, db_session, make_participant, make_redemption_session):
        participant = make_participant(qr_token="abc123")
        make_redemption_session("LUNCH_DAY1", display_label="Lunch Day 1")

        outcome = redeem(db_session, participant, "LUNCH_DAY1", staff_id="volunteer-3")

        assert outcome.status is RedemptionStatus.GRANTED
        assert outcome.granted
        assert outcome.display_label == "Lunch Day 1"

        record = db_session.query(Redemption).one()
        assert record.id == outcome.redemption_id
        assert record.participant_id == participant.id
        assert record.session_key == "LUNCH_DAY1"
        assert record.staff_id == "volunteer-3"

    def test_second_claim_is_already_claimed(self, db_session, make_participant, make_redemption_session):
        participant = make_participant(qr_token="abc123")
        make_redemption_session("LUNCH_DAY1")

        redeem(db_session, participant, "LUNCH_DAY1")
        outcome = redeem(db_session, participant, "LUNCH_DAY1")

        assert outcome.status is RedemptionStatus.ALREADY_CLAIMED
        assert not outcome.granted
        assert outcome.redemption_id is None
        assert db_session.query(Redemption).count() == 1

    def test_sessions_are_independent(self, db_session, make_participant, make_redemption_session):
        participant = make_participant()
        make_redemption_session("LUNCH_DAY1")
        make_redemption_session("DINNER_DAY1")

        assert redeem(db_session, participant, "LUNCH_DAY1").granted
        assert redeem(db_session, participant, "DINNER_DAY1").granted
        assert db_session.query(Redemption).count() == 2

    def test_participants_are_independent(self, db_session, make_participant, make_redemption_session):
        first = make_participant()
        second = make_participant()
        make_redemption_session("LUNCH_DAY1")

        assert redeem(db_session, first, "LUNCH_DAY1").granted
        assert redeem(db_session, second, "LUNCH_DAY1").granted

    def test_claim_does_not_need_check_in(self, db_session, make_participant, make_redemption_session):
        participant = make_participant(checked_in_day1=False, is_inside_venue=False)
        make_redemption_session("LUNCH_DAY1")

        assert redeem(db_session, participant, "LUNCH_DAY1").granted

    def test_inactive_session_writes_nothing(self, db_session, make_participant, make_redemption_session):
        participant = make_participant()
        make_redemption_session("LUNCH_DAY1", is_active=False)

        with pytest.raises(SessionInactive):
            redeem(db_session, participant, "LUNCH_DAY1")

        assert db_session.query(Redemption).count() == 0

    def test_missing_session_writes_nothing(self, db_session, make_participant):
        participant = make_participant()

        with pytest.raises(SessionNotSelected):
            redeem(db_session, participant, None)

        assert db_session.query(Redemption).count() == 0

    def test_lost_race_is_reported_as_already_claimed(
        self, db_session, make_participant, make_redemption_session
    ):
        """When another station inserts between the pre-check and the write, the constraint decides."""
        participant = make_participant()
        make_redemption_session("LUNCH_DAY1")
        redeem(db_session, participant, "LUNCH_DAY1")

        with patch.object(redemption_ledger, "has_redeemed", return_value=False):
            outcome = redeem(db_session, participant, "LUNCH_DAY1")

        assert outcome.status is RedemptionStatus.ALREADY_CLAIMED
        assert db_session.query(Redemption).count() == 1

    def test_has_redeemed(self, db_session, make_participant, make_redemption_session):
        participant = make_participant()
        make_redemption_session("LUNCH_DAY1")

        assert has_redeemed(db_session, participant.id, "LUNCH_DAY1") is False
        redeem(db_session, participant, "LUNCH_DAY1")
        assert has_redeemed(db_session, participant.id, "LUNCH_DAY1") is True

    def test_redemption_counts(self, db_session, make_participant, make_redemption_session):
        first = make_participant()
        second = make_participant()
        make_redemption_session("LUNCH_DAY1")
        make_redemption_session("DINNER_DAY1")

        redeem(db_session, first, "LUNCH_DAY1")
        redeem(db_session, second, "LUNCH_DAY1")
        redeem(db_session, first, "DINNER_DAY1")

        assert redemption_counts(db_session) == {"LUNCH_DAY1": 2, "DINNER_DAY1": 1}


@pytest.mark.unit
class TestRedeemWriteErrors:
    """Test how insert failures are classified."""

    def _mocks(self):
        mock_db = Mock()
        participant = Mock()
        participant.id = 1
        session = Mock()
        session.session_key = "LUNCH_DAY1"
        session.display_label = "Lunch Day 1"
        return mock_db, participant, session

    @patch('checkpoint.services.redemption_ledger.has_redeemed', return_value=False)
    @patch('checkpoint.services.redemption_ledger.require_active_session')
    def test_postgres_constraint_name_is_conflict(self, mock_require, mock_has_redeemed):
        mock_db, participant, session = self._mocks()
        mock_require.return_value = session

        mock_orig_error = Exception(
            "duplicate key value violates unique constraint \"uq_redemption_participant_session\""
        )
        mock_db.commit.side_effect = IntegrityError("statement", {}, mock_orig_error)

        outcome = redeem(mock_db, participant, "LUNCH_DAY1")

        assert outcome.status is RedemptionStatus.ALREADY_CLAIMED
        mock_db.rollback.assert_called_once()

    @patch('checkpoint.services.redemption_ledger.has_redeemed', return_value=False)
    @patch('checkpoint.services.redemption_ledger.require_active_session')
    def test_pgcode_is_conflict(self, mock_require, mock_has_redeemed):
        mock_db, participant, session = self._mocks()
        mock_require.return_value = session

        mock_orig_error = Mock()
        mock_orig_error.pgcode = "23505"
        mock_db.commit.side_effect = IntegrityError("statement", {}, mock_orig_error)

        outcome = redeem(mock_db, participant, "LUNCH_DAY1")

        assert outcome.status is RedemptionStatus.ALREADY_CLAIMED

    @patch('checkpoint.services.redemption_ledger.has_redeemed', return_value=False)
    @patch('checkpoint.services.redemption_ledger.require_active_session')
    def test_other_integrity_errors_propagate(self, mock_require, mock_has_redeemed):
        mock_db, participant, session = self._mocks()
        mock_require.return_value = session

        mock_orig_error = Exception("NOT NULL constraint failed: redemptions.timestamp")
        mock_db.commit.side_effect = IntegrityError("statement", {}, mock_orig_error)

        with pytest.raises(IntegrityError):
            redeem(mock_db, participant, "LUNCH_DAY1")
        mock_db.rollback.assert_called_once()

    @patch('checkpoint.services.redemption_ledger.has_redeemed', return_value=False)
    @patch('checkpoint.services.redemption_ledger.require_active_session')
    def test_storage_failure_raises_storage_error(self, mock_require, mock_has_redeemed):
        mock_db, participant, session = self._mocks()
        mock_require.return_value = session
        mock_db.commit.side_effect = OperationalError("statement", {}, Exception("disk I/O error"))

        with pytest.raises(StorageError) as exc_info:
            redeem(mock_db, participant, "LUNCH_DAY1")

        assert exc_info.value.message == MSG_RECORD_FAILED
        mock_db.rollback.assert_called_once()


@pytest.mark.unit
def test_get_active_sessions_filters_and_orders(db_session, make_redemption_session):
    now = datetime.now(timezone.utc)
    make_redemption_session("DINNER_DAY1", start_time=now + timedelta(hours=6))
    make_redemption_session("LUNCH_DAY1", start_time=now)
    make_redemption_session("BREAKFAST_DAY1", start_time=now - timedelta(hours=4), is_active=False)

    keys = [s.session_key for s in get_active_sessions(db_session)]

    assert keys == ["LUNCH_DAY1", "DINNER_DAY1"]
