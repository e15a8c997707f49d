"""Unit tests for badge token resolution."""
import pytest

from checkpoint.core.constants import MSG_INVALID_TOKEN
from checkpoint.services.errors import TokenNotFound
from checkpoint.services.token_resolver import resolve


@pytest.mark.unit
class TestResolve:
    """Test token to participant lookup."""

    def test_resolves_known_token(self, db_session, make_participant, make_team):
        team = make_team(team_name="Null Pointers", table_number="T4")
        participant = make_participant(qr_token="abc123", name="Ada", team=team)

        found = resolve(db_session, "abc123")

        assert found.id == participant.id
        assert found.team.team_name == "Null Pointers"

    def test_unknown_token_raises(self, db_session, make_participant):
        make_participant(qr_token="abc123")

        with pytest.raises(TokenNotFound) as exc_info:
            resolve(db_session, "zzz999")

        assert exc_info.value.message == MSG_INVALID_TOKEN

    def test_empty_token_raises(self, db_session):
        with pytest.raises(TokenNotFound):
            resolve(db_session, "")

    def test_match_is_exact(self, db_session, make_participant):
        """Tokens are opaque, so case and prefixes never match."""
        make_participant(qr_token="abc123")

        with pytest.raises(TokenNotFound):
            resolve(db_session, "ABC123")
        with pytest.raises(TokenNotFound):
            resolve(db_session, "abc")

    def test_token_not_found_is_value_error(self, db_session):
        with pytest.raises(ValueError, match="Invalid QR code"):
            resolve(db_session, "missing")

    def test_resolution_does_not_modify_participant(self, db_session, make_participant):
        participant = make_participant(qr_token="abc123")

        resolve(db_session, "abc123")
        db_session.expire_all()

        assert participant.is_inside_venue is False
        assert participant.last_scan_at is None

    def test_stored_token_with_whitespace_matches_as_read(self, db_session, make_participant):
        participant = make_participant(qr_token="abc123 ")

        assert resolve(db_session, "abc123 ").id == participant.id

    def test_decomposed_unicode_token_matches_as_read(self, db_session, make_participant):
        participant = make_participant(qr_token="cafe\u0301-01")

        assert resolve(db_session, "cafe\u0301-01").id == participant.id

    def test_reader_noise_falls_back_to_cleaned_token(self, db_session, make_participant):
        participant = make_participant(qr_token="abc123")

        assert resolve(db_session, "abc123\r\n").id == participant.id

    def test_over_long_token_not_found(self, db_session):
        with pytest.raises(TokenNotFound):
            resolve(db_session, "x" * 300)
