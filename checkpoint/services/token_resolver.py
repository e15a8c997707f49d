"""Badge token resolution."""
from typing import Optional

from sqlalchemy.orm import Session

from checkpoint.core.constants import TOKEN_LOG_PREFIX
from checkpoint.core.logging_config import get_logger
from checkpoint.core.sanitization import mask_token, sanitize_scanned_token
from checkpoint.db.models import Participant
from checkpoint.services.errors import TokenNotFound
from checkpoint.services.utils import get_participant_by_token

logger = get_logger(__name__)


def _cleaned(token: str) -> Optional[str]:
    """Token with scanner noise removed, or None if that leaves nothing usable."""
    try:
        return sanitize_scanned_token(token)
    except ValueError:
        return None


def resolve(db: Session, token: str) -> Participant:
    """
    Map a scanned token to its participant. Read-only.

    The token is matched exactly as read. Only when that finds nothing is
    the whitespace-stripped, NFC-normalized form tried, so a reader that
    appends a newline still resolves while stored tokens are never altered.

    Raises:
        TokenNotFound: if the token is empty or no participant owns it
    """
    if not token or not token.strip():
        raise TokenNotFound()

    participant = get_participant_by_token(db, token)
    if participant is None:
        cleaned = _cleaned(token)
        if cleaned and cleaned != token:
            participant = get_participant_by_token(db, cleaned)

    if participant is None:
        logger.info("token_not_found", token=mask_token(token, TOKEN_LOG_PREFIX))
        raise TokenNotFound()

    return participant
