"""
Current user identity for submissions.

The backend expects the numeric user id in every payload. It is read from the
client's own JWT; the signature is not checked here, the server does that.
"""

import logging
from pathlib import Path
from typing import Optional, Protocol

import jwt

from cityreport.core.config import settings

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    def get_user_id(self) -> Optional[int]: ...


class StaticIdentity:
    """Fixed user id, for scripts and tests."""

    def __init__(self, user_id: Optional[int]):
        self.user_id = user_id

    def get_user_id(self) -> Optional[int]:
        return self.user_id


class TokenIdentityProvider:
    """Reads `userId` from the stored auth token."""

    def __init__(
        self,
        token: Optional[str] = None,
        token_path: Optional[str] = None,
        claim: str = "userId",
    ):
        self.token = token if token is not None else settings.auth_token
        self.token_path = token_path if token_path is not None else settings.auth_token_path
        self.claim = claim

    def _load_token(self) -> Optional[str]:
        if self.token:
            return self.token
        if self.token_path:
            try:
                return Path(self.token_path).read_text(encoding="utf-8").strip() or None
            except OSError as e:
                logger.warning(f"Cannot read auth token file: {e}")
        return None

    def get_user_id(self) -> Optional[int]:
        token = self._load_token()
        if not token:
            logger.warning("No auth token found")
            return None

        try:
            payload = jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError as e:
            logger.error(f"Failed to decode auth token: {e}")
            return None

        user_id = payload.get(self.claim)
        if user_id is None or user_id == "":
            return None
        try:
            return int(user_id)
        except (TypeError, ValueError):
            logger.error(f"Invalid {self.claim} claim in token: {user_id!r}")
            return None
