# models/domain/authsub_domain.py
"""
AuthSub credential domain model.
The session holds the single credential used for every request of a fetch.
"""

from enum import Enum

from pydantic import BaseModel


class TokenState(str, Enum):
    UNEXCHANGED = "unexchanged"
    SESSION_ACTIVE = "session_active"
    REVOKED = "revoked"


class AuthSubSession(BaseModel):
    """Current AuthSub credential and where it is in its lifecycle."""

    token: str | None = None
    state: TokenState = TokenState.UNEXCHANGED

    @property
    def is_session(self) -> bool:
        """Do we hold an active session token?"""
        return self.state == TokenState.SESSION_ACTIVE

    def upgrade(self, session_token: str) -> None:
        self.token = session_token
        self.state = TokenState.SESSION_ACTIVE

    def mark_revoked(self) -> None:
        # The token value is kept for inspection but must not be reused
        self.state = TokenState.REVOKED

    def authorization_header_value(self) -> str:
        return f'AuthSub token="{self.token or ""}"'
