"""
AuthSub token service for the Google Contacts feed.
Handles authorization URL generation, request -> session token exchange, and
revocation. See http://code.google.com/apis/accounts/docs/AuthSub.html
"""

import re
from urllib.parse import quote_plus

from gmail_contacts.config import Settings, settings
from gmail_contacts.infrastructure.observability.logging import get_logger, token_preview
from gmail_contacts.models.domain.authsub_domain import AuthSubSession, TokenState
from gmail_contacts.services.errors import AuthError, FetchError, ensure_success
from gmail_contacts.services.transport import Transport

logger = get_logger(__name__)

_TOKEN_LINE = re.compile(r"^Token=(.*)$", re.MULTILINE)


def build_authorization_url(
    next_url: str,
    secure: bool = False,
    session: bool = True,
    domain: str | None = None,
    config: Settings | None = None,
) -> str:
    """
    Generate the AuthSubRequest URL a user visits to approve contact retrieval.

    Parameters are joined in sorted key order, so the same arguments always
    produce the same URL.

    Args:
        next_url: Where Google redirects the user after they grant the request
        secure: Request a secure token
        session: Request a token that can be upgraded to a session token
        domain: Hosted domain restriction; hd is left out only when None

    Returns:
        str: Complete AuthSubRequest URL
    """
    config = config or settings

    query = {
        "next": quote_plus(next_url),
        "scope": quote_plus(config.AUTHSUB_SCOPE),
        "secure": "1" if secure else "0",
        "session": "1" if session else "0",
    }
    if domain is not None:
        query["hd"] = quote_plus(domain)

    query_string = "&".join(f"{key}={query[key]}" for key in sorted(query))

    return f"{config.authsub_request_url()}?{query_string}"


class AuthSubTokenService:
    """
    Owns the single AuthSub credential used by every request of a fetch.

    Unexchanged -> (ensure_session) -> SessionActive -> (revoke) -> Revoked
    """

    def __init__(
        self,
        transport: Transport,
        token: str | None = None,
        session_token: bool = False,
        config: Settings | None = None,
    ):
        self._transport = transport
        self._config = config or settings
        self.session = AuthSubSession(
            token=token,
            state=TokenState.SESSION_ACTIVE if session_token else TokenState.UNEXCHANGED,
        )

    @property
    def token(self) -> str | None:
        """Current token; changes when a request token is upgraded."""
        return self.session.token

    @property
    def is_session(self) -> bool:
        return self.session.is_session

    @property
    def state(self) -> TokenState:
        return self.session.state

    def authorization_header_value(self) -> str:
        return self.session.authorization_header_value()

    def headers(self) -> dict[str, str]:
        """Headers for the next outbound request, built from the current token."""
        return {"Authorization": self.authorization_header_value()}

    def build_authorization_url(
        self, next_url: str, secure: bool = False, session: bool = True, domain: str | None = None
    ) -> str:
        return build_authorization_url(next_url, secure, session, domain, config=self._config)

    def ensure_session(self) -> None:
        """
        Upgrade the request token to a session token, unless we already hold one.

        Raises:
            AuthError: If the token was revoked, or the exchange endpoint rejects
                the token or returns no token
        """
        if self.session.is_session:
            return

        if self.session.state == TokenState.REVOKED:
            logger.error(
                "Refusing to reuse a revoked AuthSub token",
                token_preview=token_preview(self.session.token),
            )
            raise AuthError("AuthSub token was revoked; request a new one")

        url = self._config.authsub_session_token_url()

        logger.info(
            "Exchanging AuthSub request token", token_preview=token_preview(self.session.token)
        )

        response = self._transport.get(url, self.headers())
        try:
            ensure_success(response, url, "token_exchange")
        except FetchError as e:
            raise AuthError(
                str(e), status_code=e.status_code, response_body=e.response_body, url=url
            ) from e

        match = _TOKEN_LINE.search(response.text)
        if not match:
            logger.error("AuthSub exchange response had no Token line", url=url)
            raise AuthError(
                "AuthSub session token missing from exchange response",
                status_code=response.status_code,
                response_body=response.text[:500],
                url=url,
            )

        self.session.upgrade(match.group(1).strip())

        logger.info(
            "AuthSub session token obtained", token_preview=token_preview(self.session.token)
        )

    def revoke(self) -> None:
        """
        Revoke the current token.

        Sent even if the token was never exchanged; every call is a request.
        """
        url = self._config.authsub_revoke_token_url()

        logger.info(
            "Revoking AuthSub token",
            token_preview=token_preview(self.session.token),
            state=self.session.state.value,
        )

        response = self._transport.get(url, self.headers())
        ensure_success(response, url, "token_revoke")

        self.session.mark_revoked()

        logger.info("AuthSub token revoked")
