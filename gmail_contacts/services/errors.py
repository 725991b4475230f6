"""
Error taxonomy for Google Contacts operations, and the single place where a
transport response is mapped onto it.
"""

from typing import TYPE_CHECKING

from gmail_contacts.infrastructure.observability.logging import get_logger

if TYPE_CHECKING:
    from gmail_contacts.services.transport import TransportResponse

logger = get_logger(__name__)

# Statuses accepted as success from the AuthSub and feed endpoints
SUCCESS_STATUS_CODES = {200, 201, 302}
AUTH_FAILURE_STATUS_CODES = {401}


class GmailContactsError(Exception):
    """Base exception for Google Contacts errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
        url: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
        self.url = url


class AuthError(GmailContactsError):
    """The service rejected the AuthSub credential."""


class FetchError(GmailContactsError):
    """A page, photo or revoke request failed for a non-authorization reason."""


class PaginationLimitError(FetchError):
    """The feed kept advertising a next page past the configured page limit."""


class ParseError(GmailContactsError):
    """A required feed or entry node is missing, or the body is not usable XML."""


class TransportError(GmailContactsError):
    """Connection-level failure (refused, timed out, malformed response)."""


def ensure_success(response: "TransportResponse", url: str, operation: str) -> "TransportResponse":
    """
    Return response if it succeeded, otherwise raise the matching error.

    Args:
        response: Response returned by the transport
        url: Requested URL, kept on the error for diagnosis
        operation: Operation name for logging (e.g. "page_fetch", "token_revoke")

    Raises:
        AuthError: 401 from the service
        FetchError: Any other non-success status
    """
    if response.status_code in SUCCESS_STATUS_CODES:
        return response

    body = response.text[:500]

    logger.error(
        f"Google {operation} failed",
        status_code=response.status_code,
        url=url,
        response_text=body[:200],
    )

    if response.status_code in AUTH_FAILURE_STATUS_CODES:
        raise AuthError(
            f"{operation} rejected the AuthSub token (HTTP {response.status_code})",
            status_code=response.status_code,
            response_body=body,
            url=url,
        )

    raise FetchError(
        f"{operation} failed (HTTP {response.status_code})",
        status_code=response.status_code,
        response_body=body,
        url=url,
    )
