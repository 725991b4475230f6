"""
Gmail contacts service.

Upgrades an AuthSub token, walks the contacts feed for an account, and
revokes the token again when done, turning the feed into Contact records.

Typical flow:

    service = GmailContactsService()
    url = service.authsub_url("http://example.com/return")
    # ... user approves, Google redirects back with ?token=...
    service = GmailContactsService(token)
    contacts = service.fetch_contacts("eric@example.com")
    for contact in contacts.contacts:
        print(contact.title, contact.primary_email)
"""

from collections.abc import Callable
from dataclasses import dataclass

from gmail_contacts.config import Settings, settings
from gmail_contacts.infrastructure.observability.logging import get_logger
from gmail_contacts.models.domain.contact_domain import (
    Contact,
    ContactList,
    PhotoRef,
    photo_ref_for,
)
from gmail_contacts.services.authsub_service import AuthSubTokenService
from gmail_contacts.services.errors import FetchError, GmailContactsError, ensure_success
from gmail_contacts.services.feed_parser import ContactFeedParser
from gmail_contacts.services.page_walker import PageWalker
from gmail_contacts.services.transport import HttpxTransport, Transport

logger = get_logger(__name__)


@dataclass
class FetchResult:
    """Outcome of try_fetch_contacts: the (possibly partial) list and any error."""

    contacts: ContactList
    error: GmailContactsError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class GmailContactsService:
    """
    Fetches contacts for an account using an AuthSub token.

    The service owns a ContactList that successive fetches append to, so one
    service can collect contacts from several accounts. A token revoked by an
    earlier fetch is never reused: the next fetch fails with AuthError.
    """

    def __init__(
        self,
        token: str | None = None,
        session_token: bool = False,
        transport: Transport | None = None,
        config: Settings | None = None,
        max_pages: int | None = None,
    ):
        self._config = config or settings
        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport(timeout=self._config.HTTP_TIMEOUT)

        self.tokens = AuthSubTokenService(
            self._transport, token=token, session_token=session_token, config=self._config
        )
        self.parser = ContactFeedParser()
        self.walker = PageWalker(
            self._transport,
            self.tokens.headers,
            max_pages=max_pages if max_pages is not None else self._config.CONTACTS_MAX_PAGES,
        )
        self.contact_list = ContactList()

    @property
    def authsub_token(self) -> str | None:
        """Current AuthSub token; store it after a fetch with revoke=False."""
        return self.tokens.token

    @property
    def is_session(self) -> bool:
        return self.tokens.is_session

    def authsub_url(
        self, next_url: str, secure: bool = False, session: bool = True, domain: str | None = None
    ) -> str:
        """URL to send the user to so they can approve contact retrieval."""
        return self.tokens.build_authorization_url(next_url, secure, session, domain)

    def fetch_contacts(
        self,
        account: str,
        revoke: bool = True,
        contact_list: ContactList | None = None,
        on_complete: Callable[[ContactList], None] | None = None,
    ) -> ContactList:
        """
        Fetch every contact for account, appending to the contact list.

        Args:
            account: Account email address whose contacts to read
            revoke: Revoke the session token afterwards, on success or failure
            contact_list: Aggregate to append to (defaults to the service's own)
            on_complete: Called after the last page while the session is still valid

        Returns:
            ContactList: The aggregate the contacts were appended to

        Raises:
            AuthError, FetchError, ParseError, TransportError
        """
        contacts = contact_list if contact_list is not None else self.contact_list
        before = len(contacts.contacts)

        try:
            self.tokens.ensure_session()

            start_url = self._config.contacts_feed_url(account)
            logger.info("Fetching contacts", account=account, start_url=start_url)

            self.walker.walk(start_url, lambda body, url: self.parser.parse(body, contacts))

            if on_complete is not None:
                on_complete(contacts)

        except BaseException as e:
            logger.error(
                "Contacts fetch failed",
                account=account,
                error=str(e),
                error_type=type(e).__name__,
                contacts_so_far=len(contacts.contacts) - before,
            )
            self._release(revoke, failing=True)
            raise

        self._release(revoke)

        logger.info(
            "Contacts fetched",
            account=account,
            new_contacts=len(contacts.contacts) - before,
            total_contacts=len(contacts.contacts),
        )
        return contacts

    def try_fetch_contacts(
        self, account: str, revoke: bool = True, contact_list: ContactList | None = None
    ) -> FetchResult:
        """Like fetch_contacts, but returns contact errors instead of raising them."""
        contacts = contact_list if contact_list is not None else self.contact_list
        try:
            self.fetch_contacts(account, revoke=revoke, contact_list=contacts)
        except GmailContactsError as e:
            return FetchResult(contacts=contacts, error=e)
        return FetchResult(contacts=contacts)

    def fetch_photo(self, ref: PhotoRef | Contact | str) -> bytes:
        """
        Fetch the raw photo data for a contact or photo URL.

        Raises:
            FetchError: The contact has no photo, or the photo request failed
            AuthError: The photo request was rejected with 401
        """
        photo_ref = photo_ref_for(ref)
        url = photo_ref.resolve()
        if not url:
            raise FetchError("Contact has no photo URL")

        response = self._transport.get(url, self.tokens.headers())
        ensure_success(response, url, "photo_fetch")

        logger.debug("Contact photo fetched", url=url, size=len(response.body))
        return response.body

    def _release(self, revoke: bool, failing: bool = False) -> None:
        """Revoke the session token if asked to and we still hold one."""
        if not (revoke and self.tokens.is_session):
            return

        if not failing:
            self.tokens.revoke()
            return

        # The fetch error is the one the caller needs to see
        try:
            self.tokens.revoke()
        except Exception as e:
            logger.error(
                "Token revocation failed after fetch error",
                error=str(e),
                error_type=type(e).__name__,
            )

    def close(self) -> None:
        """Close the transport if this service created it."""
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> "GmailContactsService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
