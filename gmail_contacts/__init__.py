"""
Google Contacts feed client: AuthSub token handling, feed pagination and
Contact records.
"""

from gmail_contacts.models.domain.contact_domain import (
    Contact,
    ContactList,
    ContactPhoto,
    InstantMessage,
    PhoneNumber,
    PhotoRef,
    PhotoUrl,
    PostalAddress,
)
from gmail_contacts.services.authsub_service import AuthSubTokenService, build_authorization_url
from gmail_contacts.services.contacts_service import FetchResult, GmailContactsService
from gmail_contacts.services.errors import (
    AuthError,
    FetchError,
    GmailContactsError,
    PaginationLimitError,
    ParseError,
    TransportError,
)
from gmail_contacts.services.transport import HttpxTransport, Transport, TransportResponse

__version__ = "2.0.0"

__all__ = [
    "AuthError",
    "AuthSubTokenService",
    "Contact",
    "ContactList",
    "ContactPhoto",
    "FetchError",
    "FetchResult",
    "GmailContactsError",
    "GmailContactsService",
    "HttpxTransport",
    "InstantMessage",
    "PaginationLimitError",
    "ParseError",
    "PhoneNumber",
    "PhotoRef",
    "PhotoUrl",
    "PostalAddress",
    "Transport",
    "TransportError",
    "TransportResponse",
    "build_authorization_url",
]
