# models/domain/contact_domain.py
"""
Contact Domain Models
Typed records built from the Google Contacts Atom feed.
"""

from dataclasses import dataclass
from typing import TypeAlias

from pydantic import BaseModel, Field, field_validator


class InstantMessage(BaseModel):
    """An IM handle, e.g. ("example", "http://schemas.google.com/g/2005#AIM")."""

    address: str | None = None
    protocol: str | None = None


class PhoneNumber(BaseModel):
    number: str
    kind: str | None = None  # rel, e.g. http://schemas.google.com/g/2005#mobile


class PostalAddress(BaseModel):
    text: str  # may span several lines
    kind: str | None = None


class Contact(BaseModel):
    """Domain model for one address-book entry."""

    title: str
    emails: list[str]
    ims: list[InstantMessage] = Field(default_factory=list)
    phone_numbers: list[PhoneNumber] = Field(default_factory=list)
    addresses: list[PostalAddress] = Field(default_factory=list)
    photo_url: str | None = None

    @field_validator("emails")
    @classmethod
    def _require_primary_email(cls, emails: list[str]) -> list[str]:
        if not emails:
            raise ValueError("a contact needs a primary email")
        return emails

    @property
    def primary_email(self) -> str:
        """The user's primary email address."""
        return self.emails[0]

    @property
    def alternate_emails(self) -> list[str]:
        return self.emails[1:]

    def has_photo(self) -> bool:
        return self.photo_url is not None


class ContactList(BaseModel):
    """
    Contact data accumulated from one or more feed fetches.

    Feed metadata is overwritten by every parsed page; contacts are appended.
    Fetching twice into the same list appends a second batch, so use a fresh
    ContactList when you want a fresh result.
    """

    id: str | None = None
    title: str | None = None
    author_name: str | None = None
    author_email: str | None = None
    contacts: list[Contact] = Field(default_factory=list)

    def primary_emails(self) -> list[str]:
        return [contact.primary_email for contact in self.contacts]


@dataclass(frozen=True)
class PhotoUrl:
    """A photo addressed directly by URL."""

    url: str

    def resolve(self) -> str | None:
        return self.url


@dataclass(frozen=True)
class ContactPhoto:
    """A contact's photo, addressed through its photo link."""

    contact: Contact

    def resolve(self) -> str | None:
        return self.contact.photo_url


PhotoRef: TypeAlias = PhotoUrl | ContactPhoto


def photo_ref_for(value: PhotoRef | Contact | str) -> PhotoRef:
    """Wrap a bare URL or Contact in the matching PhotoRef variant."""
    if isinstance(value, (PhotoUrl, ContactPhoto)):
        return value
    if isinstance(value, Contact):
        return ContactPhoto(value)
    if isinstance(value, str):
        return PhotoUrl(value)
    raise TypeError(f"Cannot fetch a photo for {type(value).__name__}")
