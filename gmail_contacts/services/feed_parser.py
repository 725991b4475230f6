"""
Contacts feed parser.

Turns one page of the Google Contacts Atom feed into Contact records, appended
to a shared ContactList, and reports the page's "next" link.
"""

from xml.etree.ElementTree import Element

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from gmail_contacts.infrastructure.observability.logging import get_logger
from gmail_contacts.models.domain.contact_domain import (
    Contact,
    ContactList,
    InstantMessage,
    PhoneNumber,
    PostalAddress,
)
from gmail_contacts.services.errors import ParseError

logger = get_logger(__name__)

# Contacts feed XML namespaces
ATOM_NS = "http://www.w3.org/2005/Atom"
GD_NS = "http://schemas.google.com/g/2005"

NAMESPACES = {
    "atom": ATOM_NS,
    "gd": GD_NS,
}

PHOTO_REL = "http://schemas.google.com/contacts/2008/rel#photo"
NEXT_REL = "next"


class ContactFeedParser:
    """Extracts feed metadata and contacts from a contacts feed page."""

    def parse(self, body: bytes | str, contact_list: ContactList) -> str | None:
        """
        Parse one feed page into contact_list.

        Feed id, title and author are overwritten; contacts are appended in
        document order. Entries without a primary email are skipped.

        Args:
            body: Raw feed XML
            contact_list: Aggregate to update in place

        Returns:
            str | None: href of the feed's "next" link, if the page has one

        Raises:
            ParseError: If the body is not XML or a required node is missing
        """
        root = self._load(body)

        contact_list.id = self._required_text(root, "atom:id", "feed id")
        contact_list.title = self._required_text(root, "atom:title", "feed title")
        contact_list.author_name = self._required_text(
            root, "atom:author/atom:name", "feed author name"
        )
        contact_list.author_email = self._required_text(
            root, "atom:author/atom:email", "feed author email"
        )

        parsed = 0
        skipped = 0
        for entry in root.findall("atom:entry", NAMESPACES):
            contact = self.parse_entry(entry)
            if contact is None:
                skipped += 1
                continue
            contact_list.contacts.append(contact)
            parsed += 1

        next_url = self._link_href(root, NEXT_REL)

        logger.debug(
            "Parsed contacts feed page",
            feed_id=contact_list.id,
            contacts=parsed,
            skipped_without_primary_email=skipped,
            has_next=next_url is not None,
        )

        return next_url

    def parse_entry(self, entry: Element) -> Contact | None:
        """Build a Contact from an entry, or None when it has no primary email."""
        title = self._required_text(entry, "atom:title", "entry title")

        email_nodes = entry.findall("gd:email", NAMESPACES)
        primary = next((node for node in email_nodes if node.get("primary") is not None), None)
        if primary is None:
            return None

        emails = [self._required_attr(primary, "address", "email address")]
        emails.extend(
            self._required_attr(node, "address", "email address")
            for node in email_nodes
            if node.get("primary") is None
        )

        ims = [
            InstantMessage(address=node.get("address"), protocol=node.get("protocol"))
            for node in entry.findall("gd:im", NAMESPACES)
        ]

        phone_numbers = [
            PhoneNumber(number=_text(node), kind=node.get("rel"))
            for node in entry.findall("gd:phoneNumber", NAMESPACES)
        ]

        addresses = [
            PostalAddress(text=_text(node), kind=node.get("rel"))
            for node in entry.findall("gd:postalAddress", NAMESPACES)
        ]

        return Contact(
            title=title,
            emails=emails,
            ims=ims,
            phone_numbers=phone_numbers,
            addresses=addresses,
            photo_url=self._link_href(entry, PHOTO_REL),
        )

    def _load(self, body: bytes | str) -> Element:
        try:
            root = ET.fromstring(body)
        except (ET.ParseError, DefusedXmlException) as e:
            logger.error(
                "Contacts feed is not usable XML", error=str(e), error_type=type(e).__name__
            )
            raise ParseError(f"Invalid contacts feed: {e}") from e

        if root.tag != f"{{{ATOM_NS}}}feed":
            raise ParseError(f"Expected an Atom feed, got <{root.tag}>")

        return root

    def _required_text(self, node: Element, path: str, what: str) -> str:
        found = node.find(path, NAMESPACES)
        if found is None:
            raise ParseError(f"Contacts feed is missing the {what}")
        return _text(found)

    def _required_attr(self, node: Element, name: str, what: str) -> str:
        value = node.get(name)
        if value is None:
            raise ParseError(f"Contacts feed is missing an {what}")
        return value

    def _link_href(self, node: Element, rel: str) -> str | None:
        for link in node.findall("atom:link", NAMESPACES):
            if link.get("rel") == rel and link.get("href"):
                return link.get("href")
        return None


def _text(node: Element) -> str:
    return "".join(node.itertext())
