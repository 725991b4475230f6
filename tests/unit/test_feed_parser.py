"""
Tests for turning contacts feed pages into Contact records.
"""

import pytest

from gmail_contacts.models.domain.contact_domain import (
    Contact,
    ContactList,
    InstantMessage,
    PhoneNumber,
    PostalAddress,
)
from gmail_contacts.services.errors import ParseError
from gmail_contacts.services.feed_parser import ContactFeedParser

PAGE2_URL = (
    "http://www.google.com/m8/feeds/contacts/eric%40example.com/full?start-index=4&max-results=3"
)

ERIC = Contact(
    title="Eric",
    emails=["eric@example.com", "eric@example.net"],
    ims=[InstantMessage(address="example", protocol="http://schemas.google.com/g/2005#AIM")],
    phone_numbers=[
        PhoneNumber(number="999 555 1212", kind="http://schemas.google.com/g/2005#mobile")
    ],
    addresses=[
        PostalAddress(
            text="123 Any Street\nAnyTown, ZZ 99999",
            kind="http://schemas.google.com/g/2005#home",
        )
    ],
    photo_url="http://www.google.com/m8/feeds/photos/media/eric%40example.com/18",
)
SEAN = Contact(
    title="Sean",
    emails=["sean@example.com"],
    photo_url="http://www.google.com/m8/feeds/photos/media/eric%40example.com/0",
)
COBY = Contact(
    title="Coby",
    emails=["coby@example.com"],
    photo_url="http://www.google.com/m8/feeds/photos/media/eric%40example.com/5834fb5d0b47bfd7",
)


def _feed(entries: str = "", title: str = "Contacts", extra: str = "") -> str:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom" xmlns:gd="http://schemas.google.com/g/2005">
  <id>someone@example.com</id>
  <title>{title}</title>
  <author><name>someone</name><email>someone@example.com</email></author>
  {extra}
  {entries}
</feed>"""


def test_parse_first_page(contacts_page1):
    contact_list = ContactList()

    next_url = ContactFeedParser().parse(contacts_page1, contact_list)

    assert next_url == PAGE2_URL
    assert contact_list.id == "eric@example.com"
    assert contact_list.title == "drbrain's Contacts"
    assert contact_list.author_name == "drbrain"
    assert contact_list.author_email == "eric@example.com"

    # "Mailing List" has no primary email and is dropped
    assert contact_list.contacts == [SEAN, ERIC]


def test_parse_two_pages_appends_in_order(contacts_page1, contacts_page2):
    parser = ContactFeedParser()
    contact_list = ContactList()

    parser.parse(contacts_page1, contact_list)
    next_url = parser.parse(contacts_page2, contact_list)

    assert next_url is None
    assert contact_list.contacts == [SEAN, ERIC, COBY]
    assert contact_list.primary_emails() == [
        "sean@example.com",
        "eric@example.com",
        "coby@example.com",
    ]


def test_primary_email_first_then_alternates_in_document_order():
    entry = """<entry><title>Ann</title>
      <gd:email address="a2@example.com"/>
      <gd:email address="a1@example.com" primary="true"/>
      <gd:email address="a3@example.com"/>
    </entry>"""
    contact_list = ContactList()

    ContactFeedParser().parse(_feed(entry), contact_list)

    (ann,) = contact_list.contacts
    assert ann.primary_email == "a1@example.com"
    assert ann.alternate_emails == ["a2@example.com", "a3@example.com"]


def test_entry_without_optional_fields():
    entry = '<entry><title>Bo</title><gd:email address="bo@example.com" primary="true"/></entry>'
    contact_list = ContactList()

    ContactFeedParser().parse(_feed(entry), contact_list)

    (bo,) = contact_list.contacts
    assert bo.ims == []
    assert bo.phone_numbers == []
    assert bo.addresses == []
    assert bo.photo_url is None


def test_im_without_address_keeps_protocol():
    entry = """<entry><title>Bo</title><gd:email address="bo@example.com" primary="true"/>
      <gd:im protocol="http://schemas.google.com/g/2005#JABBER"/></entry>"""
    contact_list = ContactList()

    ContactFeedParser().parse(_feed(entry), contact_list)

    (bo,) = contact_list.contacts
    assert bo.ims == [
        InstantMessage(address=None, protocol="http://schemas.google.com/g/2005#JABBER")
    ]


def test_entries_without_primary_email_are_skipped():
    entries = """
      <entry><title>No email</title></entry>
      <entry><title>Alt only</title><gd:email address="alt@example.com"/></entry>"""
    contact_list = ContactList()

    next_url = ContactFeedParser().parse(_feed(entries), contact_list)

    assert contact_list.contacts == []
    assert next_url is None


def test_feed_metadata_last_page_wins():
    parser = ContactFeedParser()
    contact_list = ContactList()

    parser.parse(_feed(title="First"), contact_list)
    parser.parse(_feed(title="Second"), contact_list)

    assert contact_list.title == "Second"


def test_relative_next_link_returned_as_is():
    extra = '<link rel="next" href="/m8/feeds/contacts/someone%40example.com/full?start-index=26"/>'

    next_url = ContactFeedParser().parse(_feed(extra=extra), ContactList())

    assert next_url == "/m8/feeds/contacts/someone%40example.com/full?start-index=26"


def test_missing_entry_title_stops_the_page():
    entries = """
      <entry><title>Ok</title><gd:email address="ok@example.com" primary="true"/></entry>
      <entry><gd:email address="untitled@example.com" primary="true"/></entry>
      <entry><title>Never</title><gd:email address="never@example.com" primary="true"/></entry>"""
    contact_list = ContactList()

    with pytest.raises(ParseError):
        ContactFeedParser().parse(_feed(entries), contact_list)

    assert contact_list.primary_emails() == ["ok@example.com"]


def test_missing_feed_author_is_a_parse_error():
    body = """<feed xmlns="http://www.w3.org/2005/Atom">
      <id>x</id><title>t</title>
    </feed>"""

    with pytest.raises(ParseError, match="author name"):
        ContactFeedParser().parse(body, ContactList())


def test_primary_email_without_address_is_a_parse_error():
    entry = '<entry><title>Odd</title><gd:email primary="true"/></entry>'

    with pytest.raises(ParseError):
        ContactFeedParser().parse(_feed(entry), ContactList())


@pytest.mark.parametrize(
    "body",
    [
        b"",
        b"not xml at all",
        b"<feed xmlns='http://www.w3.org/2005/Atom'><id>",
        b"<html><body>Moved</body></html>",
    ],
)
def test_unusable_bodies(body):
    with pytest.raises(ParseError):
        ContactFeedParser().parse(body, ContactList())


def test_entity_declarations_are_refused():
    body = b"""<?xml version="1.0"?>
<!DOCTYPE feed [<!ENTITY who "someone">]>
<feed xmlns="http://www.w3.org/2005/Atom"><id>&who;</id></feed>"""

    with pytest.raises(ParseError):
        ContactFeedParser().parse(body, ContactList())
