from collections import deque
from pathlib import Path

import pytest

from gmail_contacts.config import Settings
from gmail_contacts.services.transport import TransportResponse

FIXTURES = Path(__file__).resolve().parent / "fixtures"


class FakeTransport:
    """Serves queued responses in order and records every request."""

    def __init__(self):
        self.responses: deque = deque()
        self.requests: list[tuple[str, dict[str, str]]] = []

    def queue(self, body: bytes | str = b"", status_code: int = 200) -> "FakeTransport":
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.responses.append(TransportResponse(status_code=status_code, body=body))
        return self

    def queue_error(self, error: BaseException) -> "FakeTransport":
        self.responses.append(error)
        return self

    def get(self, url: str, headers) -> TransportResponse:
        self.requests.append((url, dict(headers)))
        if not self.responses:
            raise AssertionError(f"unexpected request to {url}")

        response = self.responses.popleft()
        if isinstance(response, BaseException):
            raise response
        return response

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.requests]


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def test_settings():
    return Settings(_env_file=None)


@pytest.fixture
def contacts_page1() -> bytes:
    return (FIXTURES / "contacts_page1.xml").read_bytes()


@pytest.fixture
def contacts_page2() -> bytes:
    return (FIXTURES / "contacts_page2.xml").read_bytes()
