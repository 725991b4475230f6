"""
Pagination driver for the contacts feed.
Follows each page's "next" link until a page comes back without one.
"""

from collections.abc import Callable, Mapping
from urllib.parse import urljoin

from gmail_contacts.infrastructure.observability.logging import get_logger
from gmail_contacts.services.errors import PaginationLimitError, ensure_success
from gmail_contacts.services.transport import Transport

logger = get_logger(__name__)

# (page body, page url) -> next page href or None
PageHandler = Callable[[bytes, str], str | None]


class PageWalker:
    def __init__(
        self,
        transport: Transport,
        headers: Callable[[], Mapping[str, str]],
        max_pages: int | None = None,
    ):
        self._transport = transport
        # Called per request so an upgraded token is picked up
        self._headers = headers
        self.max_pages = max_pages

    def walk(self, start_url: str, on_page: PageHandler) -> int:
        """
        Fetch pages starting at start_url until on_page returns no next link.

        Args:
            start_url: URL of the first feed page
            on_page: Handler that consumes a page and returns its next link

        Returns:
            int: Number of pages fetched

        Raises:
            AuthError: A page fetch was rejected with 401
            FetchError: A page fetch returned any other non-success status
            PaginationLimitError: More than max_pages pages were advertised
        """
        url = start_url
        pages = 0

        while True:
            if self.max_pages is not None and pages >= self.max_pages:
                logger.error(
                    "Contacts feed exceeded page limit",
                    max_pages=self.max_pages,
                    next_url=url,
                )
                raise PaginationLimitError(
                    f"Contacts feed still had a next page after {self.max_pages} pages",
                    url=url,
                )

            response = self._transport.get(url, self._headers())
            ensure_success(response, url, "page_fetch")
            pages += 1

            next_href = on_page(response.body, url)
            if not next_href:
                break

            # Relative hrefs resolve against the page that linked them
            url = urljoin(url, next_href)

        logger.info("Contacts feed walked", start_url=start_url, pages=pages)
        return pages
