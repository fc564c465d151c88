"""
Paged collections over server-paginated endpoints.

A PagedCollection repeatedly calls a page-fetch function with an evolving
offset until the server signals that no more pages exist. Iteration is lazy:
a caller that stops consuming items stops the fetching as well.
"""

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from .errors import DecodeError, InvalidParams, PageLimitExceeded, PaginationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_LIMIT = 100


@dataclass
class Page(Generic[T]):
    """
    A single page of results from a paginated API.

    Attributes:
        items: The records in this page
        next_offset: Offset the server returned for the following page
        has_more: Whether the server reports further pages
        number: 1-based position of the page in the iteration
    """
    items: list[T]
    next_offset: Any = None
    has_more: bool = False
    number: int = 1


# Page fetch contract: (options, offset, limit) -> (items, next_offset, has_more)
FetchPage = Callable[[dict[str, Any], Any, int], tuple[list[Any], Any, bool]]

# Type alias for paginator callback
# Takes (current_page, total_fetched) and returns whether to continue
Paginator = Callable[[Page, int], bool]


class PagedCollection(Generic[T]):
    """
    Lazily fetched, page-at-a-time sequence.

    The collection is single use: once iteration has started, iterating
    again raises PaginationError. Build a new collection for every logical
    listing.

    Example:
        collection = PagedCollection(fetch, {"property": "email"}, limit=50)
        for contact in collection:
            if contact.email == wanted:
                break
    """

    def __init__(
        self,
        fetch: FetchPage,
        options: Optional[Mapping[str, Any]] = None,
        offset: Any = None,
        limit: Optional[int] = None,
        max_limit: int = DEFAULT_MAX_LIMIT,
        max_pages: Optional[int] = None,
        paginator: Optional[Paginator] = None,
    ):
        """
        Initialize a paged collection.

        Args:
            fetch: Page fetch function, see FetchPage
            options: Caller options handed unchanged to every fetch
            offset: Starting offset; None asks the server for the first page
            limit: Requested page size, clamped to max_limit
            max_limit: Largest page size the endpoint accepts
            max_pages: Optional upper bound on fetched pages
            paginator: Optional callback; returning False stops after the
                current page

        Raises:
            InvalidParams: If limit, max_limit or max_pages is not positive
        """
        if max_limit < 1:
            raise InvalidParams(f"max_limit must be positive, got {max_limit}")
        if limit is None:
            limit = max_limit
        if limit < 1:
            raise InvalidParams(f"limit must be positive, got {limit}")
        if max_pages is not None and max_pages < 1:
            raise InvalidParams(f"max_pages must be positive, got {max_pages}")

        self._fetch = fetch
        self._options = dict(options or {})
        self._limit = min(limit, max_limit)
        self._max_pages = max_pages
        self._paginator = paginator

        self._offset = offset
        self._next_offset: Any = None
        self._has_more = True
        self._pages_fetched = 0
        self._started = False
        self._exhausted = False

    @property
    def options(self) -> dict[str, Any]:
        """Copy of the options passed to every fetch."""
        return dict(self._options)

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def offset(self) -> Any:
        """Offset used for the most recent fetch."""
        return self._offset

    @property
    def next_offset(self) -> Any:
        """Offset returned by the server for the following page."""
        return self._next_offset

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def pages_fetched(self) -> int:
        return self._pages_fetched

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def _fetch_page(self, offset: Any) -> Page[T]:
        result = self._fetch(self._options, offset, self._limit)
        if not isinstance(result, tuple) or len(result) != 3:
            raise DecodeError(
                "Page fetch must return (items, next_offset, has_more)",
                details={"result_type": type(result).__name__},
            )

        items, next_offset, has_more = result
        self._pages_fetched += 1
        page = Page(
            items=list(items or []),
            next_offset=next_offset,
            has_more=bool(has_more),
            number=self._pages_fetched,
        )
        logger.debug(
            "Fetched page %d (offset=%s, limit=%d): %d items, next_offset=%s, has_more=%s",
            page.number,
            offset,
            self._limit,
            len(page.items),
            page.next_offset,
            page.has_more,
        )
        return page

    def pages(self) -> Iterator[Page[T]]:
        """
        Iterate through pages of results.

        Yields:
            Page objects in fetch order

        Raises:
            PaginationError: If the collection was already iterated
            PageLimitExceeded: If max_pages pages were fetched and the server
                still reports more
        """
        if self._started:
            raise PaginationError("PagedCollection is single use; build a new one to iterate again")
        self._started = True

        offset = self._offset
        total = 0
        while True:
            self._offset = offset
            page = self._fetch_page(offset)
            self._next_offset = page.next_offset
            self._has_more = page.has_more
            total += len(page.items)

            yield page

            if not page.has_more:
                break
            if self._paginator is not None and not self._paginator(page, total):
                logger.debug("Paginator stopped iteration after page %d", page.number)
                return
            if self._max_pages is not None and self._pages_fetched >= self._max_pages:
                raise PageLimitExceeded(self._max_pages, page.next_offset)
            offset = page.next_offset

        self._exhausted = True

    def __iter__(self) -> Iterator[T]:
        for page in self.pages():
            yield from page.items

    def all(self) -> list[T]:
        """Fetch every page and return the items in page order."""
        return list(self)

    def first(self) -> Optional[T]:
        """Return the first item, or None if the listing is empty."""
        for item in self:
            return item
        return None
