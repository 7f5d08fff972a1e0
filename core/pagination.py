"""
Offset pagination for the OCAPI order_search endpoint.

Pages are requested strictly in sequence: ``start`` advances by the number of
hits the previous page returned. The loop ends when the server-reported total
is reached or a page comes back empty, whichever happens first.
"""

from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional

from core.exceptions import OCAPIDataError, OCAPIError, OrderFetchError
from core.observability import get_logger
from core.query import build_search_payload

logger = get_logger(__name__)

PAGE_SIZE = 200


class OrderSearchPaginator:
    """
    Paginator for OCAPI order_search.

    Handles:
    - Offset advancement
    - Termination on total reached or empty page
    - Response validation

    Usage:
        paginator = OrderSearchPaginator(fetch_page)
        hits = await paginator.fetch_all(query)

    where ``fetch_page(payload)`` performs one order_search request.
    """

    def __init__(
        self,
        fetch_page: Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]],
        page_size: int = PAGE_SIZE,
        max_pages: Optional[int] = None,
    ):
        """
        Initialize paginator.

        Args:
            fetch_page: Async function that runs one search for a payload
            page_size: Requested ``count`` per page
            max_pages: Maximum pages to fetch (None = until total/empty page)
        """
        self.fetch_page = fetch_page
        self.page_size = page_size
        self.max_pages = max_pages

    async def paginate(self, query: Dict[str, Any]) -> AsyncIterator[List[Dict[str, Any]]]:
        """
        Iterate through all pages of results.

        Args:
            query: OCAPI query (see core.query.build_search_query)

        Yields:
            Hits from each non-empty page

        Raises:
            OrderFetchError: If a page request fails
            OCAPIDataError: If response structure is invalid
        """
        start = 0
        fetched = 0
        page = 0

        while self.max_pages is None or page < self.max_pages:
            payload = build_search_payload(query, start=start, count=self.page_size)
            page += 1

            try:
                response = await self.fetch_page(payload)
            except OCAPIError:
                raise
            except Exception as e:
                raise OrderFetchError(
                    f"Failed to fetch page at start={start}",
                    str(e),
                    start=start,
                ) from e

            if not isinstance(response, dict):
                raise OCAPIDataError(
                    "Invalid response type",
                    expected="dict",
                    got=type(response).__name__
                )

            # OCAPI omits 'hits' entirely when nothing matches
            batch = response.get("hits", [])
            if batch is None:
                batch = []
            if not isinstance(batch, list):
                raise OCAPIDataError(
                    "Response 'hits' field is not a list",
                    expected="list",
                    got=type(batch).__name__
                )

            if any(not isinstance(hit, dict) for hit in batch):
                raise OCAPIDataError(
                    f"Non-object hit in page at start={start}",
                    expected="dict",
                    got=next(type(h).__name__ for h in batch if not isinstance(h, dict))
                )

            raw_total = response.get("total") or 0
            try:
                total = int(raw_total)
            except (TypeError, ValueError) as e:
                raise OCAPIDataError(
                    "Response 'total' field is not an integer",
                    expected="int",
                    got=repr(raw_total)[:50]
                ) from e

            logger.debug(
                f"Fetched {len(batch)} orders, start: {start}, total: {total}"
            )

            if not batch:
                break

            yield batch

            fetched += len(batch)
            start += len(batch)

            if fetched >= total:
                break

    async def fetch_all(self, query: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Fetch all pages and return combined results.

        Nothing is returned if any page fails: the exception propagates and
        the hits accumulated so far are dropped.
        """
        hits: List[Dict[str, Any]] = []
        async for batch in self.paginate(query):
            hits.extend(batch)
        return hits
