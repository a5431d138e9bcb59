"""Paged fetching of ITGlue list endpoints.

PagedFetcher walks ``page[number]``/``page[size]`` until the number of
accumulated items equals ``meta.total-count``. When a page keeps timing
out the page size is halved and the page number recomputed from the items
already collected, so nothing is fetched twice or skipped.

Example:
    fetcher = PagedFetcher(client, page_size=500)
    result = fetcher.fetch("/organizations", {"filter[name]": "Acme"})
    print(result.total_count, len(result.data))
"""

import logging
from typing import TYPE_CHECKING, Any

from itglue_tools.core.exceptions import PaginationError, RequestTimeoutError
from itglue_tools.core.models import FetchResult

if TYPE_CHECKING:
    from itglue_tools.api.base import ITGlueClient

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000
MAX_PAGE_SIZE = 1000


class PagedFetcher:
    """Accumulate every page of a list endpoint.

    Attributes:
        page_size: Initial page size (1 to 1000)
    """

    provider_name = "itglue"

    def __init__(self, client: "ITGlueClient", page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._client = client
        self.page_size = min(page_size, MAX_PAGE_SIZE)

    def fetch(self, path: str, params: dict[str, Any] | None = None) -> FetchResult:
        """Fetch all pages of ``path``.

        Args:
            path: API path (e.g., '/organizations')
            params: Extra query parameters (filters, sort, include)

        Returns:
            FetchResult with every item the server reported

        Raises:
            PaginationError: If the server's counts are inconsistent, or a
                page still times out at page size 1
            ITGlueError: Any non-retryable request failure
        """
        page_size = self.page_size
        page_number = 1
        # Items at the start of the next page that were already collected
        skip = 0
        data: list[dict[str, Any]] = []
        included: list[dict[str, Any]] = []
        total: int | None = None

        while True:
            query = dict(params or {})
            query["page[size]"] = page_size
            query["page[number]"] = page_number

            try:
                body = self._client._get(path, params=query)
            except RequestTimeoutError as e:
                if page_size <= 1:
                    logger.error(
                        "%s still timing out at page size 1 after %d item(s)",
                        path,
                        len(data),
                    )
                    raise PaginationError(
                        f"Request keeps timing out at page size 1: {path}",
                        fetched=len(data),
                        total_count=total,
                        provider=self.provider_name,
                        details={"page_number": page_number},
                    ) from e

                page_size = max(1, page_size // 2)
                page_number = len(data) // page_size + 1
                skip = len(data) % page_size
                logger.warning(
                    "Reducing page size for %s to %d (resuming at page %d)",
                    path,
                    page_size,
                    page_number,
                )
                continue

            items = body.get("data") or []
            if isinstance(items, dict):
                items = [items]
            items = items[skip:]
            skip = 0

            data.extend(items)
            included.extend(body.get("included") or [])

            total = _total_count(body, path)
            if total is None:
                logger.debug("%s returned no total-count; treating as a single page", path)
                total = len(data)
                break

            logger.debug(
                "%s page %d: %d item(s), %d/%d accumulated",
                path,
                page_number,
                len(items),
                len(data),
                total,
            )

            if len(data) > total:
                logger.error("%s returned %d items but reported %d", path, len(data), total)
                raise PaginationError(
                    f"Accumulated {len(data)} items but server reported {total}",
                    fetched=len(data),
                    total_count=total,
                    provider=self.provider_name,
                )

            if len(data) == total:
                break

            if not items:
                logger.error("%s returned an empty page at %d/%d", path, len(data), total)
                raise PaginationError(
                    f"Empty page {page_number} before reaching total {total}",
                    fetched=len(data),
                    total_count=total,
                    provider=self.provider_name,
                )

            page_number += 1

        return FetchResult(data=data, included=included, total_count=total, page_size=page_size)


def _total_count(body: dict[str, Any], path: str) -> int | None:
    meta = body.get("meta") or {}
    value = meta.get("total-count") if isinstance(meta, dict) else None
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        logger.error("%s returned a non-numeric total-count: %r", path, value)
        raise PaginationError(
            f"Invalid total-count {value!r} from {path}",
            total_count=None,
            provider=PagedFetcher.provider_name,
            details={"total-count": value},
        ) from e
