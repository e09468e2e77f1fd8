"""Pagination helpers.

Two page models exist in the platform:

* Cloud Controller V3 lists are page-number based (``page``/``per_page``,
  ``total_pages`` in the response). :func:`fetch_all` walks pages
  ``2..total_pages`` after the caller already holds page 1.
* UAA (SCIM) lists are offset based (``startIndex``/``count``,
  ``totalResults``). :class:`PaginatedFetcher` walks them until the offset
  covers ``total_results``, optionally backed by a typed :class:`Cache`.

Pages are fetched sequentially, one request at a time, so results keep the
order the API returned them in. A failure on any page aborts the walk and
nothing partial is returned (or cached).
"""

from __future__ import annotations

from typing import Callable, Generic, Protocol, Sequence, TypeVar

from loguru import logger

from capi.core.domain.models import PageEnvelope, ScimPage
from capi.core.domain.query import QueryFilter
from capi.core.errors import CapiError, PageFetchError
from capi.core.interfaces.cache import Cache
from capi.core.interfaces.resource_client import Pager, ResourceClient

T = TypeVar("T")


def fetch_all(
    first_page: PageEnvelope[T],
    fetch_page: Callable[[int], PageEnvelope[T]],
    want_all: bool,
) -> list[T]:
    """Concatenate every page after ``first_page`` when ``want_all`` is set.

    With ``want_all`` false, or a single page, ``first_page.items`` is
    returned as is and ``fetch_page`` is never called.
    """
    if not want_all or first_page.total_pages <= 1:
        return first_page.items

    results: list[T] = list(first_page.items)
    for page in range(2, first_page.total_pages + 1):
        logger.debug(f"Fetching page {page}/{first_page.total_pages}")
        try:
            envelope = fetch_page(page)
        except CapiError as exc:
            raise PageFetchError(page, exc) from exc
        results.extend(envelope.items)
    return results


def list_resources(
    client: ResourceClient[T],
    query: QueryFilter,
    want_all: bool,
) -> tuple[list[T], PageEnvelope[T]]:
    """First ``list`` call plus optional accumulation.

    Returns the items and the first envelope (the table renderer uses its
    pagination metadata for the "Showing page 1 of N" footer).
    """
    first_page = client.list(query)
    items = fetch_all(first_page, lambda page: client.list(query.for_page(page)), want_all)
    return items, first_page


class ScimListFunc(Protocol[T]):
    def __call__(
        self,
        filter: str | None,
        sort_by: str | None,
        attributes: str | None,
        sort_order: str | None,
        start_index: int,
        count: int,
    ) -> ScimPage[T]:
        ...


def covers_all(pager: Pager, start_index: int, fetched: int) -> bool:
    """True when the offset window ``[start_index, start_index+fetched)``
    reaches the last result."""
    return pager.total_results <= start_index + fetched - 1


class PaginatedFetcher(Generic[T]):
    """Offset-based accumulator for UAA lists with an optional cache."""

    def __init__(
        self,
        *,
        cache: Cache[str, list[T]] | None = None,
        max_pages: int = 100,
        page_size: int = 100,
    ) -> None:
        self._cache = cache
        self._max_pages = max_pages
        self._page_size = page_size

    @staticmethod
    def cache_key(
        prefix: str,
        filter: str | None,
        sort_by: str | None,
        attributes: str | None,
        sort_order: str | None,
    ) -> str:
        return ":".join(
            [prefix, filter or "", sort_by or "", attributes or "", sort_order or ""]
        )

    def fetch_all_resources(
        self,
        cache_key_prefix: str,
        list_func: ScimListFunc[T],
        *,
        filter: str | None = None,
        sort_by: str | None = None,
        attributes: str | None = None,
        sort_order: str | None = None,
    ) -> list[T]:
        key = self.cache_key(cache_key_prefix, filter, sort_by, attributes, sort_order)
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug(f"Cache hit for {key}")
                return cached

        resources: list[T] = []
        start_index = 1
        for page_number in range(1, self._max_pages + 1):
            try:
                page = list_func(
                    filter, sort_by, attributes, sort_order, start_index, self._page_size
                )
            except CapiError as exc:
                raise PageFetchError(page_number, exc) from exc

            batch: Sequence[T] = page.resources
            resources.extend(batch)
            logger.debug(
                f"Fetched {len(batch)} resources at startIndex={start_index} "
                f"(total {page.total_results})"
            )
            if not batch or covers_all(page, start_index, len(batch)):
                break
            start_index += len(batch)
        else:
            logger.warning(f"Stopped after {self._max_pages} pages; results may be incomplete")

        if self._cache is not None:
            self._cache.put(key, resources)
        return resources
