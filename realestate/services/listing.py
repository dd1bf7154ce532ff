"""
Paginated list service shared by the list endpoints.

Pipeline: clamp paging, look up the cache, count and fetch one page, map rows
to DTOs (with enrichment), store the page, return {data, meta}.
"""

from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple
import math
import logging

from realestate.config import settings
from realestate.repositories.base import BaseRepository
from realestate.schemas.common import Page, PageMeta
from realestate.services.cache import ResultCache, list_key

logger = logging.getLogger(__name__)

RowMapper = Callable[[Sequence[Any]], Awaitable[List[Any]]]


def clamp_paging(
    page: Optional[int],
    limit: Optional[int],
    default_limit: Optional[int] = None,
    max_limit: Optional[int] = None,
) -> Tuple[int, int]:
    """
    Normalize paging input: page is at least 1, limit lies in [1, max_limit].
    A missing limit falls back to the default page size.
    """
    default_limit = default_limit or settings.default_page_size
    max_limit = max_limit or settings.max_page_size

    page = max(1, page or 1)
    if limit is None:
        limit = default_limit
    limit = min(max(1, limit), max_limit)
    return page, limit


def last_page(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total > 0 else 0


class PaginatedListService:
    """
    Cached, filtered, paginated listing over one repository.

    Args:
        repository: Data access for the listed entity
        cache: Result cache shared across requests
        namespace: Resource name used in cache keys
        mapper: Async function turning a page of rows into DTOs
    """

    def __init__(
        self,
        repository: BaseRepository,
        cache: ResultCache,
        namespace: str,
        mapper: RowMapper,
    ):
        self.repository = repository
        self.cache = cache
        self.namespace = namespace
        self.mapper = mapper

    async def list(
        self,
        filters,
        page: Optional[int] = 1,
        limit: Optional[int] = None,
        force_refresh: bool = False,
        cache_result: bool = True,
    ) -> Page:
        """
        Return one page of results matching the filters.

        A cached page is returned as-is unless force_refresh is set; a
        refreshed page is still written back to the cache.
        """
        page, limit = clamp_paging(page, limit)
        key = list_key(self.namespace, filters.cache_key(), page, limit)

        if not force_refresh:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        predicate = filters.to_predicate()
        # One session per request: count and fetch run one after the other
        total = await self.repository.count(predicate)
        rows = await self.repository.find(predicate, skip=(page - 1) * limit, limit=limit)
        data = await self.mapper(rows)

        result = Page(
            data=data,
            meta=PageMeta(page=page, limit=limit, total=total, last_page=last_page(total, limit)),
        )
        logger.debug(f"Listed {self.namespace}: page {page}/{result.meta.last_page}, {len(data)} of {total}")

        if cache_result:
            self.cache.set(key, result)
        return result
