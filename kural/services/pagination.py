"""Page bounds, page metadata and the concurrent count/fetch pair."""

import asyncio
import math
from dataclasses import dataclass
from typing import Any

from motor.motor_asyncio import AsyncIOMotorCollection

from kural.core.config import settings
from kural.utils.numbers import parse_int


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_params(
        cls,
        page: Any = None,
        limit: Any = None,
        default_limit: int | None = None,
        max_limit: int | None = None,
    ) -> "PageRequest":
        """Build bounds from raw query values; garbage falls back to defaults."""
        default_limit = default_limit or settings.DEFAULT_PAGE_LIMIT
        max_limit = max_limit or settings.MAX_PAGE_LIMIT

        parsed_page = parse_int(page) or 1
        parsed_limit = parse_int(limit) or default_limit
        return cls(
            page=max(parsed_page, 1),
            limit=min(max(parsed_limit, 1), max_limit),
        )


@dataclass(frozen=True)
class PageResult:
    page: int
    limit: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit)

    @property
    def has_next(self) -> bool:
        return self.page * self.limit < self.total_count

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentPage": self.page,
            "totalPages": self.total_pages,
            "totalCount": self.total_count,
            "limit": self.limit,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


async def fetch_page(
    collection: AsyncIOMotorCollection,
    query: dict,
    request: PageRequest,
    sort: list[tuple[str, int]] | None = None,
) -> list[dict]:
    """Fetch one bounded slice of the matched set."""
    cursor = collection.find(
        query, sort=sort or None, skip=request.skip, limit=request.limit
    )
    return await cursor.to_list(length=request.limit)


async def paginate(
    collection: AsyncIOMotorCollection,
    query: dict,
    request: PageRequest,
    sort: list[tuple[str, int]] | None = None,
) -> tuple[list[dict], PageResult]:
    """Run the count and the bounded fetch concurrently and join them."""
    total, items = await asyncio.gather(
        collection.count_documents(query),
        fetch_page(collection, query, request, sort=sort),
    )
    return items, PageResult(page=request.page, limit=request.limit, total_count=total)
