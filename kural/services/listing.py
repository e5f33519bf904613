"""Category listings: filter, paginate, normalize and summarize in one pass.

Every voter category (general roll, 60+, 80+, fatherless, ...) is one
``VoterCategory`` entry; the listing routes are all driven by
``list_voters`` so they share the same envelope and summary rules.
"""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase

from kural.core.database import run_store_operation
from kural.core.exceptions import NoSearchCriteriaError, UnsupportedFieldError
from kural.core.logging_config import get_logger
from kural.services.aliases import (
    EPIC_NUMBER,
    GENDER,
    MOBILE_NUMBER,
    NAME,
    resolve_aliases,
)
from kural.services.filters import FilterSpec
from kural.services.gender import (
    GenderBucket,
    GenderSummary,
    summarize_by_aggregation,
    summarize_by_literals,
)
from kural.services.normalizer import normalize_records
from kural.services.pagination import PageRequest, PageResult, paginate

logger = get_logger(__name__)

AGGREGATE = "aggregate"
LITERALS = "literals"


@dataclass(frozen=True)
class VoterCategory:
    key: str
    collection_name: str
    title: str
    search_fields: tuple[str, ...] = (NAME, EPIC_NUMBER)
    sort: tuple[tuple[str, int], ...] = (("_id", 1),)
    gender_strategy: str = AGGREGATE
    gender_literals: Mapping[str, GenderBucket] = field(default_factory=dict)


CATEGORIES: dict[str, VoterCategory] = {
    category.key: category
    for category in (
        VoterCategory(
            key="voters",
            collection_name="voters",
            title="Voters",
            sort=(("sr", 1), ("_id", 1)),
        ),
        VoterCategory(
            key="age60", collection_name="60 and above", title="Age 60+ voters"
        ),
        VoterCategory(
            key="age80", collection_name="80 and above", title="Age 80+ voters"
        ),
        VoterCategory(
            key="fatherless", collection_name="fatherless", title="Fatherless voters"
        ),
        VoterCategory(
            key="transgender",
            collection_name="Transegender Voter",
            title="Transgender voters",
        ),
        VoterCategory(
            key="mobile",
            collection_name="mobile",
            title="Mobile-linked voters",
            search_fields=(NAME, EPIC_NUMBER, MOBILE_NUMBER),
        ),
        # gender is lower-cased on write for this collection
        VoterCategory(
            key="soon",
            collection_name="soon_voter",
            title="Soon-to-be voters",
            sort=(("createdAt", -1), ("_id", 1)),
            gender_strategy=LITERALS,
            gender_literals={"male": GenderBucket.MALE, "female": GenderBucket.FEMALE},
        ),
    )
}


def get_category(key: str) -> VoterCategory:
    try:
        return CATEGORIES[key]
    except KeyError:
        raise UnsupportedFieldError("*", key) from None


@dataclass
class ListingResult:
    items: list[dict[str, Any]]
    page: PageResult
    gender_summary: GenderSummary | None
    criteria_count: int = 0


def resolve_sort(
    category: VoterCategory, sort_by: str | None = None, sort_order: str = "asc"
) -> list[tuple[str, int]]:
    """Sort keys for a listing; ``sort_by`` is a logical field name."""
    if not sort_by:
        return list(category.sort)
    direction = -1 if sort_order.lower() == "desc" else 1
    primary = resolve_aliases(sort_by, category.key)[0]
    # _id keeps page boundaries stable between requests
    return [(primary, direction), ("_id", 1)]


async def summarize_gender(
    collection: AsyncIOMotorCollection, category: VoterCategory, query: dict
) -> GenderSummary:
    """Gender summary over the whole filtered set using the category strategy."""
    gender_paths = resolve_aliases(GENDER, category.key)
    if category.gender_strategy == LITERALS:
        return await summarize_by_literals(
            collection, query, gender_paths, category.gender_literals
        )
    return await summarize_by_aggregation(collection, query, gender_paths)


async def list_voters(
    db: AsyncIOMotorDatabase,
    category: VoterCategory,
    spec: FilterSpec,
    page_request: PageRequest,
    sort_by: str | None = None,
    sort_order: str = "asc",
    require_criteria: bool = False,
    include_summary: bool = True,
) -> ListingResult:
    """
    Serve one page of a category.

    The count, the page fetch and the gender summary are independent reads
    of the same filter and run concurrently; the result is returned only
    once all of them have completed.

    Raises:
        NoSearchCriteriaError: ``require_criteria`` is set and ``spec`` is empty
        UnsupportedFieldError: ``sort_by`` has no mapping
        StoreUnavailableError: the store failed or timed out
    """
    if require_criteria and spec.is_empty:
        raise NoSearchCriteriaError()

    query = spec.to_query()
    sort = resolve_sort(category, sort_by, sort_order)
    collection = db[category.collection_name]

    reads = [paginate(collection, query, page_request, sort=sort)]
    if include_summary:
        reads.append(summarize_gender(collection, category, query))

    results = await run_store_operation(
        asyncio.gather(*reads), f"list {category.key}"
    )
    items, page = results[0]
    summary = results[1] if include_summary else None

    return ListingResult(
        items=normalize_records(items, category.key),
        page=page,
        gender_summary=summary,
        criteria_count=spec.criteria_count,
    )
