"""Paginated listing routes, one per voter category."""

from typing import Annotated

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from kural.api.deps import ListingQuery, caller_id, get_optional_user, listing_query
from kural.core.database import get_db
from kural.core.logging_config import access_logger
from kural.core.responses import ErrorResponse, ListingResponse, paginated_response
from kural.services.listing import (
    ListingResult,
    VoterCategory,
    get_category,
    list_voters,
)

LISTING_PREFIXES = {
    "voters": "/voters",
    "age60": "/voters60",
    "age80": "/voters80",
    "fatherless": "/fatherless-voters",
    "transgender": "/transgender-voters",
    "mobile": "/mobile-voters",
    "soon": "/soon-voters",
}

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Unsupported field"},
    401: {"model": ErrorResponse, "description": "Invalid bearer token"},
    500: {"model": ErrorResponse, "description": "Document store unavailable"},
}


def listing_envelope(
    category: VoterCategory, result: ListingResult, current_user: dict | None
) -> dict:
    """Log a served page and wrap it in the listing envelope."""
    access_logger.log_listing(
        category.key,
        result.page.page,
        result.page.limit,
        result.page.total_count,
        user_id=caller_id(current_user),
        filters_applied=result.criteria_count,
    )
    return paginated_response(result.items, result.page, result.gender_summary)


def build_listing_router(category: VoterCategory, prefix: str) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[category.title])

    @router.get(
        "/list",
        response_model=ListingResponse,
        responses=ERROR_RESPONSES,
        name=f"list_{category.key}",
        summary=f"List {category.title.lower()}",
    )
    async def list_category(
        params: Annotated[ListingQuery, Depends(listing_query)],
        db: Annotated[AsyncIOMotorDatabase, Depends(get_db)],
        current_user: Annotated[dict | None, Depends(get_optional_user)],
    ):
        """
        One page of the category with the gender summary of the whole
        filtered set.

        Malformed ``page``/``limit`` fall back to the defaults and malformed
        numeric filters are ignored. Without criteria the whole category is
        listed.
        """
        result = await list_voters(
            db,
            category,
            params.filter_spec(category),
            params.page_request(),
            sort_by=params.sort_by,
            sort_order=params.sort_order,
        )
        return listing_envelope(category, result, current_user)

    return router


routers = [
    build_listing_router(get_category(key), prefix)
    for key, prefix in LISTING_PREFIXES.items()
]
