"""General voter roll routes beyond the plain listing."""

from typing import Annotated

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from kural.api.deps import ListingQuery, caller_id, get_optional_user, listing_query
from kural.api.routes.categories import ERROR_RESPONSES, listing_envelope
from kural.core.database import get_db
from kural.core.exceptions import RecordNotFoundError
from kural.core.logging_config import access_logger
from kural.core.responses import ErrorResponse, ListingResponse, success_response
from kural.services.aliases import PART_NUMBER
from kural.services.listing import list_voters
from kural.services.voters import (
    VOTERS,
    get_part_gender_stats,
    get_voter,
    get_voter_by_epic,
    list_part_names,
    parse_part_number,
)
from kural.utils.numbers import parse_non_negative_int

router = APIRouter(prefix="/voters", tags=["Voters"])

DEFAULT_MIN_AGE = 60
DEFAULT_MAX_AGE = 120

LOOKUP_RESPONSES = {
    **ERROR_RESPONSES,
    404: {"model": ErrorResponse, "description": "Voter not found"},
}


async def _search(
    params: ListingQuery, db: AsyncIOMotorDatabase, current_user: dict | None
) -> dict:
    result = await list_voters(
        db,
        VOTERS,
        params.filter_spec(VOTERS),
        params.page_request(),
        sort_by=params.sort_by,
        sort_order=params.sort_order,
        require_criteria=True,
    )
    return listing_envelope(VOTERS, result, current_user)


@router.get("/search", response_model=ListingResponse, responses=ERROR_RESPONSES)
async def search_voters(
    params: Annotated[ListingQuery, Depends(listing_query)],
    db: Annotated[AsyncIOMotorDatabase, Depends(get_db)],
    current_user: Annotated[dict | None, Depends(get_optional_user)],
):
    """
    Advanced search over the general roll.

    At least one criterion is required; a request whose only criteria were
    malformed numbers is rejected with 400.
    """
    return await _search(params, db, current_user)


@router.post("/search", response_model=ListingResponse, responses=ERROR_RESPONSES)
async def search_voters_body(
    params: ListingQuery,
    db: Annotated[AsyncIOMotorDatabase, Depends(get_db)],
    current_user: Annotated[dict | None, Depends(get_optional_user)],
):
    """Advanced search with the criteria in a JSON body."""
    return await _search(params, db, current_user)


@router.get("/by-age-range", response_model=ListingResponse, responses=ERROR_RESPONSES)
async def voters_by_age_range(
    params: Annotated[ListingQuery, Depends(listing_query)],
    db: Annotated[AsyncIOMotorDatabase, Depends(get_db)],
    current_user: Annotated[dict | None, Depends(get_optional_user)],
):
    """Listing restricted to an age range, 60 to 120 unless given."""
    bounded = params.model_copy(
        update={
            "min_age": parse_non_negative_int(params.min_age) or DEFAULT_MIN_AGE,
            "max_age": parse_non_negative_int(params.max_age) or DEFAULT_MAX_AGE,
        }
    )
    result = await list_voters(
        db,
        VOTERS,
        bounded.filter_spec(VOTERS),
        bounded.page_request(),
        sort_by=bounded.sort_by,
        sort_order=bounded.sort_order,
    )
    return listing_envelope(VOTERS, result, current_user)


@router.get("/part-names")
async def part_names(db: Annotated[AsyncIOMotorDatabase, Depends(get_db)]):
    """Distinct parts of the roll with their names, by part number."""
    parts = await list_part_names(db)
    return success_response(data=parts)


@router.get(
    "/by-part/{part_number}", response_model=ListingResponse, responses=ERROR_RESPONSES
)
async def voters_by_part(
    part_number: str,
    params: Annotated[ListingQuery, Depends(listing_query)],
    db: Annotated[AsyncIOMotorDatabase, Depends(get_db)],
    current_user: Annotated[dict | None, Depends(get_optional_user)],
):
    """
    Listing of one part.

    Accepts ``"119 -001"``, ``"001"`` or ``"All"`` (every part).
    """
    part = parse_part_number(part_number)
    spec = params.filter_spec(VOTERS)
    if part is not None:
        spec.add_number(PART_NUMBER, part)

    result = await list_voters(
        db,
        VOTERS,
        spec,
        params.page_request(),
        sort_by=params.sort_by,
        sort_order=params.sort_order,
    )
    return listing_envelope(VOTERS, result, current_user)


@router.get("/part-gender-stats/{part_number}", responses=ERROR_RESPONSES)
async def part_gender_stats(
    part_number: str, db: Annotated[AsyncIOMotorDatabase, Depends(get_db)]
):
    part = parse_part_number(part_number)
    summary = await get_part_gender_stats(db, part)
    return success_response(data={"partNumber": part, **summary.to_dict()})


@router.get("/epic/{epic_number}", responses=LOOKUP_RESPONSES)
async def voter_by_epic(
    epic_number: str,
    db: Annotated[AsyncIOMotorDatabase, Depends(get_db)],
    current_user: Annotated[dict | None, Depends(get_optional_user)],
):
    try:
        voter = await get_voter_by_epic(db, epic_number)
    except RecordNotFoundError:
        access_logger.log_lookup("voter", epic_number, False, caller_id(current_user))
        raise
    access_logger.log_lookup("voter", epic_number, True, caller_id(current_user))
    return success_response(data=voter)


@router.get("/{voter_id}", responses=LOOKUP_RESPONSES)
async def voter_by_id(
    voter_id: str,
    db: Annotated[AsyncIOMotorDatabase, Depends(get_db)],
    current_user: Annotated[dict | None, Depends(get_optional_user)],
):
    """Single voter by store id, or by EPIC number when the id misses."""
    try:
        voter = await get_voter(db, voter_id)
    except RecordNotFoundError:
        access_logger.log_lookup("voter", voter_id, False, caller_id(current_user))
        raise
    access_logger.log_lookup("voter", voter_id, True, caller_id(current_user))
    return success_response(data=voter)
