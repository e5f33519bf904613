"""Single-record lookups and part-level views of the general voter roll."""

from typing import Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from kural.core.database import run_store_operation
from kural.core.exceptions import InvalidPartNumberError, RecordNotFoundError
from kural.services.aliases import EPIC_NUMBER, PART_NUMBER, resolve_aliases
from kural.services.filters import FilterSpec
from kural.services.gender import GenderSummary, coalesce_expression
from kural.services.listing import CATEGORIES, summarize_gender
from kural.services.normalizer import normalize_record
from kural.utils.numbers import parse_non_negative_int

VOTERS = CATEGORIES["voters"]


def parse_part_number(raw: str) -> int | None:
    """
    Parse a part number path segment.

    ``"119 -001"`` yields 1 (the number after the hyphen), ``"001"`` yields
    1, anything containing ``All`` means every part and yields None.

    Raises:
        InvalidPartNumberError: the segment holds no usable number
    """
    if "All" in raw or raw.strip().lower() == "all":
        return None
    pieces = raw.split("-")
    value = parse_non_negative_int(pieces[1] if len(pieces) > 1 else pieces[0])
    if value is None:
        raise InvalidPartNumberError(raw)
    return value


def part_filter(part_number: int | None) -> FilterSpec:
    """Filter for one part of the general roll (no criteria for all parts)."""
    spec = FilterSpec(collection=VOTERS.key, search_fields=VOTERS.search_fields)
    if part_number is not None:
        spec.add_number(PART_NUMBER, part_number)
    return spec


def epic_query(epic_number: str) -> dict:
    paths = resolve_aliases(EPIC_NUMBER, VOTERS.key)
    return {"$or": [{path: epic_number} for path in paths]}


async def get_voter_by_epic(db: AsyncIOMotorDatabase, epic_number: str) -> dict:
    """Exact EPIC number lookup across every EPIC key variant."""
    document = await run_store_operation(
        db[VOTERS.collection_name].find_one(epic_query(epic_number.strip())),
        "find voter by EPIC number",
    )
    if document is None:
        raise RecordNotFoundError(message="Voter not found with this EPIC number")
    return normalize_record(document, VOTERS.key)


async def get_voter(db: AsyncIOMotorDatabase, voter_id: str) -> dict:
    """Look a voter up by store id, falling back to EPIC number."""
    if ObjectId.is_valid(voter_id):
        document = await run_store_operation(
            db[VOTERS.collection_name].find_one({"_id": ObjectId(voter_id)}),
            "find voter by id",
        )
        if document is not None:
            return normalize_record(document, VOTERS.key)

    try:
        return await get_voter_by_epic(db, voter_id)
    except RecordNotFoundError:
        raise RecordNotFoundError() from None


async def get_part_gender_stats(
    db: AsyncIOMotorDatabase, part_number: int | None
) -> GenderSummary:
    """Gender summary for one part of the general roll."""
    query = part_filter(part_number).to_query()
    return await run_store_operation(
        summarize_gender(db[VOTERS.collection_name], VOTERS, query),
        "part gender statistics",
    )


def part_names_pipeline() -> list[dict]:
    """Distinct parts with their names, ordered by part number."""
    return [
        {
            "$addFields": {
                "partNumber": coalesce_expression(
                    resolve_aliases(PART_NUMBER, VOTERS.key)
                )
            }
        },
        {"$match": {"partNumber": {"$ne": None}}},
        {
            "$group": {
                "_id": "$partNumber",
                "partName": {"$first": "$Part Name"},
                "partNameTamil": {"$first": "$Part Name Tamil"},
            }
        },
        {"$sort": {"_id": 1}},
        {
            "$project": {
                "_id": 0,
                "partNumber": "$_id",
                "partName": 1,
                "partNameTamil": 1,
            }
        },
    ]


async def list_part_names(db: AsyncIOMotorDatabase) -> list[dict[str, Any]]:
    cursor = db[VOTERS.collection_name].aggregate(part_names_pipeline())
    return await run_store_operation(cursor.to_list(length=None), "list part names")
