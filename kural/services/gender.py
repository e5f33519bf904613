"""Gender classification and the three-bucket gender summary.

Gender is stored as free text (``Male``, ``M``, ``female``, ``Third``,
``t``, ...). The raw value is never rewritten; it is classified on the way
out by ``classify_gender``, which is total: every input, including
``None`` and unknown strings, lands in exactly one bucket.
"""

import asyncio
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from motor.motor_asyncio import AsyncIOMotorCollection

from kural.core.logging_config import get_logger

logger = get_logger(__name__)


class GenderBucket(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


_MALE_TOKENS = frozenset({"male", "m"})
_FEMALE_TOKENS = frozenset({"female", "f"})


def classify_gender(raw: Any) -> GenderBucket:
    """Map a stored gender value onto its bucket."""
    if raw is None:
        return GenderBucket.OTHER
    token = str(raw).strip().lower()
    if token in _MALE_TOKENS:
        return GenderBucket.MALE
    if token in _FEMALE_TOKENS:
        return GenderBucket.FEMALE
    return GenderBucket.OTHER


@dataclass
class GenderSummary:
    male: int = 0
    female: int = 0
    other: int = 0

    @property
    def total(self) -> int:
        return self.male + self.female + self.other

    def add(self, bucket: GenderBucket, count: int = 1) -> None:
        setattr(self, bucket.value, getattr(self, bucket.value) + count)

    def to_dict(self) -> dict[str, int]:
        return {
            "male": self.male,
            "female": self.female,
            "other": self.other,
            "total": self.total,
        }


def fold_gender_groups(groups: Iterable[Mapping[str, Any]]) -> GenderSummary:
    """Fold ``{_id: raw value, count: n}`` group rows into a summary."""
    summary = GenderSummary()
    for row in groups:
        summary.add(classify_gender(row.get("_id")), int(row.get("count", 0)))
    return summary


def coalesce_expression(paths: Sequence[str]) -> Any:
    """First non-null of ``paths`` as a nested ``$ifNull`` expression."""
    if not paths:
        raise ValueError("At least one key path is required")
    expression: Any = f"${paths[-1]}"
    for path in reversed(paths[:-1]):
        expression = {"$ifNull": [f"${path}", expression]}
    return expression


def gender_pipeline(query: dict, gender_paths: Sequence[str]) -> list[dict]:
    """Aggregation pipeline grouping the matched set by raw gender value."""
    return [
        {"$match": query},
        {"$project": {"_id": 0, "gender": coalesce_expression(gender_paths)}},
        {"$group": {"_id": "$gender", "count": {"$sum": 1}}},
    ]


async def summarize_by_aggregation(
    collection: AsyncIOMotorCollection,
    query: dict,
    gender_paths: Sequence[str],
) -> GenderSummary:
    """
    Summarize with one aggregation pass over the filtered set.

    The store groups by the raw value (root key first, nested fallback);
    every group, including the null group, is then classified here so that
    no record can fall out of the total.
    """
    cursor = collection.aggregate(gender_pipeline(query, gender_paths))
    groups = await cursor.to_list(length=None)
    return fold_gender_groups(groups)


def literal_clause(gender_paths: Sequence[str], literal: str) -> dict:
    """Match ``literal`` under the first non-null alias only."""
    branches = []
    for index, path in enumerate(gender_paths):
        branch = {earlier: None for earlier in gender_paths[:index]}
        branch[path] = literal
        branches.append(branch)
    return branches[0] if len(branches) == 1 else {"$or": branches}


async def summarize_by_literals(
    collection: AsyncIOMotorCollection,
    query: dict,
    gender_paths: Sequence[str],
    literals: Mapping[str, GenderBucket],
) -> GenderSummary:
    """
    Summarize with one count per expected literal value.

    Only exact literals are counted, so this is reserved for collections
    whose gender values are normalized on write. Whatever the literals do
    not claim is counted as ``other``.
    """

    def _scoped(clause: dict) -> dict:
        return {"$and": [query, clause]} if query else clause

    ordered = list(literals.items())
    counts = await asyncio.gather(
        collection.count_documents(query),
        *(
            collection.count_documents(_scoped(literal_clause(gender_paths, literal)))
            for literal, _ in ordered
        ),
    )
    total, literal_counts = counts[0], counts[1:]

    summary = GenderSummary()
    for (literal, bucket), count in zip(ordered, literal_counts):
        if bucket is not GenderBucket.OTHER:
            summary.add(bucket, count)
    summary.other = max(total - summary.male - summary.female, 0)
    if summary.total != total:
        logger.warning(
            f"Literal gender counts exceed matched total ({summary.total} > {total})"
        )
    return summary
