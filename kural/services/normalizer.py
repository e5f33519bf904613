"""Merge dual-shape voter documents into one canonical record.

A stored document may carry its fields at the root, inside the ``s``
sub-document, or both. The canonical record is the root merged over the
sub-document (a non-null root value always wins), with ``_id`` turned into
a string ``id``, plus one key per logical field of the collection resolved
through its alias list. Normalizing a canonical record again is a no-op.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from bson import ObjectId

from kural.services.aliases import (
    ALIAS_TABLES,
    GENDER,
    INTEGER_FIELDS,
    NAME,
    NESTED_KEY,
)
from kural.services.gender import classify_gender
from kural.utils.numbers import parse_non_negative_int

GENDER_BUCKET_KEY = "genderBucket"


def unwrap(value: Any) -> Any:
    """Unwrap ``{"value": x, "visible": ...}`` field wrappers."""
    while isinstance(value, Mapping) and "value" in value:
        value = value["value"]
    return value


def _plain(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, Mapping):
        return {key: _plain(unwrap(item)) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(unwrap(item)) for item in value]
    return value


def _is_scalar(value: Any) -> bool:
    return value is not None and not isinstance(value, (Mapping, list))


def lookup_path(record: Mapping[str, Any], path: str) -> Any:
    """Walk a dotted key path (keys may contain spaces); None when absent."""
    current: Any = record
    for part in path.split("."):
        current = unwrap(current)
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return unwrap(current)


def _merge(document: Mapping[str, Any]) -> dict[str, Any]:
    nested = unwrap(document.get(NESTED_KEY))
    merged: dict[str, Any] = {}

    if isinstance(nested, Mapping):
        for key, value in nested.items():
            merged[key] = _plain(unwrap(value))

    for key, value in document.items():
        if key == "_id" or (key == NESTED_KEY and isinstance(nested, Mapping)):
            continue
        value = _plain(unwrap(value))
        if value is None and merged.get(key) is not None:
            continue
        merged[key] = value

    if "_id" in document:
        merged["id"] = str(document["_id"])
    return merged


def _resolve(merged: Mapping[str, Any], paths: Iterable[str]) -> Any:
    prefix = NESTED_KEY + "."
    for path in paths:
        # nested values are already folded into the merged root
        key_path = path[len(prefix):] if path.startswith(prefix) else path
        value = lookup_path(merged, key_path)
        if value is not None:
            return value
    return None


def _name_text(value: Any) -> Any:
    if isinstance(value, Mapping):
        return value.get("english") or value.get("tamil")
    return value


def normalize_record(document: Mapping[str, Any], collection: str) -> dict[str, Any]:
    """Return the canonical form of one stored document."""
    table = ALIAS_TABLES.get(collection, {})
    record = _merge(document)

    for field, paths in table.items():
        value = _resolve(record, paths)
        if value is None and _is_scalar(record.get(field)):
            value = record[field]
        if field == NAME:
            value = _name_text(value)
        if field in INTEGER_FIELDS:
            value = parse_non_negative_int(value)

        if value is None:
            record.pop(field, None)
        else:
            record[field] = value

    if GENDER in table:
        record[GENDER_BUCKET_KEY] = classify_gender(record.get(GENDER)).value
    return record


def normalize_records(
    documents: Iterable[Mapping[str, Any]], collection: str
) -> list[dict[str, Any]]:
    """Normalize every document of a page; none is passed through raw."""
    return [normalize_record(document, collection) for document in documents]
