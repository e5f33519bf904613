"""Turn free text and structured parameters into an alias-aware store filter.

Each criterion becomes one clause: a disjunction over every stored key
that may hold the field (and, for free text, over every searchable field).
Clauses are ANDed. Text matches are case-insensitive substring matches on
the trimmed input; numbers match exactly. A number that does not parse is
dropped from the filter, never turned into an error.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from kural.core.logging_config import get_logger
from kural.services.aliases import (
    AGE,
    EPIC_NUMBER,
    GUARDIAN_NAME,
    MOBILE_NUMBER,
    NAME,
    PART_NUMBER,
    SERIAL_NUMBER,
    resolve_aliases,
)
from kural.utils.numbers import parse_non_negative_int

logger = get_logger(__name__)


def _clean(text: Any) -> str:
    return str(text).strip() if text is not None else ""


def _substring(text: str) -> dict:
    return {"$regex": re.escape(text), "$options": "i"}


def _any_of(clauses: list[dict]) -> dict:
    return clauses[0] if len(clauses) == 1 else {"$or": clauses}


@dataclass
class FilterSpec:
    """Request-scoped search criteria for one collection."""

    collection: str
    search_fields: tuple[str, ...] = ()
    text: str | None = None
    terms: list[tuple[str, str]] = field(default_factory=list)
    numbers: list[tuple[str, int]] = field(default_factory=list)
    ranges: list[tuple[str, int | None, int | None]] = field(default_factory=list)

    def set_text(self, text: Any, search_fields: Iterable[str] | None = None) -> None:
        """Free-text search across the searchable fields."""
        if search_fields is not None:
            fields = tuple(search_fields)
            for name in fields:
                resolve_aliases(name, self.collection)
            self.search_fields = fields
        cleaned = _clean(text)
        self.text = cleaned or None

    def add_text_term(self, name: str, *parts: Any) -> None:
        """Substring match on one field; several parts are joined with a space."""
        cleaned = " ".join(p for p in (_clean(part) for part in parts) if p)
        if not cleaned:
            return
        resolve_aliases(name, self.collection)
        self.terms.append((name, cleaned))

    def add_number(self, name: str, raw: Any) -> None:
        """Exact numeric match; unparseable input is dropped."""
        if raw is None or _clean(raw) == "":
            return
        value = parse_non_negative_int(raw)
        if value is None:
            logger.debug(f"Dropping malformed {name} filter value: {raw!r}")
            return
        resolve_aliases(name, self.collection)
        self.numbers.append((name, value))

    def add_range(self, name: str, low: Any = None, high: Any = None) -> None:
        """Inclusive range; a malformed bound is dropped on its own."""
        parsed_low = parse_non_negative_int(low) if _clean(low) else None
        parsed_high = parse_non_negative_int(high) if _clean(high) else None
        if _clean(low) and parsed_low is None:
            logger.debug(f"Dropping malformed lower {name} bound: {low!r}")
        if _clean(high) and parsed_high is None:
            logger.debug(f"Dropping malformed upper {name} bound: {high!r}")
        if parsed_low is None and parsed_high is None:
            return
        resolve_aliases(name, self.collection)
        self.ranges.append((name, parsed_low, parsed_high))

    @property
    def is_empty(self) -> bool:
        return not (self.text or self.terms or self.numbers or self.ranges)

    @property
    def criteria_count(self) -> int:
        structured = len(self.terms) + len(self.numbers) + len(self.ranges)
        return int(bool(self.text)) + structured

    def _over_aliases(self, name: str, condition: dict) -> dict:
        paths = resolve_aliases(name, self.collection)
        return _any_of([{path: dict(condition)} for path in paths])

    def _text_clause(self) -> dict | None:
        if not self.text or not self.search_fields:
            return None
        pattern = _substring(self.text)
        return _any_of(
            [
                {path: pattern}
                for name in self.search_fields
                for path in resolve_aliases(name, self.collection)
            ]
        )

    def to_query(self) -> dict:
        """Build the store filter; no criteria means no filtering."""
        clauses: list[dict] = []

        text_clause = self._text_clause()
        if text_clause:
            clauses.append(text_clause)

        for name, text in self.terms:
            pattern = _substring(text)
            clauses.append(self._over_aliases(name, pattern))

        for name, value in self.numbers:
            # numbers are sometimes imported as strings
            candidates = {"$in": [value, str(value)]}
            clauses.append(self._over_aliases(name, candidates))

        for name, low, high in self.ranges:
            bounds: dict[str, int] = {}
            if low is not None:
                bounds["$gte"] = low
            if high is not None:
                bounds["$lte"] = high
            clauses.append(self._over_aliases(name, bounds))

        if not clauses:
            return {}
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}


def build_filter_spec(
    collection: str,
    search_fields: Sequence[str],
    q: Any = None,
    search_in: Sequence[str] | None = None,
    age: Any = None,
    min_age: Any = None,
    max_age: Any = None,
    part_no: Any = None,
    serial_no: Any = None,
    name: Any = None,
    father_name: Any = None,
    number: Any = None,
    mobile_no: Any = None,
    first_name: Any = None,
    last_name: Any = None,
    relation_first_name: Any = None,
    relation_last_name: Any = None,
) -> FilterSpec:
    """
    Collect every supplied criterion for ``collection``.

    ``search_in`` narrows which logical fields ``q`` is matched against;
    by default the collection's searchable fields are used.

    Raises:
        UnsupportedFieldError: a criterion targets a field the collection
            has no mapping for
    """
    spec = FilterSpec(collection=collection, search_fields=tuple(search_fields))
    spec.set_text(q, search_in if search_in else None)

    spec.add_text_term(NAME, name)
    spec.add_text_term(NAME, first_name, last_name)
    spec.add_text_term(GUARDIAN_NAME, father_name)
    spec.add_text_term(GUARDIAN_NAME, relation_first_name, relation_last_name)
    spec.add_text_term(EPIC_NUMBER, number)
    spec.add_text_term(MOBILE_NUMBER, mobile_no)

    spec.add_number(AGE, age)
    spec.add_range(AGE, min_age, max_age)
    spec.add_number(PART_NUMBER, part_no)
    spec.add_number(SERIAL_NUMBER, serial_no)
    return spec
