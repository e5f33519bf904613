"""
Unit tests for the alias-aware filter builder.
"""

import pytest

from kural.core.exceptions import UnsupportedFieldError
from kural.services.aliases import AGE, EPIC_NUMBER, NAME, PART_NUMBER
from kural.services.filters import FilterSpec, build_filter_spec

CATEGORY_FIELDS = (NAME, EPIC_NUMBER)


class TestFilterSpec:
    def test_empty_spec_matches_everything(self):
        spec = FilterSpec(collection="age60", search_fields=CATEGORY_FIELDS)

        assert spec.is_empty
        assert spec.criteria_count == 0
        assert spec.to_query() == {}

    def test_text_spans_fields_and_aliases(self):
        spec = FilterSpec(collection="age60", search_fields=CATEGORY_FIELDS)
        spec.set_text("  731 ")

        pattern = {"$regex": "731", "$options": "i"}
        assert spec.to_query() == {
            "$or": [
                {"Name": pattern},
                {"s.Name": pattern},
                {"Number": pattern},
                {"s.Number": pattern},
            ]
        }

    def test_text_is_escaped(self):
        spec = FilterSpec(collection="soon", search_fields=(NAME,))
        spec.set_text("a.b*")

        assert spec.to_query() == {"voterName": {"$regex": r"a\.b\*", "$options": "i"}}

    def test_blank_text_is_no_criterion(self):
        spec = FilterSpec(collection="age60", search_fields=CATEGORY_FIELDS)
        spec.set_text("   ")

        assert spec.is_empty

    def test_number_matches_int_and_string(self):
        spec = FilterSpec(collection="age60")
        spec.add_number(AGE, "61")

        candidates = {"$in": [61, "61"]}
        assert spec.to_query() == {
            "$or": [{"age": candidates}, {"s.age": candidates}]
        }

    def test_malformed_number_is_dropped(self):
        spec = FilterSpec(collection="age60")
        spec.add_number(AGE, "abc")

        assert spec.is_empty

    def test_range_with_one_bound(self):
        spec = FilterSpec(collection="soon")
        spec.add_range(AGE, "60", None)

        assert spec.to_query() == {"age": {"$gte": 60}}

    def test_range_drops_malformed_bound_only(self):
        spec = FilterSpec(collection="soon")
        spec.add_range(AGE, "x", "80")

        assert spec.to_query() == {"age": {"$lte": 80}}

    def test_criteria_are_anded(self):
        spec = FilterSpec(collection="soon", search_fields=(NAME,))
        spec.set_text("ravi")
        spec.add_number(PART_NUMBER, 12)

        query = spec.to_query()

        assert list(query) == ["$and"]
        assert len(query["$and"]) == 2
        assert spec.criteria_count == 2

    def test_unmapped_field_raises(self):
        spec = FilterSpec(collection="age60")

        with pytest.raises(UnsupportedFieldError):
            spec.add_number("serialNumber", 5)

    def test_search_fields_are_validated(self):
        spec = FilterSpec(collection="age60")

        with pytest.raises(UnsupportedFieldError):
            spec.set_text("x", ["serialNumber"])


class TestBuildFilterSpec:
    def test_composite_name(self):
        spec = build_filter_spec(
            "soon", (NAME,), first_name=" Ravi ", last_name="Kumar"
        )

        assert spec.to_query() == {
            "voterName": {"$regex": r"Ravi\ Kumar", "$options": "i"}
        }

    def test_composite_name_with_one_part(self):
        spec = build_filter_spec("soon", (NAME,), first_name="Ravi")

        assert spec.to_query() == {"voterName": {"$regex": "Ravi", "$options": "i"}}

    def test_search_in_narrows_text(self):
        spec = build_filter_spec("age60", CATEGORY_FIELDS, q="abc", search_in=[NAME])

        assert spec.to_query() == {
            "$or": [
                {"Name": {"$regex": "abc", "$options": "i"}},
                {"s.Name": {"$regex": "abc", "$options": "i"}},
            ]
        }

    def test_only_malformed_numbers_leaves_spec_empty(self):
        spec = build_filter_spec("voters", CATEGORY_FIELDS, age="abc", part_no="x")

        assert spec.is_empty

    def test_structured_fields(self):
        spec = build_filter_spec(
            "voters",
            CATEGORY_FIELDS,
            father_name="Raman",
            part_no="001",
            serial_no="15",
            min_age="18",
            max_age="30",
        )

        clauses = spec.to_query()["$and"]

        assert len(clauses) == 4
        assert {"sr": {"$in": [15, "15"]}} in clauses
        assert {
            "$or": [{"Part_no": {"$in": [1, "1"]}}, {"boothno": {"$in": [1, "1"]}}]
        } in clauses
