"""
Unit tests for dual-shape record normalization.
"""

from bson import ObjectId

from kural.services.normalizer import (
    lookup_path,
    normalize_record,
    normalize_records,
    unwrap,
)


class TestHelpers:
    def test_unwrap_value_wrapper(self):
        assert unwrap({"value": "Ravi", "visible": True}) == "Ravi"
        assert unwrap("Ravi") == "Ravi"

    def test_lookup_path_with_spaces(self):
        record = {"s": {"Father Name": "Raman"}}

        assert lookup_path(record, "s.Father Name") == "Raman"
        assert lookup_path(record, "s.Name") is None
        assert lookup_path(record, "Name.english") is None


class TestNormalizeRecord:
    def test_flat_category_record(self):
        oid = ObjectId()
        document = {
            "_id": oid,
            "Name": "Ravi",
            "Number": "ABC731",
            "age": "67",
            "sex": "M",
            "Part_no": "12",
        }

        record = normalize_record(document, "age60")

        assert record["id"] == str(oid)
        assert "_id" not in record
        assert record["name"] == "Ravi"
        assert record["epicNumber"] == "ABC731"
        assert record["age"] == 67
        assert record["partNumber"] == 12
        assert record["genderBucket"] == "male"
        # stored keys are kept
        assert record["Name"] == "Ravi"

    def test_nested_only_record(self):
        document = {
            "_id": ObjectId(),
            "s": {"Name": "Meena", "Number": "XYZ1", "age": 81, "sex": "Female"},
        }

        record = normalize_record(document, "age80")

        assert "s" not in record
        assert record["name"] == "Meena"
        assert record["age"] == 81
        assert record["genderBucket"] == "female"

    def test_root_wins_over_nested(self):
        document = {"Name": "Root Name", "s": {"Name": "Nested Name", "age": 70}}

        record = normalize_record(document, "age60")

        assert record["name"] == "Root Name"
        assert record["age"] == 70

    def test_null_root_falls_back_to_nested(self):
        document = {"Name": None, "s": {"Name": "Nested Name"}}

        record = normalize_record(document, "age60")

        assert record["name"] == "Nested Name"
        assert record["Name"] == "Nested Name"

    def test_general_roll_name_object(self):
        document = {
            "name": {"english": "Kumar", "tamil": "குமார்"},
            "voterID": "TN01",
            "gender": "Third",
            "sr": "15",
            "boothno": 3,
        }

        record = normalize_record(document, "voters")

        assert record["name"] == "Kumar"
        assert record["epicNumber"] == "TN01"
        assert record["serialNumber"] == 15
        assert record["partNumber"] == 3
        assert record["genderBucket"] == "other"

    def test_tamil_name_fallback(self):
        record = normalize_record({"name": {"tamil": "குமார்"}}, "voters")

        assert record["name"] == "குமார்"

    def test_value_wrappers_are_unwrapped(self):
        document = {"Name": {"value": "Ravi", "visible": True}, "age": {"value": "66"}}

        record = normalize_record(document, "age60")

        assert record["name"] == "Ravi"
        assert record["age"] == 66

    def test_unparseable_integer_is_dropped(self):
        record = normalize_record({"Name": "Ravi", "age": "old"}, "age60")

        assert "age" not in record

    def test_missing_gender_is_other(self):
        record = normalize_record({"Name": "Ravi"}, "fatherless")

        assert record["genderBucket"] == "other"

    def test_soon_voter_record(self):
        document = {
            "voterName": "Anu",
            "relationName": "Bala",
            "epicId": "SOON1",
            "gender": "female",
            "part": "4",
        }

        record = normalize_record(document, "soon")

        assert record["name"] == "Anu"
        assert record["guardianName"] == "Bala"
        assert record["partNumber"] == 4
        assert record["genderBucket"] == "female"

    def test_idempotent(self):
        document = {
            "_id": ObjectId(),
            "Name": None,
            "sex": "F",
            "s": {"Name": "Meena", "age": "70", "Door_No": "4A"},
        }

        once = normalize_record(document, "age60")
        twice = normalize_record(once, "age60")

        assert twice == once

    def test_idempotent_general_roll(self):
        document = {
            "_id": ObjectId(),
            "name": {"english": "Kumar"},
            "s": {"Number": "TN9", "age": 44},
            "sex": "male",
        }

        once = normalize_record(document, "voters")

        assert normalize_record(once, "voters") == once

    def test_normalize_records_covers_every_item(self):
        records = normalize_records([{"Name": "A"}, {"s": {"Name": "B"}}], "age60")

        assert [record["name"] for record in records] == ["A", "B"]
