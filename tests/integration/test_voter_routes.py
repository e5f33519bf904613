"""
Integration tests for the general voter roll endpoints.
"""

from bson import ObjectId
import pytest

from kural import main


async def seed_voters(mongo_db):
    await mongo_db["voters"].insert_many(
        [
            {
                "_id": ObjectId("65a1b2c3d4e5f60718293a4b"),
                "Name": "Ravi",
                "Number": "TN0001",
                "age": 34,
                "sex": "Male",
                "Part_no": 1,
                "sr": 1,
            },
            {
                "name": {"english": "Meena", "tamil": "மீனா"},
                "voterID": "TN0002",
                "age": 67,
                "gender": "Female",
                "boothno": "1",
                "sr": 2,
            },
            {
                "s": {"Name": "Kala", "Number": "TN0003", "age": 82, "sex": "F"},
                "Part_no": 2,
                "sr": 3,
            },
        ]
    )


class TestSearch:
    @pytest.mark.asyncio
    async def test_get_without_criteria_is_rejected(self, async_client):
        response = await async_client.get("/voters/search")

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "no_search_criteria"
        assert body["message"] == "Please provide at least one search parameter"

    @pytest.mark.asyncio
    async def test_only_malformed_numbers_is_rejected(self, async_client):
        response = await async_client.get("/voters/search", params={"age": "abc"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_post_without_criteria_is_rejected(self, async_client):
        response = await async_client.post("/voters/search", json={"page": 1})

        assert response.status_code == 400
        assert response.json()["error"] == "no_search_criteria"

    @pytest.mark.asyncio
    async def test_get_search_matches_any_name_variant(self, async_client, mongo_db):
        await seed_voters(mongo_db)

        response = await async_client.get("/voters/search", params={"q": "meena"})

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"]["totalCount"] == 1
        assert body["data"][0]["name"] == "Meena"
        assert body["data"][0]["epicNumber"] == "TN0002"

    @pytest.mark.asyncio
    async def test_post_search_with_numbers(self, async_client, mongo_db):
        await seed_voters(mongo_db)

        response = await async_client.post(
            "/voters/search", json={"partNo": 1, "limit": 10}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"]["totalCount"] == 2
        assert body["genderSummary"] == {
            "male": 1,
            "female": 1,
            "other": 0,
            "total": 2,
        }

    @pytest.mark.asyncio
    async def test_post_fractional_number_is_dropped(self, async_client, mongo_db):
        await seed_voters(mongo_db)

        response = await async_client.post(
            "/voters/search", json={"Name": "ravi", "age": 40.5}
        )

        assert response.status_code == 200
        assert response.json()["pagination"]["totalCount"] == 1

    @pytest.mark.asyncio
    async def test_post_sort_order_is_case_insensitive(self, async_client, mongo_db):
        await seed_voters(mongo_db)

        response = await async_client.post(
            "/voters/search",
            json={"q": "TN000", "sortBy": "serialNumber", "sortOrder": "DESC"},
        )

        assert response.status_code == 200
        assert [r["name"] for r in response.json()["data"]] == [
            "Kala",
            "Meena",
            "Ravi",
        ]


class TestLookups:
    @pytest.mark.asyncio
    async def test_by_id(self, async_client, mongo_db):
        await seed_voters(mongo_db)

        response = await async_client.get("/voters/65a1b2c3d4e5f60718293a4b")

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Ravi"

    @pytest.mark.asyncio
    async def test_by_id_falls_back_to_epic(self, async_client, mongo_db):
        await seed_voters(mongo_db)

        response = await async_client.get("/voters/TN0003")

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Kala"

    @pytest.mark.asyncio
    async def test_by_epic(self, async_client, mongo_db):
        await seed_voters(mongo_db)

        response = await async_client.get("/voters/epic/TN0002")

        assert response.status_code == 200
        assert response.json()["data"]["age"] == 67

    @pytest.mark.asyncio
    async def test_not_found(self, async_client):
        response = await async_client.get("/voters/UNKNOWN1")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_list_route_is_not_a_lookup(self, async_client, mongo_db):
        await seed_voters(mongo_db)

        response = await async_client.get("/voters/list")

        assert response.status_code == 200
        assert [record["serialNumber"] for record in response.json()["data"]] == [
            1,
            2,
            3,
        ]


class TestParts:
    @pytest.mark.asyncio
    async def test_by_part(self, async_client, mongo_db):
        await seed_voters(mongo_db)

        response = await async_client.get("/voters/by-part/119 -001")

        assert response.status_code == 200
        assert response.json()["pagination"]["totalCount"] == 2

    @pytest.mark.asyncio
    async def test_by_part_all(self, async_client, mongo_db):
        await seed_voters(mongo_db)

        response = await async_client.get("/voters/by-part/All")

        assert response.json()["pagination"]["totalCount"] == 3

    @pytest.mark.asyncio
    async def test_by_part_invalid(self, async_client):
        response = await async_client.get("/voters/by-part/abc")

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_part_number"

    @pytest.mark.asyncio
    async def test_part_gender_stats(self, async_client, mongo_db):
        await seed_voters(mongo_db)

        response = await async_client.get("/voters/part-gender-stats/002")

        assert response.status_code == 200
        assert response.json()["data"] == {
            "partNumber": 2,
            "male": 0,
            "female": 1,
            "other": 0,
            "total": 1,
        }

    @pytest.mark.asyncio
    async def test_by_age_range_defaults(self, async_client, mongo_db):
        await seed_voters(mongo_db)

        response = await async_client.get("/voters/by-age-range")

        body = response.json()
        assert body["pagination"]["totalCount"] == 2
        assert {record["name"] for record in body["data"]} == {"Meena", "Kala"}

    @pytest.mark.asyncio
    async def test_by_age_range_explicit(self, async_client, mongo_db):
        await seed_voters(mongo_db)

        response = await async_client.get(
            "/voters/by-age-range", params={"minAge": "80", "maxAge": "90"}
        )

        assert response.json()["pagination"]["totalCount"] == 1

    @pytest.mark.asyncio
    async def test_by_age_range_malformed_bounds_use_defaults(
        self, async_client, mongo_db
    ):
        await mongo_db["voters"].insert_many(
            [
                {"Name": "Child", "age": 10, "sex": "Male"},
                {"Name": "Elder", "age": 70, "sex": "Female"},
                {"Name": "Record", "age": 130, "sex": "Male"},
            ]
        )

        response = await async_client.get(
            "/voters/by-age-range", params={"minAge": "abc", "maxAge": "lots"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"]["totalCount"] == 1
        assert body["data"][0]["name"] == "Elder"

    @pytest.mark.asyncio
    async def test_by_age_range_get_sort_order_upper_case(
        self, async_client, mongo_db
    ):
        await seed_voters(mongo_db)

        response = await async_client.get(
            "/voters/by-age-range",
            params={"sortBy": "serialNumber", "sortOrder": "DESC"},
        )

        assert response.status_code == 200
        assert [r["name"] for r in response.json()["data"]] == ["Kala", "Meena"]


class TestHealth:
    @pytest.mark.asyncio
    async def test_unhealthy_without_store(self, async_client):
        response = await async_client.get("/health")

        assert response.status_code == 503
        assert response.json()["data"]["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_healthy(self, async_client, monkeypatch):
        async def ping():
            return None

        monkeypatch.setattr(main, "ping_database", ping)

        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "healthy"
