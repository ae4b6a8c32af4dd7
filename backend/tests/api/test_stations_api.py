"""Tests for stations API endpoints."""

import uuid

from httpx import AsyncClient

PREFIX = "/api/v1/stations"


class TestStationsAPI:
    """Test cases for station endpoints."""

    async def test_create_station(self, async_client: AsyncClient) -> None:
        response = await async_client.post(PREFIX, json={"name": "Gangnam"})

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Gangnam"
        assert response.headers["location"] == f"{PREFIX}/{data['id']}"

    async def test_create_station_strips_name(self, async_client: AsyncClient) -> None:
        response = await async_client.post(PREFIX, json={"name": "  Gangnam  "})

        assert response.status_code == 201
        assert response.json()["name"] == "Gangnam"

    async def test_create_station_rejects_blank_name(self, async_client: AsyncClient) -> None:
        response = await async_client.post(PREFIX, json={"name": "   "})

        assert response.status_code == 422

    async def test_create_station_duplicate_name(self, async_client: AsyncClient) -> None:
        await async_client.post(PREFIX, json={"name": "Gangnam"})

        response = await async_client.post(PREFIX, json={"name": "Gangnam"})

        assert response.status_code == 409
        assert response.json()["code"] == "duplicate_station"

    async def test_list_stations(self, async_client: AsyncClient) -> None:
        for name in ("Gangnam", "Yeoksam"):
            await async_client.post(PREFIX, json={"name": name})

        response = await async_client.get(PREFIX)

        assert response.status_code == 200
        assert {station["name"] for station in response.json()} == {"Gangnam", "Yeoksam"}

    async def test_get_station(self, async_client: AsyncClient) -> None:
        created = (await async_client.post(PREFIX, json={"name": "Gangnam"})).json()

        response = await async_client.get(f"{PREFIX}/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    async def test_get_unknown_station(self, async_client: AsyncClient) -> None:
        response = await async_client.get(f"{PREFIX}/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    async def test_get_station_invalid_uuid(self, async_client: AsyncClient) -> None:
        response = await async_client.get(f"{PREFIX}/not-a-uuid")

        assert response.status_code == 422

    async def test_delete_station(self, async_client: AsyncClient) -> None:
        created = (await async_client.post(PREFIX, json={"name": "Gangnam"})).json()

        response = await async_client.delete(f"{PREFIX}/{created['id']}")

        assert response.status_code == 204
        assert (await async_client.get(f"{PREFIX}/{created['id']}")).status_code == 404

    async def test_delete_station_used_by_line(self, async_client: AsyncClient) -> None:
        up = (await async_client.post(PREFIX, json={"name": "Gangnam"})).json()
        down = (await async_client.post(PREFIX, json={"name": "Yeoksam"})).json()
        await async_client.post(
            "/api/v1/lines",
            json={
                "name": "Line 2",
                "color": "bg-green-600",
                "up_station_id": up["id"],
                "down_station_id": down["id"],
                "distance": 10,
            },
        )

        response = await async_client.delete(f"{PREFIX}/{up['id']}")

        assert response.status_code == 409
        assert response.json()["code"] == "station_in_use"
