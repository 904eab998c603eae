"""Tests for how storage and unexpected failures reach API callers."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from app.main import app
from app.services import booking_service, listing_service

pytestmark = pytest.mark.asyncio


class TestServerErrors:
    async def test_storage_failure_is_server_error(
        self, client: AsyncClient, auth_headers: dict, test_car, monkeypatch
    ):
        async def broken_create(db, renter, body):
            raise OperationalError("INSERT INTO bookings", {}, Exception("database is locked"))

        monkeypatch.setattr(booking_service, "create_booking", broken_create)

        response = await client.post(
            "/api/v1/bookings",
            json={"car_id": str(test_car.id), "start_date": "2030-01-01", "end_date": "2030-01-03"},
            headers=auth_headers,
        )

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("application/json")
        data = response.json()
        assert data["code"] == "server_error"
        assert "database is locked" in data["detail"]

    async def test_unexpected_exception_is_server_error(self, client: AsyncClient, monkeypatch):
        async def broken_search(*args, **kwargs):
            raise RuntimeError("search index unavailable")

        monkeypatch.setattr(listing_service, "search_cars", broken_search)

        # Starlette re-raises unhandled exceptions after responding; read the response instead.
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
            response = await ac.get("/api/v1/cars")

        assert response.status_code == 500
        assert response.json() == {"detail": "search index unavailable", "code": "server_error"}

    async def test_domain_errors_keep_their_code(self, client: AsyncClient, auth_headers: dict):
        response = await client.post("/api/v1/bookings", json={}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "missing_field"
