"""Tests for auth dependencies: get_current_user edge cases."""

import uuid
from datetime import timedelta

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import create_access_token, create_token_for_user
from app.models.user import User


class TestGetCurrentUser:
    """Test get_current_user dependency via the /me endpoint."""

    async def test_valid_token_returns_profile(self, client: AsyncClient, test_user: User, auth_headers: dict):
        response = await client.get("/api/v1/users/me", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(test_user.id)
        assert data["email"] == test_user.email
        assert data["role"] == "user"

    async def test_missing_token_rejected(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me")
        # HTTPBearer answers 401 or 403 depending on the FastAPI release.
        assert response.status_code in (401, 403)

    async def test_expired_token_rejected(self, client: AsyncClient, test_user: User):
        token = create_access_token({"sub": str(test_user.id)}, expires_delta=timedelta(seconds=-1))
        headers = {"Authorization": f"Bearer {token}"}
        response = await client.get("/api/v1/users/me", headers=headers)
        assert response.status_code == 401

    async def test_invalid_token_format(self, client: AsyncClient):
        headers = {"Authorization": "Bearer not.a.valid.jwt"}
        response = await client.get("/api/v1/users/me", headers=headers)
        assert response.status_code == 401

    async def test_integer_subject_rejected(self, client: AsyncClient):
        token = create_access_token({"sub": 12345})
        response = await client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_nonexistent_user_id_rejected(self, client: AsyncClient):
        headers = {"Authorization": f"Bearer {create_token_for_user(uuid.uuid4())}"}
        response = await client.get("/api/v1/users/me", headers=headers)
        assert response.status_code == 401

    async def test_inactive_user_rejected(self, client: AsyncClient, db_session: AsyncSession):
        user = User(email=f"inactive-{uuid.uuid4().hex[:8]}@test.com", name="Inactive", is_active=False)
        db_session.add(user)
        await db_session.commit()

        headers = {"Authorization": f"Bearer {create_token_for_user(user.id)}"}
        response = await client.get("/api/v1/users/me", headers=headers)
        assert response.status_code == 403


class TestGetOptionalUser:
    """Public listing endpoints tolerate bad or missing tokens."""

    async def test_bad_token_treated_as_anonymous(self, client: AsyncClient, test_car):
        headers = {"Authorization": "Bearer garbage"}
        response = await client.get("/api/v1/cars", headers=headers)
        assert response.status_code == 200
        assert response.json()["pagination"]["total"] == 1
