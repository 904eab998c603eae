"""Unit tests for JWT token creation, decoding, and validation."""

import uuid
from datetime import timedelta

import pytest
from jose import JWTError, jwt

from app.auth.jwt import (
    create_access_token,
    create_token_for_user,
    decode_token,
    user_id_from_token,
)
from app.config import settings


class TestCreateAccessToken:
    """Test access token creation."""

    def test_contains_type_access(self):
        token = create_access_token({"sub": "user-123"})
        payload = decode_token(token)
        assert payload["type"] == "access"

    def test_contains_sub_claim(self):
        token = create_access_token({"sub": "user-abc"})
        payload = decode_token(token)
        assert payload["sub"] == "user-abc"

    def test_contains_iat_and_exp_claims(self):
        payload = decode_token(create_access_token({"sub": "user-123"}))
        assert "iat" in payload
        assert "exp" in payload

    def test_custom_expiry_delta(self):
        token = create_access_token({"sub": "user-123"}, expires_delta=timedelta(hours=1))
        payload = decode_token(token)
        assert payload["sub"] == "user-123"


class TestDecodeToken:
    """Test token decoding and validation."""

    def test_decode_expired_token_raises(self):
        token = create_access_token({"sub": "user-123"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(JWTError):
            decode_token(token)

    def test_decode_invalid_token_raises(self):
        with pytest.raises(JWTError):
            decode_token("not.a.valid.token")

    def test_decode_empty_string_raises(self):
        with pytest.raises(JWTError):
            decode_token("")

    def test_wrong_secret_rejected(self):
        token = jwt.encode({"sub": "user-123", "type": "access"}, "some-other-secret", algorithm="HS256")
        with pytest.raises(JWTError):
            decode_token(token)


class TestUserIdFromToken:
    """Test extraction of the user id the API authenticates with."""

    def test_round_trip(self):
        user_id = uuid.uuid4()
        assert user_id_from_token(create_token_for_user(user_id)) == user_id

    def test_accepts_string_ids(self):
        user_id = uuid.uuid4()
        assert user_id_from_token(create_token_for_user(str(user_id))) == user_id

    def test_non_access_type_rejected(self):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "type": "refresh"},
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(JWTError):
            user_id_from_token(token)

    def test_missing_subject_rejected(self):
        with pytest.raises(JWTError):
            user_id_from_token(create_access_token({"role": "admin"}))

    def test_non_uuid_subject_rejected(self):
        with pytest.raises(JWTError):
            user_id_from_token(create_access_token({"sub": "user-123"}))

    @pytest.mark.parametrize("sub", [12345, ["a"], {"id": "x"}])
    def test_non_string_subject_rejected(self, sub):
        token = jwt.encode({"sub": sub, "type": "access"}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
        with pytest.raises(JWTError):
            user_id_from_token(token)
