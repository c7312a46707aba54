"""Unit tests for JWTService."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest

from sso_auth.exceptions import (
    InvalidSignatureError,
    InvalidTokenError,
    MalformedTokenError,
    SigningError,
    TokenExpiredError,
)
from sso_auth.schemas import TokenType
from sso_auth.services import JWTService

SECRET = "test-secret-key-0123456789abcdef-0123456789"


class TestJWTServiceInit:
    """Tests for JWTService initialization."""

    def test_init_with_valid_secret(self):
        """Test that service initializes with valid secret."""
        service = JWTService(secret_key=SECRET)
        assert service is not None

    def test_init_with_empty_secret_raises(self):
        """Test that empty secret raises ValueError."""
        with pytest.raises(ValueError, match="cannot be empty"):
            JWTService(secret_key="")

    def test_init_with_custom_expiry(self):
        """Test that custom expiry times are applied per token type."""
        service = JWTService(
            secret_key=SECRET,
            access_token_expire_minutes=5,
            refresh_token_expire_days=7,
        )

        assert service.expiry_for(TokenType.ACCESS) == timedelta(minutes=5)
        assert service.expiry_for(TokenType.REFRESH) == timedelta(days=7)


class TestAccessTokens:
    """Tests for access token creation and verification."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = JWTService(secret_key=SECRET)
        self.principal_id = uuid4()

    def test_create_access_token(self):
        """Test that access token is created successfully."""
        token = self.service.create_access_token(self.principal_id)

        assert isinstance(token, str)
        assert token.count(".") == 2

    def test_verify_valid_access_token(self):
        """Test that valid access token is verified correctly."""
        token = self.service.create_access_token(self.principal_id)

        payload = self.service.verify_token(token)

        assert payload.principal_id == self.principal_id
        assert payload.token_type == TokenType.ACCESS
        assert payload.is_access_token()
        assert not payload.is_refresh_token()
        assert not payload.is_expired()

    def test_token_carries_all_claims(self):
        """Test that the raw claims include subject, type, timestamps and id."""
        token = self.service.create_access_token(self.principal_id)

        claims = jwt.decode(token, SECRET, algorithms=["HS256"])

        assert claims["sub"] == str(self.principal_id)
        assert claims["type"] == "access"
        assert {"iat", "exp", "jti"} <= claims.keys()

    def test_verify_expired_token_raises(self):
        """Test that expired token raises TokenExpiredError."""
        token = self.service.create_access_token(
            self.principal_id,
            expires_delta=timedelta(seconds=-1),  # Already expired
        )

        with pytest.raises(TokenExpiredError, match="expired"):
            self.service.verify_token(token)

    def test_verify_invalid_token_raises(self):
        """Test that garbage input raises MalformedTokenError."""
        with pytest.raises(MalformedTokenError):
            self.service.verify_token("invalid.token.string")

    def test_verify_tampered_token_raises(self):
        """Test that tampered token raises InvalidTokenError."""
        token = self.service.create_access_token(self.principal_id)

        # Tamper with the payload segment
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload[:-2] + "xx", signature])

        with pytest.raises(InvalidTokenError):
            self.service.verify_token(tampered)

    def test_verify_wrong_secret_raises(self):
        """Test that token from different secret raises InvalidSignatureError."""
        other_service = JWTService(secret_key="different-secret-0123456789abcdef-xyz")
        token = other_service.create_access_token(self.principal_id)

        with pytest.raises(InvalidSignatureError):
            self.service.verify_token(token)

    def test_verify_missing_claim_raises(self):
        """Test that a correctly signed token without a type is malformed."""
        now = datetime.now(tz=timezone.utc)
        token = jwt.encode(
            {
                "sub": str(self.principal_id),
                "iat": now,
                "exp": now + timedelta(minutes=5),
                "jti": "abc",
            },
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(MalformedTokenError):
            self.service.verify_token(token)

    def test_verify_non_uuid_subject_raises(self):
        """Test that a subject that is not a UUID is malformed."""
        now = datetime.now(tz=timezone.utc)
        token = jwt.encode(
            {
                "sub": "not-a-uuid",
                "type": "access",
                "iat": now,
                "exp": now + timedelta(minutes=5),
                "jti": "abc",
            },
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(MalformedTokenError):
            self.service.verify_token(token)

    def test_expected_type_mismatch_raises(self):
        """Test that an access token is rejected where a refresh token is expected."""
        token = self.service.create_access_token(self.principal_id)

        with pytest.raises(InvalidTokenError, match="refresh"):
            self.service.verify_token(token, expected_type=TokenType.REFRESH)


class TestRefreshTokens:
    """Tests for refresh token creation and verification."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = JWTService(secret_key=SECRET)
        self.principal_id = uuid4()

    def test_verify_refresh_token(self):
        """Test that refresh token is verified with correct type."""
        token = self.service.create_refresh_token(self.principal_id)

        payload = self.service.verify_token(token, expected_type=TokenType.REFRESH)

        assert payload.principal_id == self.principal_id
        assert payload.token_type == TokenType.REFRESH
        assert payload.is_refresh_token()
        assert not payload.is_access_token()

    def test_access_expires_before_refresh(self):
        """Test that tokens issued together expire access first."""
        pair = self.service.create_token_pair(self.principal_id)

        access = self.service.verify_token(pair.access_token)
        refresh = self.service.verify_token(pair.refresh_token)

        assert access.exp < refresh.exp

    def test_tokens_are_unique_within_one_second(self):
        """Test that two refresh tokens for one principal never collide."""
        first = self.service.create_refresh_token(self.principal_id)
        second = self.service.create_refresh_token(self.principal_id)

        assert first != second
        assert (
            self.service.verify_token(first).token_id
            != self.service.verify_token(second).token_id
        )


class TestSigningFailures:
    """Tests for token issuance failures."""

    def test_unsupported_algorithm_raises_signing_error(self):
        """Test that an unknown algorithm surfaces as SigningError."""
        service = JWTService(secret_key=SECRET, algorithm="HS999")

        with pytest.raises(SigningError):
            service.create_access_token(uuid4())
