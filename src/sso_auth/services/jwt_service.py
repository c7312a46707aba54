"""JWT token service.

Provides JWT token creation and verification for authentication.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import jwt

from sso_auth.exceptions import (
    InvalidSignatureError,
    InvalidTokenError,
    MalformedTokenError,
    SigningError,
    TokenExpiredError,
)
from sso_auth.schemas import TokenPair, TokenPayload, TokenType

REQUIRED_CLAIMS = ["sub", "type", "iat", "exp", "jti"]


class JWTService:
    """Service for JWT token creation and verification.

    Handles access tokens (short-lived) and refresh tokens (long-lived)
    bound to a principal identifier. Every claim, including the token
    type and both timestamps, is covered by the signature.

    Examples
    --------
    >>> service = JWTService(secret_key="your-secret-key")
    >>> token = service.create_access_token(principal_id)
    >>> payload = service.verify_token(token)
    >>> print(payload.principal_id)
    """

    DEFAULT_ACCESS_EXPIRE_MINUTES = 15
    DEFAULT_REFRESH_EXPIRE_DAYS = 30
    DEFAULT_ALGORITHM = "HS256"

    def __init__(
        self,
        secret_key: str,
        access_token_expire_minutes: int = DEFAULT_ACCESS_EXPIRE_MINUTES,
        refresh_token_expire_days: int = DEFAULT_REFRESH_EXPIRE_DAYS,
        algorithm: str = DEFAULT_ALGORITHM,
    ):
        """Initialize the JWT service.

        Parameters
        ----------
        secret_key
            Secret key for signing tokens. Must be kept secure.
        access_token_expire_minutes
            Minutes until access token expires (default 15)
        refresh_token_expire_days
            Days until refresh token expires (default 30)
        algorithm
            JWS algorithm used to sign and verify (default HS256)
        """
        if not secret_key:
            msg = "JWT secret key cannot be empty"
            raise ValueError(msg)

        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expiry = {
            TokenType.ACCESS: timedelta(minutes=access_token_expire_minutes),
            TokenType.REFRESH: timedelta(days=refresh_token_expire_days),
        }

    def expiry_for(self, token_type: TokenType) -> timedelta:
        """Return the lifetime applied to tokens of the given type."""
        return self._expiry[TokenType(token_type)]

    def issue(
        self,
        principal_id: UUID,
        token_type: TokenType,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a signed token of the given type.

        Parameters
        ----------
        principal_id
            The principal's unique identifier
        token_type
            Access or refresh
        expires_delta
            Custom expiration time (optional)

        Returns
        -------
        The encoded JWT token string

        Raises
        ------
        SigningError
            If the token cannot be encoded or signed
        """
        token_type = TokenType(token_type)
        now = datetime.now(tz=timezone.utc)
        expire = now + (expires_delta or self._expiry[token_type])

        payload = {
            "sub": str(principal_id),
            "type": token_type.value,
            "iat": now,
            "exp": expire,
            "jti": uuid4().hex,
        }

        try:
            return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
        except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as e:
            msg = f"Failed to create {token_type.value} token: {e}"
            raise SigningError(msg) from e

    def create_access_token(
        self,
        principal_id: UUID,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a short-lived access token."""
        return self.issue(principal_id, TokenType.ACCESS, expires_delta)

    def create_refresh_token(
        self,
        principal_id: UUID,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a long-lived refresh token.

        Refresh tokens are used to obtain new access tokens without
        requiring the user to log in again.
        """
        return self.issue(principal_id, TokenType.REFRESH, expires_delta)

    def create_token_pair(self, principal_id: UUID) -> TokenPair:
        """Create an access token and a refresh token for one principal."""
        return TokenPair(
            access_token=self.create_access_token(principal_id),
            refresh_token=self.create_refresh_token(principal_id),
        )

    def verify_token(
        self,
        token: str,
        expected_type: TokenType | None = None,
    ) -> TokenPayload:
        """Verify and decode a JWT token.

        Parameters
        ----------
        token
            The JWT token string to verify
        expected_type
            If given, reject tokens of the other type

        Returns
        -------
        TokenPayload containing the decoded data

        Raises
        ------
        InvalidSignatureError
            If the signature does not verify
        TokenExpiredError
            If the token has expired
        MalformedTokenError
            If the token cannot be decoded or lacks required claims
        InvalidTokenError
            If the token is of an unexpected type
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": REQUIRED_CLAIMS},
            )

            token_payload = TokenPayload(
                principal_id=UUID(payload["sub"]),
                token_type=TokenType(payload["type"]),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                token_id=str(payload["jti"]),
            )

        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError from e
        except jwt.InvalidSignatureError as e:
            raise InvalidSignatureError from e
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError(f"Invalid token: {e}") from e
        except (KeyError, ValueError, TypeError) as e:
            raise MalformedTokenError(f"Malformed token payload: {e}") from e

        if expected_type is not None and token_payload.token_type != expected_type:
            msg = f"Expected a {TokenType(expected_type).value} token"
            raise InvalidTokenError(msg)

        return token_payload
