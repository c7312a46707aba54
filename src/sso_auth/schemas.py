"""Auth schemas and data structures.

These are simple data classes used for transferring token
data between components.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class TokenType(str, Enum):
    """Kind of bearer token, each with its own expiry policy."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenPayload:
    """Decoded JWT token payload.

    This represents the data extracted from a verified JWT token.

    Attributes
    ----------
    principal_id
        The unique identifier of the principal the token was issued for
    token_type
        Access or refresh
    issued_at
        Token issuance timestamp
    exp
        Token expiration timestamp
    token_id
        Unique token identifier (``jti`` claim)
    """

    principal_id: UUID
    token_type: TokenType
    issued_at: datetime
    exp: datetime
    token_id: str

    def is_expired(self) -> bool:
        """Check if the token has expired."""
        return datetime.now(tz=self.exp.tzinfo) > self.exp

    def is_access_token(self) -> bool:
        """Check if this is an access token."""
        return self.token_type == TokenType.ACCESS

    def is_refresh_token(self) -> bool:
        """Check if this is a refresh token."""
        return self.token_type == TokenType.REFRESH


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token issued together."""

    access_token: str
    refresh_token: str
