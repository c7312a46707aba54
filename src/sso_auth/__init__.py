"""SSO Auth - Generic authentication primitives.

This package provides authentication infrastructure that is independent
of any specific account model. It handles:
- Password hashing (bcrypt)
- JWT access/refresh token creation and verification

Architecture:
    sso_auth/
    ├── services/           # Pure logic (password hashing, JWT)
    ├── schemas.py          # Data classes
    └── exceptions.py       # Auth exceptions

Usage:
    from sso_auth import PasswordHashingService, JWTService
"""

from sso_auth.exceptions import (
    AuthError,
    HashingError,
    InvalidSignatureError,
    InvalidTokenError,
    MalformedTokenError,
    PasswordMismatchError,
    SigningError,
    TokenExpiredError,
    WeakPasswordError,
)
from sso_auth.schemas import TokenPair, TokenPayload, TokenType
from sso_auth.services import JWTService, PasswordHashingService

__all__ = [
    # Services
    "PasswordHashingService",
    "JWTService",
    # Schemas
    "TokenPair",
    "TokenPayload",
    "TokenType",
    # Exceptions
    "AuthError",
    "HashingError",
    "InvalidSignatureError",
    "InvalidTokenError",
    "MalformedTokenError",
    "PasswordMismatchError",
    "SigningError",
    "TokenExpiredError",
    "WeakPasswordError",
]
