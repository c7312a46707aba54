"""SQLAlchemy implementation for sso_identity persistence.

Provides:
- IdentityBase: Declarative base for identity models
- PrincipalModel: SQLAlchemy model for principals
- VerificationCodeModel: SQLAlchemy model for hashed verification codes
- IdentityRepositorySQLAlchemy: Repository implementation
"""

from sso_identity.infrastructure.persistence.sqlalchemy.base import (
    IdentityBase,
    TimestampMixin,
)
from sso_identity.infrastructure.persistence.sqlalchemy.models import (
    PrincipalModel,
    VerificationCodeModel,
)
from sso_identity.infrastructure.persistence.sqlalchemy.repositories import (
    IdentityRepositorySQLAlchemy,
)

__all__ = [
    "IdentityBase",
    "IdentityRepositorySQLAlchemy",
    "PrincipalModel",
    "TimestampMixin",
    "VerificationCodeModel",
]
