# ruff: noqa: E501 - Long import paths in __init__.py re-exports
"""SQLAlchemy models for identity management."""

from sso_identity.infrastructure.persistence.sqlalchemy.models.principal_model import (
    PrincipalModel,
)
from sso_identity.infrastructure.persistence.sqlalchemy.models.verification_code_model import (
    VerificationCodeModel,
)

__all__ = [
    "PrincipalModel",
    "VerificationCodeModel",
]
