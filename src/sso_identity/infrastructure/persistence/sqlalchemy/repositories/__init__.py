# ruff: noqa: E501 - Long import paths in __init__.py re-exports
"""SQLAlchemy repository implementations for identity management."""

from sso_identity.infrastructure.persistence.sqlalchemy.repositories.identity_repository import (
    IdentityRepositorySQLAlchemy,
)

__all__ = [
    "IdentityRepositorySQLAlchemy",
]
