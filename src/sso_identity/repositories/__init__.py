"""Abstract repository interfaces for identity management."""

from sso_identity.repositories.identity_repository import (
    IdentityRepository,
    PrincipalCredentials,
)

__all__ = [
    "IdentityRepository",
    "PrincipalCredentials",
]
