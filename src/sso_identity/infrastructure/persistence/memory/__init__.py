"""In-memory implementation for sso_identity persistence."""

from sso_identity.infrastructure.persistence.memory.identity_repository import (
    InMemoryIdentityRepository,
    StoredCode,
)

__all__ = [
    "InMemoryIdentityRepository",
    "StoredCode",
]
