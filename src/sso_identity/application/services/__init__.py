"""Application services for identity management."""

from sso_identity.application.services.auth_service import AuthService

__all__ = ["AuthService"]
