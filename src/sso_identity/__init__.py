"""SSO Identity - Principals, verification codes and the auth orchestrator.

This module handles all identity-related concerns:
- Principal management (registration, password recovery)
- Authentication (login, tokens issued through sso_auth)
- Email verification codes (registration confirmation, recovery)
- Persistence adapters (in-memory, SQLAlchemy) and the SMTP notifier

The auth primitives themselves (bcrypt, JWT) live in sso_auth and know
nothing about principals.
"""

from sso_identity.application.ports import Notifier
from sso_identity.application.services import AuthService
from sso_identity.domain.principal import (
    CodeAlreadyUsedError,
    CodeExpiredError,
    CodePurpose,
    Email,
    EmailAlreadyExistsError,
    InvalidCodeError,
    InvalidEmailError,
    PersistenceError,
    Principal,
    PrincipalNotFoundError,
    RecoveryNotGrantedError,
    VerificationCodeError,
)
from sso_identity.exceptions import (
    CodeRedemptionFailedError,
    InvalidCredentialsError,
    NotificationError,
    RecoveryNotVerifiedError,
    RegistrationFailedError,
    RepositoryError,
)
from sso_identity.repositories import IdentityRepository, PrincipalCredentials
from sso_identity.schemas import RegistrationResult
from sso_identity.services import VerificationCodeService

__all__ = [
    # Domain - Principal
    "CodeAlreadyUsedError",
    "CodeExpiredError",
    "CodePurpose",
    "Email",
    "EmailAlreadyExistsError",
    "InvalidCodeError",
    "InvalidEmailError",
    "PersistenceError",
    "Principal",
    "PrincipalNotFoundError",
    "RecoveryNotGrantedError",
    "VerificationCodeError",
    # Exceptions
    "CodeRedemptionFailedError",
    "InvalidCredentialsError",
    "NotificationError",
    "RecoveryNotVerifiedError",
    "RegistrationFailedError",
    "RepositoryError",
    # Repositories
    "IdentityRepository",
    "PrincipalCredentials",
    # Schemas
    "RegistrationResult",
    # Services
    "VerificationCodeService",
    # Ports
    "Notifier",
    # Application Services
    "AuthService",
]
