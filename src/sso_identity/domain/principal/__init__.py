"""Principal domain manages account identity and credentials.

This domain handles:
- Principal aggregate (id, email, password hash, current refresh token)
- Verification state (email confirmed, recovery granted)
- Verification code purposes
"""

from sso_identity.domain.principal.aggregates import Principal
from sso_identity.domain.principal.exceptions import (
    CodeAlreadyUsedError,
    CodeExpiredError,
    EmailAlreadyExistsError,
    InvalidCodeError,
    InvalidEmailError,
    PersistenceError,
    PrincipalNotFoundError,
    RecoveryNotGrantedError,
    VerificationCodeError,
)
from sso_identity.domain.principal.value_objects import CodePurpose, Email

__all__ = [
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
]
