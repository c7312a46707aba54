"""Identity services - verification codes."""

from sso_identity.services.verification_code_service import (
    VerificationCodeService,
    hash_code,
)

__all__ = [
    "VerificationCodeService",
    "hash_code",
]
