"""Value objects for the principal domain."""

from sso_identity.domain.principal.value_objects.code_purpose import CodePurpose
from sso_identity.domain.principal.value_objects.email import Email

__all__ = [
    "CodePurpose",
    "Email",
]
