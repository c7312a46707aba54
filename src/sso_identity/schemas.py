"""Identity schemas and data structures.

These are simple data classes returned by the auth orchestrator.
"""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a successful registration.

    Attributes
    ----------
    principal_id
        The identifier allocated for the new principal
    refresh_token
        The refresh token stored on the principal
    access_token
        A short-lived access token
    """

    principal_id: UUID
    refresh_token: str
    access_token: str
