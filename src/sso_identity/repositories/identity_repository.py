"""Abstract repository interface for principals and verification codes.

This interface defines the contract for identity persistence.
Implementations can use SQLAlchemy, an in-memory store, or any other
storage. Uniqueness of emails, code expiry and single-use consumption
are enforced here, not by the application layer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Union
from uuid import UUID

from sso_identity.domain.principal import CodePurpose, Email, Principal


@dataclass(frozen=True)
class PrincipalCredentials:
    """Immutable login lookup result: identifier and password hash."""

    principal_id: UUID
    password_hash: str


class IdentityRepository(ABC):
    """
    Abstract repository for identity principals and verification codes.

    Every method may raise ``PersistenceError`` for storage failures.
    Codes are passed as digests; the raw code never reaches storage.
    """

    @abstractmethod
    async def register(self, principal: Principal) -> None:
        """
        Persist a newly registered principal.

        Raises
        ------
        EmailAlreadyExistsError
            If the email is already registered
        """

    @abstractmethod
    async def get_hash_and_id(
        self,
        email: Union[str, Email],
    ) -> PrincipalCredentials | None:
        """
        Look up the password hash and identifier by email.

        Returns
        -------
        Credentials if the email is registered, None otherwise
        """

    @abstractmethod
    async def find_by_email(self, email: Union[str, Email]) -> Principal | None:
        """Find a principal by email address."""

    @abstractmethod
    async def find_by_id(self, principal_id: UUID) -> Principal | None:
        """Find a principal by identifier."""

    @abstractmethod
    async def login(self, email: Union[str, Email], refresh_token: str) -> None:
        """
        Store the refresh token issued by a password login.

        Raises
        ------
        PrincipalNotFoundError
            If the email is not registered
        """

    @abstractmethod
    async def password_recovery(
        self,
        email: Union[str, Email],
        password_hash: str,
        granted_since: datetime | None = None,
    ) -> None:
        """
        Replace the password hash and consume any pending recovery grant.

        With ``granted_since`` the replacement is conditional: it happens
        only if a recovery grant issued at or after that instant is still
        pending, and checking and consuming the grant is one atomic step.
        Without it the hash is replaced unconditionally.

        Raises
        ------
        PrincipalNotFoundError
            If the email is not registered (unconditional replacement)
        RecoveryNotGrantedError
            If ``granted_since`` is given and no such grant is pending,
            including for unregistered emails
        """

    @abstractmethod
    async def email_add_code(
        self,
        code_hash: str,
        email: Union[str, Email],
        purpose: CodePurpose,
        expires_at: datetime,
    ) -> None:
        """
        Store a verification code digest.

        Earlier unconsumed codes for the same (email, purpose) pair are
        invalidated so at most one code is valid at a time.
        """

    @abstractmethod
    async def email_verify_code(
        self,
        code_hash: str,
        email: Union[str, Email],
        purpose: CodePurpose,
    ) -> UUID:
        """
        Atomically consume a verification code.

        On success the code can never be redeemed again. Redeeming a
        registration code marks the principal's email as verified;
        redeeming a recovery code grants password recovery.

        Returns
        -------
        The identifier of the principal owning the email

        Raises
        ------
        InvalidCodeError
            If no code matches, or the email has no principal
        CodeExpiredError
            If the matching code has expired
        CodeAlreadyUsedError
            If the matching code was already consumed or superseded
        """

    @abstractmethod
    async def update_refresh_token(
        self,
        principal_id: UUID,
        refresh_token: str,
    ) -> None:
        """
        Replace the principal's current refresh token.

        Raises
        ------
        PrincipalNotFoundError
            If no principal has this identifier
        """
