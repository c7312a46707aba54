"""In-memory implementation of IdentityRepository.

Keeps principals and code digests in process memory. Every operation
runs under one ``asyncio.Lock`` so code consumption and refresh token
rotation are atomic per event loop. Lookups hand out copies; stored
principals change only through repository methods.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Union
from uuid import UUID

from sso_identity.domain.principal import (
    CodeAlreadyUsedError,
    CodeExpiredError,
    CodePurpose,
    Email,
    EmailAlreadyExistsError,
    InvalidCodeError,
    Principal,
    PrincipalNotFoundError,
    RecoveryNotGrantedError,
)
from sso_identity.domain.shared import utc_now
from sso_identity.repositories import IdentityRepository, PrincipalCredentials

logger = logging.getLogger(__name__)


@dataclass
class StoredCode:
    """Code digest with its lifecycle state."""

    code_hash: str
    email: str
    purpose: CodePurpose
    expires_at: datetime
    created_at: datetime
    used_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def is_used(self) -> bool:
        return self.used_at is not None


def _copy(principal: Principal) -> Principal:
    return Principal.reconstitute(
        id=principal.id,
        email=principal.email,
        password_hash=principal.password_hash,
        refresh_token=principal.refresh_token,
        email_verified_at=principal.email_verified_at,
        recovery_verified_at=principal.recovery_verified_at,
        created_at=principal.created_at,
        updated_at=principal.updated_at,
    )


class InMemoryIdentityRepository(IdentityRepository):
    """Dict-backed repository for development and tests."""

    def __init__(self) -> None:
        self._principals: dict[UUID, Principal] = {}
        self._ids_by_email: dict[str, UUID] = {}
        self._codes: list[StoredCode] = []
        self._lock = asyncio.Lock()

    @property
    def codes(self) -> list[StoredCode]:
        return list(self._codes)

    async def register(self, principal: Principal) -> None:
        async with self._lock:
            if principal.email in self._ids_by_email:
                raise EmailAlreadyExistsError(principal.email)
            self._principals[principal.id] = _copy(principal)
            self._ids_by_email[principal.email] = principal.id
            logger.info("Created principal: %s (email: %s)", principal.id, principal.email)

    async def get_hash_and_id(
        self,
        email: Union[str, Email],
    ) -> PrincipalCredentials | None:
        principal = await self.find_by_email(email)
        if principal is None:
            return None
        return PrincipalCredentials(
            principal_id=principal.id,
            password_hash=principal.password_hash,
        )

    async def find_by_email(self, email: Union[str, Email]) -> Principal | None:
        principal_id = self._ids_by_email.get(Email.of(email).value)
        if principal_id is None:
            return None
        return await self.find_by_id(principal_id)

    async def find_by_id(self, principal_id: UUID) -> Principal | None:
        principal = self._principals.get(principal_id)
        return _copy(principal) if principal is not None else None

    async def login(self, email: Union[str, Email], refresh_token: str) -> None:
        async with self._lock:
            principal = self._require_by_email(email)
            principal.rotate_refresh_token(refresh_token)

    async def password_recovery(
        self,
        email: Union[str, Email],
        password_hash: str,
        granted_since: datetime | None = None,
    ) -> None:
        email_value = Email.of(email).value
        async with self._lock:
            principal_id = self._ids_by_email.get(email_value)
            principal = (
                self._principals.get(principal_id) if principal_id is not None else None
            )
            if granted_since is not None:
                verified_at = principal.recovery_verified_at if principal else None
                if verified_at is None or verified_at < granted_since:
                    raise RecoveryNotGrantedError(email_value)
            if principal is None:
                raise PrincipalNotFoundError(email_value)
            principal.change_password_hash(password_hash)
            logger.info("Password replaced for principal: %s", principal.id)

    async def email_add_code(
        self,
        code_hash: str,
        email: Union[str, Email],
        purpose: CodePurpose,
        expires_at: datetime,
    ) -> None:
        email_value = Email.of(email).value
        async with self._lock:
            now = utc_now()
            # Spent and expired codes can never be redeemed again
            self._codes = [
                stored
                for stored in self._codes
                if not stored.is_used() and not stored.is_expired(now)
            ]
            for stored in self._codes:
                if (
                    stored.email == email_value
                    and stored.purpose == purpose
                    and not stored.is_used()
                ):
                    stored.used_at = now
            self._codes.append(
                StoredCode(
                    code_hash=code_hash,
                    email=email_value,
                    purpose=CodePurpose(purpose),
                    expires_at=expires_at,
                    created_at=now,
                ),
            )

    async def email_verify_code(
        self,
        code_hash: str,
        email: Union[str, Email],
        purpose: CodePurpose,
    ) -> UUID:
        email_value = Email.of(email).value
        async with self._lock:
            matches = [
                stored
                for stored in self._codes
                if stored.email == email_value
                and stored.purpose == purpose
                and stored.code_hash == code_hash
            ]
            if not matches:
                raise InvalidCodeError

            # The same digest may appear twice; the newest row wins
            stored = max(matches, key=lambda c: c.created_at)
            now = utc_now()
            if stored.is_used():
                raise CodeAlreadyUsedError
            if stored.is_expired(now):
                raise CodeExpiredError

            principal_id = self._ids_by_email.get(email_value)
            if principal_id is None:
                raise InvalidCodeError

            stored.used_at = now
            principal = self._principals[principal_id]
            if purpose == CodePurpose.REGISTRATION:
                principal.mark_email_verified()
            else:
                principal.grant_recovery()
            return principal_id

    async def update_refresh_token(
        self,
        principal_id: UUID,
        refresh_token: str,
    ) -> None:
        async with self._lock:
            principal = self._principals.get(principal_id)
            if principal is None:
                raise PrincipalNotFoundError(str(principal_id))
            principal.rotate_refresh_token(refresh_token)

    def _require_by_email(self, email: Union[str, Email]) -> Principal:
        email_value = Email.of(email).value
        principal_id = self._ids_by_email.get(email_value)
        if principal_id is None:
            raise PrincipalNotFoundError(email_value)
        return self._principals[principal_id]
