"""Verification code generation, recording and redemption.

Codes are 4-digit decimal strings drawn uniformly from 1000..9999
(9000 values). That space is only safe when the edge layer limits
redemption attempts per email.

Storage only ever sees an HMAC-SHA256 of the code. A plain digest of
so small a space could be reversed by enumeration, so the key must stay
out of the database.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import timedelta
from typing import Union
from uuid import UUID

from sso_identity.domain.principal import CodePurpose, Email
from sso_identity.domain.shared import utc_now
from sso_identity.repositories import IdentityRepository

logger = logging.getLogger(__name__)

CODE_MIN = 1000
CODE_SPACE = 9000


def hash_code(code: str, secret_key: str) -> str:
    """Keyed digest stored in place of the raw code."""
    return hmac.new(secret_key.encode(), code.encode(), hashlib.sha256).hexdigest()


class VerificationCodeService:
    """Issues and redeems single-use, purpose-bound email codes.

    Storage, expiry and single-use enforcement are delegated to the
    repository; this service owns generation, hashing and the expiry
    horizon.
    """

    DEFAULT_TTL = timedelta(minutes=10)

    def __init__(
        self,
        repository: IdentityRepository,
        code_ttl: timedelta = DEFAULT_TTL,
        *,
        secret_key: str,
    ):
        if not secret_key:
            msg = "Code hashing key cannot be empty"
            raise ValueError(msg)

        self._repo = repository
        self._code_ttl = code_ttl
        self._secret_key = secret_key

    @property
    def code_ttl(self) -> timedelta:
        return self._code_ttl

    def generate(self) -> str:
        return str(secrets.randbelow(CODE_SPACE) + CODE_MIN)

    async def record(
        self,
        code: str,
        email: Union[str, Email],
        purpose: CodePurpose,
    ) -> None:
        """Persist a code for ``email``; raises ``PersistenceError`` on failure."""
        email_obj = Email.of(email)
        expires_at = utc_now() + self._code_ttl
        await self._repo.email_add_code(
            hash_code(code, self._secret_key),
            email_obj,
            CodePurpose(purpose),
            expires_at,
        )
        logger.debug(
            "Recorded %s code for %s (expires %s)",
            CodePurpose(purpose).value,
            email_obj,
            expires_at.isoformat(),
        )

    async def redeem(
        self,
        code: str,
        email: Union[str, Email],
        purpose: CodePurpose,
    ) -> UUID:
        """Consume a code and return the owning principal's identifier.

        The repository is called exactly once; a successful answer is
        proof that this call consumed the code.

        Raises
        ------
        VerificationCodeError
            InvalidCodeError, CodeExpiredError or CodeAlreadyUsedError
        PersistenceError
            If the repository fails
        """
        email_obj = Email.of(email)
        principal_id = await self._repo.email_verify_code(
            hash_code(code, self._secret_key),
            email_obj,
            CodePurpose(purpose),
        )
        logger.debug("Redeemed %s code for %s", CodePurpose(purpose).value, email_obj)
        return principal_id
