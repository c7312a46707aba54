"""SQLAlchemy implementation of IdentityRepository."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Union
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sso_identity.domain.principal import (
    CodeAlreadyUsedError,
    CodeExpiredError,
    CodePurpose,
    Email,
    EmailAlreadyExistsError,
    InvalidCodeError,
    PersistenceError,
    Principal,
    PrincipalNotFoundError,
    RecoveryNotGrantedError,
)
from sso_identity.domain.shared import ensure_tz_aware, utc_now
from sso_identity.infrastructure.persistence.sqlalchemy.models import (
    PrincipalModel,
    VerificationCodeModel,
)
from sso_identity.repositories import IdentityRepository, PrincipalCredentials

logger = logging.getLogger(__name__)


def _aware(dt: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes
    return ensure_tz_aware(dt) if dt is not None else None


class IdentityRepositorySQLAlchemy(IdentityRepository):
    """SQLAlchemy implementation of the IdentityRepository interface.

    Every write commits its own transaction. Code consumption uses a
    conditional ``UPDATE ... WHERE used_at IS NULL`` so two concurrent
    redemptions of one code cannot both succeed.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def _transaction(self, action: str, commit: bool = True) -> AsyncIterator[None]:
        try:
            yield
            if commit:
                await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.error("Database error while trying to %s: %s", action, e)
            msg = f"Failed to {action}"
            raise PersistenceError(msg) from e
        except Exception:
            await self._session.rollback()
            raise

    async def register(self, principal: Principal) -> None:
        async with self._transaction("register principal"):
            self._session.add(self._map_to_model(principal))
            try:
                await self._session.flush()
            except IntegrityError as e:
                raise EmailAlreadyExistsError(principal.email) from e
        logger.info("Created principal: %s (email: %s)", principal.id, principal.email)

    async def get_hash_and_id(
        self,
        email: Union[str, Email],
    ) -> PrincipalCredentials | None:
        email_value = Email.of(email).value
        stmt = select(PrincipalModel.id, PrincipalModel.password_hash).where(
            PrincipalModel.email == email_value,
        )
        async with self._transaction("load credentials", commit=False):
            result = await self._session.execute(stmt)
            row = result.one_or_none()

        if row is None:
            return None

        return PrincipalCredentials(principal_id=row.id, password_hash=row.password_hash)

    async def find_by_email(self, email: Union[str, Email]) -> Principal | None:
        email_value = Email.of(email).value
        async with self._transaction("find principal", commit=False):
            model = await self._find_model_by_email(email_value)
        return self._map_to_domain(model) if model is not None else None

    async def find_by_id(self, principal_id: UUID) -> Principal | None:
        stmt = select(PrincipalModel).where(PrincipalModel.id == principal_id)
        async with self._transaction("find principal", commit=False):
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()
        return self._map_to_domain(model) if model is not None else None

    async def login(self, email: Union[str, Email], refresh_token: str) -> None:
        email_value = Email.of(email).value
        stmt = (
            update(PrincipalModel)
            .where(PrincipalModel.email == email_value)
            .values(refresh_token=refresh_token, updated_at=utc_now())
        )
        async with self._transaction("store refresh token"):
            result = await self._session.execute(stmt)
            if result.rowcount == 0:  # type: ignore[attr-defined]
                raise PrincipalNotFoundError(email_value)

    async def password_recovery(
        self,
        email: Union[str, Email],
        password_hash: str,
        granted_since: datetime | None = None,
    ) -> None:
        email_value = Email.of(email).value
        stmt = update(PrincipalModel).where(PrincipalModel.email == email_value)
        if granted_since is not None:
            # Only one concurrent change can still see the grant
            stmt = stmt.where(
                PrincipalModel.recovery_verified_at.is_not(None),
                PrincipalModel.recovery_verified_at >= granted_since,
            )
        stmt = stmt.values(
            password_hash=password_hash,
            recovery_verified_at=None,
            updated_at=utc_now(),
        ).execution_options(synchronize_session=False)
        async with self._transaction("replace password hash"):
            result = await self._session.execute(stmt)
            # Loaded rows may hold naive SQLite datetimes the ORM evaluator cannot
            # compare with granted_since; drop them so the next query reloads
            self._session.expire_all()
            if result.rowcount == 0:  # type: ignore[attr-defined]
                if granted_since is not None:
                    raise RecoveryNotGrantedError(email_value)
                raise PrincipalNotFoundError(email_value)
        logger.info("Password replaced for principal with email: %s", email_value)

    async def email_add_code(
        self,
        code_hash: str,
        email: Union[str, Email],
        purpose: CodePurpose,
        expires_at: datetime,
    ) -> None:
        email_value = Email.of(email).value
        purpose_value = CodePurpose(purpose).value
        now = utc_now()
        invalidate = (
            update(VerificationCodeModel)
            .where(
                VerificationCodeModel.email == email_value,
                VerificationCodeModel.purpose == purpose_value,
                VerificationCodeModel.used_at.is_(None),
            )
            .values(used_at=now)
        )
        async with self._transaction("store verification code"):
            await self._session.execute(invalidate)
            self._session.add(
                VerificationCodeModel(
                    email=email_value,
                    purpose=purpose_value,
                    code_hash=code_hash,
                    expires_at=expires_at,
                    created_at=now,
                ),
            )
            await self._session.flush()

    async def email_verify_code(
        self,
        code_hash: str,
        email: Union[str, Email],
        purpose: CodePurpose,
    ) -> UUID:
        email_value = Email.of(email).value
        purpose = CodePurpose(purpose)
        stmt = (
            select(VerificationCodeModel)
            .where(
                VerificationCodeModel.email == email_value,
                VerificationCodeModel.purpose == purpose.value,
                VerificationCodeModel.code_hash == code_hash,
            )
            .order_by(VerificationCodeModel.created_at.desc())
            .limit(1)
        )
        async with self._transaction("redeem verification code"):
            result = await self._session.execute(stmt)
            code = result.scalar_one_or_none()
            if code is None:
                raise InvalidCodeError

            now = utc_now()
            if code.used_at is not None:
                raise CodeAlreadyUsedError
            if now > ensure_tz_aware(code.expires_at):
                raise CodeExpiredError

            principal = await self._find_model_by_email(email_value)
            if principal is None:
                raise InvalidCodeError

            consume = (
                update(VerificationCodeModel)
                .where(
                    VerificationCodeModel.id == code.id,
                    VerificationCodeModel.used_at.is_(None),
                )
                .values(used_at=now)
            )
            consumed = await self._session.execute(consume)
            if consumed.rowcount != 1:  # type: ignore[attr-defined]
                raise CodeAlreadyUsedError

            if purpose == CodePurpose.REGISTRATION:
                if principal.email_verified_at is None:
                    principal.email_verified_at = now
            else:
                principal.recovery_verified_at = now
            principal_id = principal.id

        return principal_id

    async def update_refresh_token(
        self,
        principal_id: UUID,
        refresh_token: str,
    ) -> None:
        stmt = (
            update(PrincipalModel)
            .where(PrincipalModel.id == principal_id)
            .values(refresh_token=refresh_token, updated_at=utc_now())
        )
        async with self._transaction("store refresh token"):
            result = await self._session.execute(stmt)
            if result.rowcount == 0:  # type: ignore[attr-defined]
                raise PrincipalNotFoundError(str(principal_id))

    async def _find_model_by_email(self, email_value: str) -> PrincipalModel | None:
        stmt = select(PrincipalModel).where(PrincipalModel.email == email_value)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _map_to_domain(self, model: PrincipalModel) -> Principal:
        return Principal.reconstitute(
            id=model.id,
            email=model.email,
            password_hash=model.password_hash,
            refresh_token=model.refresh_token,
            email_verified_at=_aware(model.email_verified_at),
            recovery_verified_at=_aware(model.recovery_verified_at),
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )

    def _map_to_model(self, principal: Principal) -> PrincipalModel:
        return PrincipalModel(
            id=principal.id,
            email=principal.email,
            password_hash=principal.password_hash,
            refresh_token=principal.refresh_token,
            email_verified_at=principal.email_verified_at,
            recovery_verified_at=principal.recovery_verified_at,
            created_at=principal.created_at,
            updated_at=principal.updated_at,
        )
