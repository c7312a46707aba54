"""Principal aggregate: the durable account identity."""

from datetime import datetime, timedelta
from typing import Union
from uuid import UUID, uuid4

from sso_identity.domain.principal.value_objects.email import Email
from sso_identity.domain.shared.time import ensure_tz_aware, utc_now


class Principal:
    """
    Principal aggregate root.

    Holds the account identity (immutable id, unique email), the bcrypt
    password hash and the single current refresh token. Verification
    state is tracked durably through ``email_verified_at``; a successful
    recovery-code redemption is recorded in ``recovery_verified_at`` until
    the password is changed.
    """

    def __init__(  # noqa: PLR0913
        self,
        email: Union[str, Email],
        password_hash: str,
        refresh_token: str | None = None,
        id: UUID | None = None,
        email_verified_at: datetime | None = None,
        recovery_verified_at: datetime | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        if not password_hash:
            msg = "Password hash cannot be empty"
            raise ValueError(msg)

        self._email = Email.of(email)
        self._id = id or uuid4()
        self._password_hash = password_hash
        self._refresh_token = refresh_token
        self._email_verified_at = email_verified_at
        self._recovery_verified_at = recovery_verified_at
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or utc_now()

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def email(self) -> str:
        return self._email.value

    @property
    def email_obj(self) -> Email:
        return self._email

    @property
    def password_hash(self) -> str:
        return self._password_hash

    @property
    def refresh_token(self) -> str | None:
        return self._refresh_token

    @property
    def email_verified_at(self) -> datetime | None:
        return self._email_verified_at

    @property
    def is_email_verified(self) -> bool:
        return self._email_verified_at is not None

    @property
    def recovery_verified_at(self) -> datetime | None:
        return self._recovery_verified_at

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def rotate_refresh_token(self, refresh_token: str) -> None:
        """Replace the current refresh session (the old token is superseded)."""
        self._refresh_token = refresh_token
        self._updated_at = utc_now()

    def change_password_hash(self, password_hash: str) -> None:
        if not password_hash:
            msg = "Password hash cannot be empty"
            raise ValueError(msg)
        self._password_hash = password_hash
        self._recovery_verified_at = None
        self._updated_at = utc_now()

    def mark_email_verified(self) -> None:
        if self._email_verified_at is None:
            self._email_verified_at = utc_now()
            self._updated_at = self._email_verified_at

    def grant_recovery(self) -> None:
        self._recovery_verified_at = utc_now()
        self._updated_at = self._recovery_verified_at

    def has_recovery_grant(
        self,
        window: timedelta,
        now: datetime | None = None,
    ) -> bool:
        """Check whether a recovery code was redeemed within ``window``."""
        if self._recovery_verified_at is None:
            return False
        now = now or utc_now()
        return now - ensure_tz_aware(self._recovery_verified_at) <= window

    @classmethod
    def create(
        cls,
        email: Union[str, Email],
        password_hash: str,
        refresh_token: str | None = None,
        id: UUID | None = None,
    ) -> "Principal":
        return cls(
            email=email,
            password_hash=password_hash,
            refresh_token=refresh_token,
            id=id,
        )

    @classmethod
    def reconstitute(  # noqa: PLR0913
        cls,
        id: UUID,
        email: Union[str, Email],
        password_hash: str,
        refresh_token: str | None,
        email_verified_at: datetime | None,
        recovery_verified_at: datetime | None,
        created_at: datetime,
        updated_at: datetime,
    ) -> "Principal":
        return cls(
            id=id,
            email=email,
            password_hash=password_hash,
            refresh_token=refresh_token,
            email_verified_at=email_verified_at,
            recovery_verified_at=recovery_verified_at,
            created_at=created_at,
            updated_at=updated_at,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Principal):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"Principal(id={self._id}, email={self._email.value})"
