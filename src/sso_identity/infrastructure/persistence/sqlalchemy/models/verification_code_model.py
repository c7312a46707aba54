"""SQLAlchemy model for verification codes."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from sso_identity.domain.shared import utc_now
from sso_identity.infrastructure.persistence.sqlalchemy.base import IdentityBase


class VerificationCodeModel(IdentityBase):
    """Hashed single-use code bound to an email and a purpose."""

    __tablename__ = "verification_codes"
    __table_args__ = (
        Index("ix_verification_codes_email_purpose", "email", "purpose"),
    )

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    purpose: Mapped[str] = mapped_column(String(20), nullable=False)
    code_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    def __repr__(self) -> str:
        return (
            f"<VerificationCodeModel(id={self.id}, email={self.email}, "
            f"purpose={self.purpose})>"
        )
