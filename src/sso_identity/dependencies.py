"""Composition root for the SSO core.

Provides:
- Logging configuration
- Database engine and session maker (singletons)
- Auth primitives configured from settings
- A fully wired AuthService for a given repository

The transport layer calls these; nothing here reads settings on its
own except the engine helpers, which have no other input.
"""

import logging
import sys
from functools import lru_cache
from pathlib import Path

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from sso_auth import JWTService, PasswordHashingService
from sso_config.settings import Settings, get_settings
from sso_identity.application.ports import Notifier
from sso_identity.application.services import AuthService
from sso_identity.infrastructure.email import EmailService
from sso_identity.repositories import IdentityRepository
from sso_identity.services import VerificationCodeService

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure application logging.

    Sets up console logging with timestamps and module names, applies
    ``settings.log_level`` to the sso packages and quiets noisy
    third-party loggers.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,  # Override any existing config
    )

    for name in ("sso_auth", "sso_config", "sso_identity"):
        logging.getLogger(name).setLevel(log_level)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# -----------------------------------------------------------------------------
# Database Engine & Session (Singleton)
# -----------------------------------------------------------------------------


@lru_cache()
def get_database_url() -> str:
    """
    Get database URL from application settings.

    Returns
    -------
    Database URL string
    """
    url = get_settings().database_url

    # Ensure data directory exists for SQLite
    if url.startswith("sqlite") and ":memory:" not in url:
        db_path = url.split("///")[-1]
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    return url


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """
    Get the shared async database engine (singleton).

    Returns
    -------
    AsyncEngine instance
    """
    return create_async_engine(
        get_database_url(),
        echo=False,
        pool_pre_ping=True,  # Verify connections before use
    )


@lru_cache(maxsize=1)
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """
    Get the shared async session maker (singleton).

    Returns
    -------
    async_sessionmaker configured with the shared engine
    """
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
    )


# -----------------------------------------------------------------------------
# Authentication Services
# -----------------------------------------------------------------------------


def get_jwt_service(settings: Settings) -> JWTService:
    """Get JWT service configured from settings."""
    return JWTService(
        secret_key=settings.jwt_secret_key.get_secret_value(),
        access_token_expire_minutes=settings.jwt_access_token_expire_minutes,
        refresh_token_expire_days=settings.jwt_refresh_token_expire_days,
        algorithm=settings.jwt_algorithm,
    )


def get_password_service(settings: Settings) -> PasswordHashingService:
    """Get password hashing service configured from settings."""
    return PasswordHashingService(
        rounds=settings.password_hash_rounds,
        min_length=settings.password_min_length,
    )


def get_email_service(settings: Settings) -> EmailService:
    return EmailService(settings)


def build_auth_service(
    repository: IdentityRepository,
    settings: Settings,
    notifier: Notifier | None = None,
) -> AuthService:
    """
    Get auth service with all dependencies.

    Parameters
    ----------
    repository
        Identity repository, usually bound to a request-scoped session
    settings
        Application settings
    notifier
        Code delivery; the SMTP email service when omitted

    Returns
    -------
    AuthService wired from settings
    """
    return AuthService(
        repository=repository,
        password_service=get_password_service(settings),
        jwt_service=get_jwt_service(settings),
        code_service=VerificationCodeService(
            repository,
            code_ttl=settings.verification_code_lifetime,
            secret_key=settings.code_hash_key,
        ),
        notifier=notifier or get_email_service(settings),
        notification_timeout=settings.notification_timeout_seconds,
        require_recovery_verification=settings.require_recovery_verification,
        recovery_window=settings.recovery_window,
    )
