"""Authentication orchestrator: registration, login, recovery and email codes."""

from __future__ import annotations

import asyncio
import functools
import logging
import secrets
from datetime import timedelta
from typing import TYPE_CHECKING
from uuid import uuid4

from sso_auth import (
    JWTService,
    PasswordHashingService,
    PasswordMismatchError,
    TokenPair,
    TokenPayload,
    TokenType,
)
from sso_identity.domain.principal import (
    CodePurpose,
    Email,
    InvalidEmailError,
    PersistenceError,
    Principal,
    RecoveryNotGrantedError,
    VerificationCodeError,
)
from sso_identity.domain.shared import utc_now
from sso_identity.exceptions import (
    CodeRedemptionFailedError,
    InvalidCredentialsError,
    NotificationError,
    RecoveryNotVerifiedError,
    RegistrationFailedError,
    RepositoryError,
)
from sso_identity.schemas import RegistrationResult

if TYPE_CHECKING:
    from sso_identity.application.ports import Notifier
    from sso_identity.repositories import IdentityRepository
    from sso_identity.services import VerificationCodeService

logger = logging.getLogger(__name__)


class AuthService:
    """
    Application service for principal authentication.

    Orchestrates sso_auth primitives (password hashing, JWT tokens) with
    the identity repository, the verification code service and the
    notifier to provide:
    - Registration with an emailed confirmation code
    - Login with password
    - Password recovery
    - Sending and redeeming email verification codes

    Every step short-circuits on the first failure; nothing is retried
    or compensated. The only background work is the code email sent
    during registration.
    """

    def __init__(  # noqa: PLR0913
        self,
        repository: IdentityRepository,
        password_service: PasswordHashingService,
        jwt_service: JWTService,
        code_service: VerificationCodeService,
        notifier: Notifier,
        notification_timeout: float = 10.0,
        require_recovery_verification: bool = True,
        recovery_window: timedelta = timedelta(minutes=15),
    ):
        self._repo = repository
        self._password_service = password_service
        self._jwt_service = jwt_service
        self._code_service = code_service
        self._notifier = notifier
        self._notification_timeout = notification_timeout
        self._require_recovery_verification = require_recovery_verification
        self._recovery_window = recovery_window
        self._pending_notifications: set[asyncio.Task[None]] = set()
        self._dummy_hash: str | None = None

    @property
    def pending_notifications(self) -> int:
        return len(self._pending_notifications)

    async def register(self, email: str, password: str) -> RegistrationResult:
        """
        Register a new principal and email it a registration code.

        Returns
        -------
        The new identifier with both tokens. The principal stays
        unverified until a registration code is redeemed.

        Raises
        ------
        WeakPasswordError, HashingError
            If the password cannot be hashed
        InvalidEmailError
            If the email is malformed
        SigningError
            If a token cannot be issued
        RegistrationFailedError
            If the principal cannot be persisted (e.g. duplicate email)
        RepositoryError
            If the registration code cannot be recorded
        """
        logger.debug("register: %s", email)

        password_hash = self._password_service.hash(password)
        principal_id = uuid4()
        refresh_token = self._jwt_service.create_refresh_token(principal_id)
        access_token = self._jwt_service.create_access_token(principal_id)

        principal = Principal.create(
            email,
            password_hash,
            refresh_token=refresh_token,
            id=principal_id,
        )
        try:
            await self._repo.register(principal)
        except PersistenceError as e:
            msg = f"repo error: {e.message}"
            raise RegistrationFailedError(msg) from e

        code = self._code_service.generate()
        self._dispatch_detached(code, principal.email)

        try:
            await self._code_service.record(code, principal.email_obj, CodePurpose.REGISTRATION)
        except PersistenceError as e:
            msg = f"repo error: {e.message}"
            raise RepositoryError(msg) from e

        logger.info("Principal registered: %s", principal.email)
        return RegistrationResult(
            principal_id=principal_id,
            refresh_token=refresh_token,
            access_token=access_token,
        )

    async def login(self, email: str, password: str) -> TokenPair:
        """
        Authenticate with email and password.

        Unknown emails and wrong passwords both raise
        ``InvalidCredentialsError``; a dummy comparison keeps their timing
        alike.
        """
        logger.debug("login: %s", email)

        try:
            email_obj = Email.of(email)
            credentials = await self._repo.get_hash_and_id(email_obj)
        except InvalidEmailError:
            credentials = None
        except PersistenceError as e:
            msg = f"repo error: {e.message}"
            raise RepositoryError(msg) from e

        if credentials is None:
            self._password_service.verify(password, self._get_dummy_hash())
            raise InvalidCredentialsError

        try:
            self._password_service.compare(credentials.password_hash, password)
        except PasswordMismatchError as e:
            raise InvalidCredentialsError from e

        tokens = self._jwt_service.create_token_pair(credentials.principal_id)

        try:
            await self._repo.login(email_obj, tokens.refresh_token)
        except PersistenceError as e:
            msg = f"repo error: {e.message}"
            raise RepositoryError(msg) from e

        logger.info("Principal logged in: %s", email_obj)
        return tokens

    async def password_recovery(self, email: str, new_password: str) -> None:
        """
        Replace the password of ``email``.

        Unless recovery verification is disabled, a recovery code for
        this email must have been redeemed within the recovery window.
        The grant is consumed by the password change, atomically with the
        hash replacement, so one redemption pays for one change.

        Raises
        ------
        RecoveryNotVerifiedError
            If no recent recovery redemption exists (or the email is unknown)
        WeakPasswordError, HashingError
            If the new password cannot be hashed
        RepositoryError
            If the repository fails
        """
        logger.debug("password_recovery: %s", email)

        granted_since = None
        if self._require_recovery_verification:
            principal = await self._find_principal(email)
            if principal is None or not principal.has_recovery_grant(
                self._recovery_window,
            ):
                raise RecoveryNotVerifiedError
            granted_since = utc_now() - self._recovery_window

        email_obj = Email.of(email)
        password_hash = self._password_service.hash(new_password)

        try:
            await self._repo.password_recovery(
                email_obj,
                password_hash,
                granted_since=granted_since,
            )
        except RecoveryNotGrantedError as e:
            # Spent by a concurrent recovery since the check above
            raise RecoveryNotVerifiedError from e
        except PersistenceError as e:
            msg = f"repo error: {e.message}"
            raise RepositoryError(msg) from e

        logger.info("Password recovered for: %s", email_obj)

    async def email_send_code(
        self,
        email: str,
        purpose: CodePurpose = CodePurpose.RECOVERY,
    ) -> None:
        """
        Email a fresh verification code and record it.

        The email is sent before the code is recorded, so a delivery
        failure leaves no usable code behind. The email is not checked
        against registered principals.

        Raises
        ------
        InvalidEmailError, ValueError
            If the email is malformed or the purpose unknown; nothing is sent
        NotificationError
            If the code cannot be delivered within the notification timeout
        RepositoryError
            If the code cannot be recorded
        """
        logger.debug("email_send_code: %s (%s)", email, purpose)

        purpose = CodePurpose(purpose)
        email_obj = Email.of(email)
        code = self._code_service.generate()

        try:
            await self._send_code(code, email_obj.value)
        except asyncio.TimeoutError as e:
            msg = "smtp error: timed out"
            raise NotificationError(msg) from e
        except Exception as e:
            msg = f"smtp error: {e}"
            raise NotificationError(msg) from e

        try:
            await self._code_service.record(code, email_obj, purpose)
        except PersistenceError as e:
            msg = f"repo error: {e.message}"
            raise RepositoryError(msg) from e

    async def email_verify_code(
        self,
        code: str,
        email: str,
        purpose: CodePurpose,
    ) -> TokenPair:
        """
        Redeem a verification code and start a fresh session.

        Redeeming a registration code confirms the email; redeeming a
        recovery code authorizes one password recovery.

        Raises
        ------
        CodeRedemptionFailedError
            If the code is invalid, expired or already used, or the email or
            purpose is malformed
        RepositoryError
            If the repository fails
        """
        logger.debug("email_verify_code: %s (%s)", email, purpose)

        # InvalidEmailError is a ValueError, as is an unknown purpose tag
        try:
            principal_id = await self._code_service.redeem(
                code,
                email,
                CodePurpose(purpose),
            )
        except (VerificationCodeError, ValueError) as e:
            raise CodeRedemptionFailedError from e
        except PersistenceError as e:
            msg = f"repo error: {e.message}"
            raise RepositoryError(msg) from e

        tokens = self._jwt_service.create_token_pair(principal_id)

        try:
            await self._repo.update_refresh_token(principal_id, tokens.refresh_token)
        except PersistenceError as e:
            msg = f"repo error: {e.message}"
            raise RepositoryError(msg) from e

        logger.info("Verification code redeemed for principal: %s", principal_id)
        return tokens

    def verify_token(
        self,
        token: str,
        expected_type: TokenType | None = None,
    ) -> TokenPayload:
        return self._jwt_service.verify_token(token, expected_type=expected_type)

    async def wait_for_pending_notifications(self) -> None:
        """Wait for background code emails (shutdown, tests)."""
        if self._pending_notifications:
            await asyncio.gather(*self._pending_notifications, return_exceptions=True)

    async def _find_principal(self, email: str) -> Principal | None:
        try:
            return await self._repo.find_by_email(email)
        except InvalidEmailError:
            return None
        except PersistenceError as e:
            msg = f"repo error: {e.message}"
            raise RepositoryError(msg) from e

    async def _send_code(self, code: str, email: str) -> None:
        await asyncio.wait_for(
            asyncio.to_thread(self._notifier.send_code, code, email),
            timeout=self._notification_timeout,
        )

    def _dispatch_detached(self, code: str, email: str) -> None:
        task = asyncio.create_task(self._send_code(code, email))
        # Strong reference until done, or the loop may drop the task
        self._pending_notifications.add(task)
        task.add_done_callback(functools.partial(self._on_notification_done, email))

    def _on_notification_done(self, email: str, task: asyncio.Task[None]) -> None:
        self._pending_notifications.discard(task)
        if task.cancelled():
            logger.warning("Verification code email to %s was cancelled", email)
            return

        exc = task.exception()
        if exc is None:
            logger.debug("Verification code email sent to %s", email)
        elif isinstance(exc, asyncio.TimeoutError):
            logger.warning(
                "Verification code email to %s timed out after %.1fs",
                email,
                self._notification_timeout,
            )
        else:
            # The principal exists already; a new code can be requested
            logger.error("Failed to send verification code email to %s: %s", email, exc)

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self._password_service.hash(
                secrets.token_urlsafe(48)[:64],
            )
        return self._dummy_hash
