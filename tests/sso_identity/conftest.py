"""
Pytest configuration for sso_identity tests.

This conftest provides fixtures specific to the sso_identity domain
(principals, verification codes, the auth orchestrator).
"""

import threading

import pytest

from sso_auth import JWTService, PasswordHashingService
from sso_identity.application.services import AuthService
from sso_identity.domain.principal import Principal
from sso_identity.infrastructure.persistence.memory import InMemoryIdentityRepository
from sso_identity.services import VerificationCodeService

TEST_EMAIL = "test@example.com"
TEST_SECRET = "identity-test-secret-0123456789abcdef"


class RecordingNotifier:
    """Notifier double that remembers every code it was asked to send."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.sent: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def send_code(self, code: str, email: str) -> None:
        if self.error is not None:
            raise self.error
        with self._lock:
            self.sent.append((code, email))

    def last_code_for(self, email: str) -> str:
        return next(code for code, to in reversed(self.sent) if to == email)


@pytest.fixture
def password_service() -> PasswordHashingService:
    """Low-cost hasher that also accepts short passwords."""
    return PasswordHashingService(rounds=4, min_length=3)


@pytest.fixture
def jwt_service() -> JWTService:
    return JWTService(secret_key=TEST_SECRET)


@pytest.fixture
def memory_repo() -> InMemoryIdentityRepository:
    return InMemoryIdentityRepository()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def auth_service(memory_repo, password_service, jwt_service, notifier) -> AuthService:
    """AuthService wired to the in-memory repository and a recording notifier."""
    return AuthService(
        repository=memory_repo,
        password_service=password_service,
        jwt_service=jwt_service,
        code_service=VerificationCodeService(memory_repo, secret_key=TEST_SECRET),
        notifier=notifier,
        notification_timeout=2.0,
    )


@pytest.fixture
def test_principal() -> Principal:
    """Create a standard test principal."""
    return Principal.create(TEST_EMAIL, "$2b$04$" + "x" * 53)
