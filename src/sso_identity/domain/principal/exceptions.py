"""Principal domain exceptions.

Raised by the domain model and by repository implementations. The
application layer (AuthService) translates them into the error
taxonomy of sso_identity.exceptions.
"""


class InvalidEmailError(ValueError):
    """Raised when email format is invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class PersistenceError(Exception):
    """Opaque failure of the persistence layer."""

    def __init__(self, message: str = "Persistence failure") -> None:
        self.message = message
        super().__init__(message)


class EmailAlreadyExistsError(PersistenceError):
    """Email already registered."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Email already registered: {email}")


class PrincipalNotFoundError(PersistenceError):
    """No principal for the given email or id."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Principal not found: {key}")


class VerificationCodeError(Exception):
    """Base class for rejected verification code redemptions."""

    def __init__(self, message: str = "Verification code rejected") -> None:
        self.message = message
        super().__init__(message)


class InvalidCodeError(VerificationCodeError):
    """No code matches the email, purpose and value."""

    def __init__(self) -> None:
        super().__init__("Verification code is invalid")


class CodeExpiredError(VerificationCodeError):
    """The code matched but its validity window has passed."""

    def __init__(self) -> None:
        super().__init__("Verification code has expired")


class CodeAlreadyUsedError(VerificationCodeError):
    """The code matched but was already consumed or superseded."""

    def __init__(self) -> None:
        super().__init__("Verification code was already used")


class RecoveryNotGrantedError(Exception):
    """No unconsumed recovery grant is recent enough for a password change."""

    def __init__(self, email: str) -> None:
        self.email = email
        self.message = f"No recovery grant for: {email}"
        super().__init__(self.message)
