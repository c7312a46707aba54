"""Identity and authentication exceptions.

These exceptions are raised by AuthService and should be caught and
handled by the transport layer. Collaborator failures are chained as
``__cause__`` so the original error stays available for logging.
"""

from sso_auth.exceptions import AuthError


class InvalidCredentialsError(AuthError):
    """Raised when email or password is incorrect during login.

    Unknown emails and wrong passwords raise the same error.
    """

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class CodeRedemptionFailedError(AuthError):
    """Raised when a verification code is invalid, expired or already used."""

    def __init__(self, message: str = "Invalid or expired verification code"):
        super().__init__(message)


class RepositoryError(AuthError):
    """Raised when the persistence collaborator fails."""

    def __init__(self, message: str = "repo error"):
        super().__init__(message)


class RegistrationFailedError(RepositoryError):
    """Raised when the new principal cannot be persisted (e.g. duplicate email)."""

    def __init__(self, message: str = "Registration failed"):
        super().__init__(message)


class NotificationError(AuthError):
    """Raised when a verification code cannot be delivered."""

    def __init__(self, message: str = "smtp error"):
        super().__init__(message)


class RecoveryNotVerifiedError(AuthError):
    """Raised when password recovery is attempted without a redeemed recovery code."""

    def __init__(
        self,
        message: str = "Password recovery requires a verified recovery code",
    ):
        super().__init__(message)
