"""Authentication exceptions.

These exceptions are raised by the sso_auth package and should be
caught and handled by the application layer (AuthService).
"""


class AuthError(Exception):
    """Base exception for all authentication errors."""

    def __init__(self, message: str = "Authentication error"):
        self.message = message
        super().__init__(self.message)


class HashingError(AuthError):
    """Raised when the password hashing primitive fails."""

    def __init__(self, message: str = "Password hashing failed"):
        super().__init__(message)


class WeakPasswordError(HashingError):
    """Raised when a password doesn't meet strength requirements."""

    def __init__(self, message: str = "Password does not meet requirements"):
        super().__init__(message)


class PasswordMismatchError(AuthError):
    """Raised when a plaintext password does not match the stored hash."""

    def __init__(self, message: str = "Password does not match"):
        super().__init__(message)


class SigningError(AuthError):
    """Raised when a token cannot be signed."""

    def __init__(self, message: str = "Failed to sign token"):
        super().__init__(message)


class InvalidTokenError(AuthError):
    """Raised when a JWT token is invalid, expired, or malformed."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class InvalidSignatureError(InvalidTokenError):
    """Raised when a token's signature does not verify."""

    def __init__(self, message: str = "Token signature verification failed"):
        super().__init__(message)


class TokenExpiredError(InvalidTokenError):
    """Raised when a token is past its expiry time."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message)


class MalformedTokenError(InvalidTokenError):
    """Raised when a token cannot be decoded or lacks required claims."""

    def __init__(self, message: str = "Malformed token"):
        super().__init__(message)
