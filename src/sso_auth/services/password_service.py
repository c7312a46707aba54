"""Password hashing service using bcrypt.

Provides secure password hashing and verification with configurable
strength validation.
"""

import bcrypt

from sso_auth.exceptions import HashingError, PasswordMismatchError, WeakPasswordError


class PasswordHashingService:
    """Service for secure password hashing and verification.

    Uses bcrypt for password hashing with configurable work factor.
    The salt and cost factor are embedded in the hash, so no separate
    salt storage is needed. Also provides password strength validation.

    Examples
    --------
    >>> service = PasswordHashingService()
    >>> hash = service.hash("my_secure_password")
    >>> service.verify("my_secure_password", hash)
    True
    >>> service.compare(hash, "wrong_password")
    Traceback (most recent call last):
    ...
    sso_auth.exceptions.PasswordMismatchError: Password does not match
    """

    # Password requirements
    DEFAULT_MIN_LENGTH = 8
    MAX_BYTES = 72  # bcrypt only reads the first 72 bytes

    def __init__(self, rounds: int = 12, min_length: int = DEFAULT_MIN_LENGTH):
        """Initialize the password hashing service.

        Parameters
        ----------
        rounds
            The bcrypt work factor (log2 of iterations). Default is 12,
            which is a good balance of security and performance.
            Higher values are more secure but slower.
        min_length
            Minimum number of characters a new password must have.
        """
        self._rounds = rounds
        self._min_length = max(min_length, 1)

    def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Parameters
        ----------
        password
            The plaintext password to hash

        Returns
        -------
        The bcrypt hash as a string

        Raises
        ------
        WeakPasswordError
            If password doesn't meet requirements
        HashingError
            If the bcrypt primitive fails
        """
        self.validate_strength(password)
        try:
            salt = bcrypt.gensalt(rounds=self._rounds)
            hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        except (ValueError, TypeError) as e:
            msg = f"Password hashing failed: {e}"
            raise HashingError(msg) from e
        return hashed.decode("utf-8")

    def compare(self, password_hash: str, password: str) -> None:
        """Check a plaintext password against a stored hash.

        ``bcrypt.checkpw`` compares digests in constant time, so the
        duration does not depend on how many leading bytes match.

        Parameters
        ----------
        password_hash
            The stored bcrypt hash
        password
            The plaintext password to check

        Raises
        ------
        PasswordMismatchError
            If the password does not match the hash
        HashingError
            If the stored hash is malformed
        """
        password_bytes = password.encode("utf-8")
        if not password_bytes or len(password_bytes) > self.MAX_BYTES:
            # Never accepted by hash(), so it cannot match
            raise PasswordMismatchError

        try:
            matches = bcrypt.checkpw(password_bytes, password_hash.encode("utf-8"))
        except (ValueError, TypeError) as e:
            msg = f"Invalid password hash: {e}"
            raise HashingError(msg) from e

        if not matches:
            raise PasswordMismatchError

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against a hash.

        Parameters
        ----------
        password
            The plaintext password to check
        password_hash
            The bcrypt hash to verify against

        Returns
        -------
        True if password matches, False otherwise (including invalid hashes)
        """
        try:
            self.compare(password_hash, password)
        except (PasswordMismatchError, HashingError):
            return False
        return True

    def validate_strength(self, password: str) -> None:
        """Validate that a password meets strength requirements.

        Current requirements:
        - At least ``min_length`` characters
        - At most 72 bytes once UTF-8 encoded

        Parameters
        ----------
        password
            The password to validate

        Raises
        ------
        WeakPasswordError
            If password doesn't meet requirements
        """
        if not password:
            msg = "Password cannot be empty"
            raise WeakPasswordError(msg)

        if len(password) < self._min_length:
            msg = f"Password must be at least {self._min_length} characters"
            raise WeakPasswordError(msg)

        if len(password.encode("utf-8")) > self.MAX_BYTES:
            msg = f"Password cannot exceed {self.MAX_BYTES} bytes"
            raise WeakPasswordError(msg)

    def needs_rehash(self, password_hash: str) -> bool:
        """Check if a password hash needs to be rehashed.

        This is useful when upgrading the work factor. After changing
        the rounds setting, existing hashes can be identified for
        rehashing on next login.

        Parameters
        ----------
        password_hash
            The existing hash to check

        Returns
        -------
        True if the hash should be regenerated
        """
        try:
            # Extract rounds from hash (bcrypt format: $2b$XX$...)
            parts = password_hash.split("$")
            if len(parts) >= 3:
                current_rounds = int(parts[2])
                return current_rounds != self._rounds
        except (ValueError, IndexError):
            pass
        return True
