"""Password hashing and verification utilities using bcrypt directly."""
import logging

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


class PasswordHandler:
    """Password hashing and verification handler using bcrypt directly."""

    def __init__(self, rounds: int = 10):
        """
        Initialize password handler.

        Args:
            rounds: bcrypt cost factor (default: 10)
        """
        self.rounds = rounds

    def hash_password(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        The returned string embeds the salt and the cost factor, so
        verification needs nothing else.

        Args:
            password: Plain text password to hash

        Returns:
            Hashed password string

        Raises:
            ValueError: If password is empty or longer than 72 bytes
            RuntimeError: If hashing fails
        """
        if not password or not isinstance(password, str):
            raise ValueError("Password must be a non-empty string")

        if len(password.strip()) == 0:
            raise ValueError("Password cannot be empty or whitespace only")

        password_bytes = password.encode("utf-8")
        if len(password_bytes) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password cannot exceed {MAX_PASSWORD_BYTES} bytes")

        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            hashed = bcrypt.hashpw(password_bytes, salt)
        except Exception as e:
            logger.error(f"Password hashing failed: {type(e).__name__}")
            raise RuntimeError("Failed to hash password") from e

        logger.debug("Password hashed successfully")
        return hashed.decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Comparison is done by bcrypt.checkpw in constant time. Malformed
        stored hashes count as a non-match.

        Args:
            plain_password: Plain text password to verify
            hashed_password: Hashed password to verify against

        Returns:
            True if password matches, False otherwise
        """
        if not plain_password or not isinstance(plain_password, str):
            return False

        if not hashed_password or not isinstance(hashed_password, str):
            return False

        try:
            return bcrypt.checkpw(
                plain_password.encode("utf-8"), hashed_password.encode("utf-8")
            )
        except (ValueError, TypeError) as e:
            # Return False for security reasons - don't expose internal errors
            logger.warning(f"Password verification failed on malformed input: {type(e).__name__}")
            return False

    def needs_update(self, hashed_password: str) -> bool:
        """
        Check if a password hash needs to be updated (e.g., different rounds).

        Args:
            hashed_password: Hashed password to check

        Returns:
            True if hash needs update, False otherwise
        """
        if not hashed_password or not hashed_password.startswith(("$2b$", "$2a$", "$2y$")):
            return True

        parts = hashed_password.split("$")
        if len(parts) < 4:
            return True

        try:
            current_rounds = int(parts[2])
        except ValueError:
            return True
        return current_rounds != self.rounds
