"""Password hashing and verification with bcrypt."""

import bcrypt

DEFAULT_ROUNDS = 12


class PasswordHasher:
    """Salted bcrypt hashing; every digest embeds its own random salt and cost."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """
        Hash a plaintext password.

        Args:
            password: Plain text password

        Returns:
            bcrypt digest as a UTF-8 string
        """
        return bcrypt.hashpw(
            password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)
        ).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """
        Check a plaintext password against a stored digest.

        Malformed or empty digests verify as False instead of raising.
        """
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except (ValueError, TypeError):
            return False
