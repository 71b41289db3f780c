"""bcrypt-backed password hashing."""

from __future__ import annotations

import bcrypt

from ..domain.errors import ValidationError

# bcrypt only looks at the first 72 bytes of its input
_MAX_PASSWORD_BYTES = 72


class BcryptPasswordHasher:
    """Hash and verify passwords with a salted bcrypt digest."""

    def __init__(self, rounds: int = 12) -> None:
        """Remember the bcrypt cost factor (``2**rounds`` iterations)."""
        self._rounds = rounds

    def hash(self, plaintext: str) -> str:
        """Return the bcrypt hash of ``plaintext`` with a fresh salt.

        Raises
        ------
        ValidationError
            When the password is blank or longer than bcrypt can process.
        """
        if plaintext is None or not plaintext.strip():
            raise ValidationError("password empty")
        secret = plaintext.encode("utf-8")
        if len(secret) > _MAX_PASSWORD_BYTES:
            raise ValidationError("password too long")
        return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=self._rounds)).decode("ascii")

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Return ``True`` when ``plaintext`` matches ``hashed``; never raises."""
        if not plaintext or not hashed:
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
        except (ValueError, TypeError):
            # malformed hash or oversized password
            return False
