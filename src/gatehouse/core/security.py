"""Password hashing utilities built on bcrypt."""
from __future__ import annotations

import bcrypt

BCRYPT_ROUNDS = 10


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Return a salted bcrypt hash of ``password``.

    Args:
        password: Plain-text password supplied by the user.
        rounds: bcrypt cost factor.

    Returns:
        The encoded hash, suitable for storage in ``User.password``.
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check ``password`` against a stored bcrypt hash.

    Returns:
        True if the password matches; False for a mismatch or an unreadable hash.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False
