"""
Credential codec: password hashing and token digests.

Passwords use Werkzeug's salted ``scrypt`` KDF with fixed parameters.
Refresh and reset tokens are stored only as SHA-256 hex digests; the digest
is fast on purpose, since tokens are high-entropy random values.
"""

from __future__ import annotations

import hashlib
import secrets
from typing import Final

from werkzeug.security import check_password_hash, generate_password_hash

# Fixed cost; changing it only affects newly written hashes.
PASSWORD_HASH_METHOD: Final[str] = "scrypt:32768:8:1"
PASSWORD_SALT_LENGTH: Final[int] = 16

DEFAULT_TOKEN_LENGTH: Final[int] = 32


def hash_password(plaintext: str) -> str:
    """
    Hash a password with a salted slow KDF.

    :param plaintext: Raw password.
    :type plaintext: str
    :returns: Self-describing hash string (``method$salt$hash``).
    :rtype: str
    """
    return generate_password_hash(
        plaintext, method=PASSWORD_HASH_METHOD, salt_length=PASSWORD_SALT_LENGTH
    )


def verify_password(plaintext: str, password_hash: str | None) -> bool:
    """
    Check ``plaintext`` against a stored hash.

    A malformed or unknown-method hash yields ``False`` exactly like a wrong
    password.

    :param plaintext: Candidate password.
    :type plaintext: str
    :param password_hash: Stored hash (may be empty).
    :type password_hash: str | None
    :returns: ``True`` on match.
    :rtype: bool
    """
    if not password_hash or not isinstance(plaintext, str):
        return False
    try:
        return bool(check_password_hash(password_hash, plaintext))
    except (ValueError, TypeError):
        return False


def digest_token(raw: str) -> str:
    """Return the SHA-256 hex digest of a token."""
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def random_token(length: int = DEFAULT_TOKEN_LENGTH) -> str:
    """
    Generate a random hex token of ``length`` characters.

    :param length: Number of hex characters (``length // 2`` random bytes).
    :type length: int
    :raises ValueError: If ``length`` is not a positive even number.
    """
    if length <= 0 or length % 2:
        raise ValueError("Token length must be a positive even number.")
    return secrets.token_hex(length // 2)
