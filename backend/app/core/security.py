"""
Password hashing utilities.

Plaintext passwords never cross this boundary; only bcrypt hashes are stored.
"""

import hashlib
import base64

import bcrypt


def _prehash(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes
    digest = hashlib.sha256(password.encode("utf-8")).digest()
    return base64.b64encode(digest)


def get_password_hash(password: str) -> str:
    """Hash a password with a fresh per-password salt."""
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(_prehash(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        return False
