"""
Admin credential hashing

Credentials are stored as "pbkdf2_sha256$<iterations>$<salt>$<digest>"
(salt and digest urlsafe-base64). Records written before hashing was
introduced still hold the plaintext value; those are compared in constant
time and flagged in the log so they can be re-hashed.
"""

import base64
import hmac
import logging
import secrets

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

logger = logging.getLogger(__name__)

ALGORITHM = "pbkdf2_sha256"
ITERATIONS = 260000
SALT_BYTES = 16


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode())


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode()


def hash_password(password: str, iterations: int = ITERATIONS) -> str:
    """
    Hash a password with a fresh random salt.

    Args:
        password: Plaintext password
        iterations: PBKDF2 work factor

    Returns:
        Encoded hash suitable for the admins.password_hash column
    """
    salt = secrets.token_bytes(SALT_BYTES)
    digest = _derive(password, salt, iterations)
    return f"{ALGORITHM}${iterations}${_b64(salt)}${_b64(digest)}"


def is_hashed(stored: str) -> bool:
    return bool(stored) and stored.startswith(ALGORITHM + "$")


def verify_password(password: str, stored: str) -> bool:
    """
    Check a password against a stored credential value.

    Returns False for malformed hashes instead of raising.
    """
    if not stored or password is None:
        return False

    if not is_hashed(stored):
        logger.warning("Admin credential stored in plaintext; re-hash it with hash_password()")
        return hmac.compare_digest(password.encode(), stored.encode())

    try:
        _, iterations, salt, digest = stored.split("$")
        expected = base64.urlsafe_b64decode(digest.encode())
        actual = _derive(password, base64.urlsafe_b64decode(salt.encode()), int(iterations))
    except (ValueError, base64.binascii.Error):
        logger.error("Malformed admin credential hash")
        return False

    # Constant-time comparison to prevent timing attacks
    return hmac.compare_digest(actual, expected)
