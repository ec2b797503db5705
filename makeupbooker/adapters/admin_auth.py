"""
Administrative password for destructive teacher-view operations.

Only a salted PBKDF2 hash is stored, never the password itself.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from typing import Optional

from ..domain.exceptions import AuthenticationError
from .storage import StorageProtocol

logger = logging.getLogger(__name__)


ADMIN_PASSWORD_STORAGE_KEY = "admin_password"

_ALGORITHM = "pbkdf2_sha256"
_ITERATIONS = 240_000


def hash_password(password: str, salt: Optional[bytes] = None, iterations: int = _ITERATIONS) -> str:
    """Return an encoded ``algorithm$iterations$salt$hash`` record."""
    salt = salt or secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{_ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def check_password(password: str, encoded: str) -> bool:
    """Compare a password against an encoded hash record."""
    try:
        algorithm, iterations, salt_hex, digest_hex = encoded.split("$")
        if algorithm != _ALGORITHM:
            return False
        expected = bytes.fromhex(digest_hex)
        digest = hashlib.pbkdf2_hmac(
            "sha256", password.encode("utf-8"), bytes.fromhex(salt_hex), int(iterations)
        )
    except ValueError:
        logger.warning("Stored admin password record is malformed")
        return False
    return hmac.compare_digest(digest, expected)


class AdminPassword:
    """Reads and writes the admin password hash in local storage."""

    def __init__(self, storage: StorageProtocol, storage_key: str = ADMIN_PASSWORD_STORAGE_KEY):
        self._storage = storage
        self._storage_key = storage_key

    @property
    def is_set(self) -> bool:
        return bool(self._storage.get_item(self._storage_key))

    def set(self, password: str) -> None:
        if not password:
            raise ValueError("Password must not be empty")
        self._storage.set_item(self._storage_key, hash_password(password))
        logger.info("Admin password updated")

    def verify(self, password: str) -> bool:
        """Check a password; any password passes when none is configured."""
        encoded = self._storage.get_item(self._storage_key)
        if not encoded:
            return True
        return check_password(password, encoded.strip())

    def require(self, password: str) -> None:
        """
        Raises:
            AuthenticationError: If the password does not match
        """
        if not self.verify(password):
            raise AuthenticationError("Wrong admin password")
