"""Password hashing (PBKDF2-HMAC-SHA256) and random secret generation. No global state."""

import base64
import hmac
import os
import secrets
import string

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from account_audit.security.exceptions import CredentialError

HASH_SCHEME = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 390000
SALT_BYTES = 16
KEY_LENGTH = 32
SECRET_LENGTH = 16
SECRET_ALPHABET = string.ascii_letters + string.digits


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _unb64(data: str) -> bytes:
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


class CredentialService:
    """
    Opaque hash/verify capability. Hash format:
    pbkdf2_sha256$<iterations>$<salt>$<digest> (urlsafe base64, unpadded).
    Hashing is CPU-bound; async callers should offload it (asyncio.to_thread).
    """

    def __init__(self, iterations: int = DEFAULT_ITERATIONS) -> None:
        if iterations < 1:
            raise CredentialError("iterations must be positive")
        self._iterations = iterations

    def hash_password(self, password: str) -> str:
        """Return a salted hash of password. Raises CredentialError if password is empty."""
        if not password:
            raise CredentialError("password must not be empty")
        salt = os.urandom(SALT_BYTES)
        digest = _derive(password, salt, self._iterations)
        return f"{HASH_SCHEME}${self._iterations}${_b64(salt)}${_b64(digest)}"

    def verify_password(self, password: str, encoded: str) -> bool:
        """Constant-time check of password against encoded. Malformed hashes never verify."""
        try:
            scheme, iterations, salt, digest = encoded.split("$")
            if scheme != HASH_SCHEME:
                return False
            expected = _unb64(digest)
            actual = _derive(password, _unb64(salt), int(iterations))
        except (ValueError, TypeError, AttributeError):
            return False
        return hmac.compare_digest(expected, actual)

    @staticmethod
    def generate_secret(length: int = SECRET_LENGTH) -> str:
        """High-entropy alphanumeric secret of exactly length characters."""
        if length < 1:
            raise CredentialError("secret length must be positive")
        return "".join(secrets.choice(SECRET_ALPHABET) for _ in range(length))
