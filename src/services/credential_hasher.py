"""
Credential hashing for passwords stored at rest
"""

import logging
from abc import ABC, abstractmethod

from fastapi import Request
from werkzeug.security import generate_password_hash, check_password_hash

from config.settings import SCRYPT_N, SCRYPT_R, SCRYPT_P

logger = logging.getLogger(__name__)


class CredentialHasher(ABC):
    """Turns a plaintext credential into the string persisted in students.password"""

    @abstractmethod
    def hash(self, plaintext: str) -> str:
        ...

    @abstractmethod
    def verify(self, plaintext: str, hashed: str) -> bool:
        ...


class ScryptCredentialHasher(CredentialHasher):
    """
    werkzeug's salted scrypt hashes.

    Stored as ``scrypt:<n>:<r>:<p>$<salt>$<hex digest>``; the cost
    parameters travel with each hash, so changing them only affects new
    records.
    """

    SALT_LENGTH = 16

    def __init__(self, n: int = SCRYPT_N, r: int = SCRYPT_R, p: int = SCRYPT_P):
        if n < 2 or n & (n - 1):
            raise ValueError("scrypt n must be a power of 2 greater than 1")
        self.method = f"scrypt:{n}:{r}:{p}"

    def hash(self, plaintext: str) -> str:
        return generate_password_hash(plaintext, method=self.method, salt_length=self.SALT_LENGTH)

    def verify(self, plaintext: str, hashed: str) -> bool:
        try:
            return check_password_hash(hashed, plaintext)
        except ValueError as e:
            # unknown method or unreadable cost parameters
            logger.warning(f"Stored credential hash could not be checked: {e}")
            return False


def get_credential_hasher(request: Request) -> CredentialHasher:
    """FastAPI dependency returning the hasher configured at startup"""
    return request.app.state.credential_hasher
