# backend/app/security/hashing.py
"""
Catalog password digests.

Two strategies are available, selected by settings.PASSWORD_SCHEME:

- Md5LegacyHasher: base64(md5(password)). Deterministic, so a catalog is
  found with an exact-match query on the stored digest. Kept only so that
  databases created by the old tooling keep working. Fast and unsalted.
- PasslibHasher: passlib pbkdf2_sha256, salted. The same password gives a
  different digest every time, so lookup has to verify the password
  against each stored digest instead of matching it in SQL.
"""
import base64
import hashlib
import secrets
from abc import ABC, abstractmethod
from typing import Optional

from passlib.context import CryptContext


class PasswordHasher(ABC):
    """Interface shared by the digest strategies."""

    name: str = ""

    # True when hash(pw) always returns the same string, which allows
    # an exact-match lookup in SQL.
    deterministic: bool = False

    @abstractmethod
    def hash(self, password: str) -> str:
        ...

    @abstractmethod
    def verify(self, password: str, digest: str) -> bool:
        ...


class Md5LegacyHasher(PasswordHasher):
    name = "md5-legacy"
    deterministic = True

    def hash(self, password: str) -> str:
        raw = hashlib.md5(password.encode("utf-8")).digest()
        return base64.b64encode(raw).decode("ascii")

    def verify(self, password: str, digest: str) -> bool:
        return secrets.compare_digest(self.hash(password), digest)


class PasslibHasher(PasswordHasher):
    name = "pbkdf2"
    deterministic = False

    def __init__(self, context: Optional[CryptContext] = None):
        self.context = context or CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

    def hash(self, password: str) -> str:
        return self.context.hash(password)

    def verify(self, password: str, digest: str) -> bool:
        # Digests in another format (e.g. legacy md5 rows) simply don't match
        if not self.context.identify(digest):
            return False
        return self.context.verify(password, digest)


def get_password_hasher(scheme: str) -> PasswordHasher:
    if scheme == Md5LegacyHasher.name:
        return Md5LegacyHasher()
    if scheme == PasslibHasher.name:
        return PasslibHasher()
    raise ValueError(f"Unknown password scheme: {scheme!r}")
