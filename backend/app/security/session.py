# backend/app/security/session.py
"""
Signed session tokens (JWT, HMAC).

A token carries the catalog identity as structured claims:

    {"sub": "<catalog id>", "catalog_name": "...", "iat": ..., "exp": ...}

Policy: tokens live ACCESS_TOKEN_EXPIRE_MINUTES (60 by default) and are
never renewed; an expired session means logging in again.

Every failure (missing, malformed, wrong algorithm, bad signature,
expired) raises the same AuthError so callers cannot tell them apart.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from backend.app.core.errors import AuthError
from backend.app.db.base import MAX_ROW_ID
from backend.app.schemas.catalog import SessionClaim

logger = logging.getLogger(__name__)

INVALID_CATALOG_ID = -1


@dataclass(frozen=True)
class SessionAuthenticator:
    secret: str = field(repr=False)
    algorithm: str = "HS256"
    ttl: timedelta = timedelta(minutes=60)

    def issue(self, catalog: Any, now: Optional[datetime] = None) -> str:
        """Sign a token for ``catalog`` (anything with ``id`` and ``name``)."""
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "sub": str(catalog.id),
            "catalog_name": catalog.name,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.ttl).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def validate(self, token: Optional[str]) -> SessionClaim:
        if not token:
            raise AuthError("no session token")

        try:
            header = jwt.get_unverified_header(token)
            # Exact match only: no "none", no other HMAC/RSA variants
            if header.get("alg") != self.algorithm:
                raise AuthError(f"unexpected signing algorithm {header.get('alg')!r}")

            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
            claim = SessionClaim(**payload)
        except (JWTError, PydanticValidationError) as exc:
            raise AuthError(f"invalid session token: {exc}") from exc

        if claim.exp is None:
            raise AuthError("session token without expiry")
        return claim

    @staticmethod
    def extract_catalog_id(claim: SessionClaim) -> int:
        """
        Catalog id from the claim, or INVALID_CATALOG_ID.

        Anything <= 0 must be treated as an authentication failure.
        """
        sub = claim.sub
        # Plain ASCII digits only; int() would also take signs, spaces and "_"
        if not isinstance(sub, str) or not (sub.isascii() and sub.isdigit()):
            return INVALID_CATALOG_ID
        catalog_id = int(sub)
        return catalog_id if 0 < catalog_id <= MAX_ROW_ID else INVALID_CATALOG_ID
