# backend/app/api/deps.py
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyCookie
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.errors import AuthError, CatalogServiceError, TransactionTimeoutError
from backend.app.db.base import get_db
from backend.app.security.hashing import PasswordHasher, get_password_hasher
from backend.app.security.session import SessionAuthenticator
from backend.app.services.catalogs import CatalogStore
from backend.app.services.items import ItemStore

# auto_error=False: a missing cookie goes through the same path as a bad one
session_cookie = APIKeyCookie(name=settings.SESSION_COOKIE_NAME, auto_error=False)


@lru_cache()
def get_session_authenticator() -> SessionAuthenticator:
    return SessionAuthenticator(
        secret=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


@lru_cache()
def get_password_hasher_dep() -> PasswordHasher:
    return get_password_hasher(settings.PASSWORD_SCHEME)


def get_catalog_store(
        db: AsyncSession = Depends(get_db),
        hasher: PasswordHasher = Depends(get_password_hasher_dep),
) -> CatalogStore:
    return CatalogStore(db, hasher, timeout=settings.DB_TIMEOUT_SECONDS)


def get_item_store(db: AsyncSession = Depends(get_db)) -> ItemStore:
    return ItemStore(db, timeout=settings.DB_TIMEOUT_SECONDS)


def unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=AuthError.public_message,
    )


def as_http_error(exc: CatalogServiceError) -> HTTPException:
    """Translate a domain error into the HTTP answer clients see."""
    if isinstance(exc, AuthError):
        return unauthorized()
    headers = None
    if isinstance(exc, TransactionTimeoutError):
        headers = {"Retry-After": "1"}
    return HTTPException(status_code=exc.status_code, detail=exc.detail, headers=headers)


async def get_current_catalog_id(
        token: Optional[str] = Depends(session_cookie),
        authenticator: SessionAuthenticator = Depends(get_session_authenticator),
) -> int:
    """
    Catalog id of the caller, taken from the session cookie.

    Missing, malformed, tampered and expired tokens all give the same 401.
    """
    try:
        claim = authenticator.validate(token)
    except AuthError:
        raise unauthorized()

    catalog_id = authenticator.extract_catalog_id(claim)
    if catalog_id <= 0:
        raise unauthorized()
    return catalog_id
