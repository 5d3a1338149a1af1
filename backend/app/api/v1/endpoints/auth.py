# backend/app/api/v1/endpoints/auth.py
from fastapi import APIRouter, Depends, Response

from backend.app.api import deps
from backend.app.core.config import settings
from backend.app.core.errors import CatalogServiceError
from backend.app.schemas.catalog import LoginRequest, LoginResponse
from backend.app.security.session import SessionAuthenticator
from backend.app.services.catalogs import CatalogStore

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
        payload: LoginRequest,
        response: Response,
        store: CatalogStore = Depends(deps.get_catalog_store),
        authenticator: SessionAuthenticator = Depends(deps.get_session_authenticator),
):
    try:
        catalog = await store.authenticate(payload.password)
    except CatalogServiceError as exc:
        raise deps.as_http_error(exc)

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=authenticator.issue(catalog),
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
        max_age=settings.SESSION_COOKIE_MAX_AGE_DAYS * 24 * 60 * 60,
    )
    return {"success": True}


@router.post("/logout", response_model=LoginResponse)
async def logout(response: Response):
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")
    return {"success": True}
