# backend/app/schemas/catalog.py
from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    success: bool


class CatalogResponse(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class SessionClaim(BaseModel):
    """
    Claims carried by a session token.

    sub holds the catalog id as a string (JWT subjects are strings);
    use SessionAuthenticator.extract_catalog_id() to read it.
    """
    sub: Optional[str] = None
    catalog_name: Optional[str] = None
    iat: Optional[int] = None
    exp: Optional[int] = None
