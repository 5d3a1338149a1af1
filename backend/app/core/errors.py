# backend/app/core/errors.py
"""
Domain errors raised by the stores and the session authenticator.

Each error carries the HTTP status the API layer answers with, so the
endpoints translate them without a lookup table of their own.
"""
from typing import Optional


class CatalogServiceError(Exception):
    """Base class for every error the service raises on purpose."""

    status_code: int = 500
    public_message: Optional[str] = None

    @property
    def detail(self) -> str:
        return self.public_message or str(self)


class ValidationError(CatalogServiceError):
    """Malformed input: bad fingerprint, empty search query."""

    status_code = 400


class AuthError(CatalogServiceError):
    """
    Bad password, missing, invalid or expired token.

    The message is only for logs. Clients always see the same detail.
    """

    status_code = 401
    public_message = "Unauthorized"


class NotFoundError(CatalogServiceError):
    status_code = 404


class OwnershipError(CatalogServiceError):
    """A referenced row does not belong to the caller's catalog."""

    status_code = 400


class TagOwnershipError(OwnershipError):
    def __init__(self, tag_id: int):
        super().__init__(f"tag id {tag_id} does not exist in catalog")
        self.tag_id = tag_id


class TransactionError(CatalogServiceError):
    """Storage failed mid-transaction; everything was rolled back."""

    status_code = 500
    public_message = "Storage error"


class TransactionTimeoutError(TransactionError):
    status_code = 503
    public_message = "Storage timed out, please retry"
