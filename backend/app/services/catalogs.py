# backend/app/services/catalogs.py
import asyncio
import logging
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.errors import AuthError, ValidationError
from backend.app.db.session import run_in_transaction
from backend.app.models.catalog import Catalog
from backend.app.security.hashing import PasswordHasher

logger = logging.getLogger(__name__)


class CatalogStore:
    """
    Password authentication for catalogs.

    Catalogs are created out of band (see the CLI); the service only reads
    them.
    """

    def __init__(self, db: AsyncSession, hasher: PasswordHasher, timeout: Optional[float] = None):
        self.db = db
        self.hasher = hasher
        self.timeout = timeout

    async def authenticate(self, password: str) -> Catalog:
        """
        Return the catalog whose digest matches ``password``.

        Raises AuthError when nothing matches; a wrong password and an
        unknown catalog are the same failure.
        """
        if not password:
            raise AuthError("empty password")

        catalog = await run_in_transaction(
            self.db, lambda: self._find_by_password(password), self.timeout, "authenticate"
        )
        if catalog is None:
            logger.info("Login rejected: no catalog matches the supplied password")
            raise AuthError("no catalog matches the supplied password")

        logger.info("Catalog %s authenticated", catalog.id)
        return catalog

    async def create_catalog(self, name: str, password: str) -> Catalog:
        name = (name or "").strip()
        if not name:
            raise ValidationError("catalog name must not be empty")
        if not password:
            raise ValidationError("catalog password must not be empty")

        async def _create() -> Catalog:
            # A password opens exactly one catalog
            if await self._find_by_password(password) is not None:
                raise ValidationError("another catalog already uses this password")
            digest = await asyncio.to_thread(self.hasher.hash, password)
            catalog = Catalog(name=name, password_digest=digest)
            self.db.add(catalog)
            await self.db.flush()
            return catalog

        catalog = await run_in_transaction(self.db, _create, self.timeout, "create_catalog")
        logger.info("Created catalog %s (%s, %s digest)", catalog.id, catalog.name, self.hasher.name)
        return catalog

    async def _find_by_password(self, password: str) -> Optional[Catalog]:
        if self.hasher.deterministic:
            result = await self.db.execute(
                select(Catalog).where(Catalog.password_digest == self.hasher.hash(password))
            )
            return result.scalars().first()

        # Salted digests can't be matched in SQL: verify against each one.
        # The scan is CPU bound, so it runs in a worker thread where the
        # transaction timeout can abandon it.
        result = await self.db.execute(select(Catalog).order_by(Catalog.id))
        candidates = [(catalog, catalog.password_digest) for catalog in result.scalars()]
        return await asyncio.to_thread(self._first_match, password, candidates)

    def _first_match(self, password: str, candidates: List[Tuple[Catalog, str]]) -> Optional[Catalog]:
        for catalog, digest in candidates:
            if self.hasher.verify(password, digest):
                return catalog
        return None
