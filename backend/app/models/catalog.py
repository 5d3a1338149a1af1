# backend/app/models/catalog.py
from sqlalchemy import Column, Integer, String

from backend.app.db.base import Base


class Catalog(Base):
    __tablename__ = "catalogs"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)

    # Digest of the shared catalog password, format depends on PASSWORD_SCHEME.
    # Column keeps the historical name "password".
    password_digest = Column("password", String(255), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Catalog {self.id} {self.name!r}>"
