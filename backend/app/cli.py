# backend/app/cli.py
"""
Operator commands.

    snapshelf init-db
    snapshelf create-catalog "Kitchen"     # password is prompted
    snapshelf serve --port 8000
"""
import asyncio

import click
import uvicorn

from backend.app.core.config import settings
from backend.app.core.errors import CatalogServiceError
from backend.app.core.logging import setup_logging
from backend.app.db.base import engine
from backend.app.db.session import create_session_factory
from backend.app.db.init_db import init_models
from backend.app.security.hashing import get_password_hasher
from backend.app.services.catalogs import CatalogStore


@click.group()
def cli() -> None:
    """Snapshelf administration."""
    setup_logging(settings.LOG_LEVEL)


@cli.command("init-db")
@click.option("--drop", is_flag=True, help="Drop every table first (destroys data).")
def init_db(drop: bool) -> None:
    """Create the database tables."""
    if drop:
        click.confirm("Drop all tables and their data?", abort=True)
    asyncio.run(init_models(engine, drop=drop))
    click.echo("Tables created.")


async def _create_catalog(name: str, password: str, scheme: str):
    try:
        await init_models(engine)
        async with create_session_factory(engine)() as db:
            store = CatalogStore(db, get_password_hasher(scheme), timeout=settings.DB_TIMEOUT_SECONDS)
            return await store.create_catalog(name, password)
    finally:
        await engine.dispose()


@cli.command("create-catalog")
@click.argument("name")
@click.password_option(help="Shared password of the new catalog.")
@click.option(
    "--scheme",
    type=click.Choice(["pbkdf2", "md5-legacy"]),
    default=lambda: settings.PASSWORD_SCHEME,
    show_default="PASSWORD_SCHEME",
    help="Password digest to store.",
)
def create_catalog(name: str, password: str, scheme: str) -> None:
    """Create a catalog called NAME."""
    try:
        catalog = asyncio.run(_create_catalog(name, password, scheme))
    except CatalogServiceError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Catalog {catalog.id} ({catalog.name}) created.")


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on.")
@click.option("--reload", is_flag=True, help="Restart on code changes (development only).")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the HTTP API."""
    click.echo(f"Snapshelf API: http://{host}:{port}{settings.API_V1_STR}")
    uvicorn.run(
        "backend.app.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    cli()
