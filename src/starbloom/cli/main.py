"""Starbloom CLI — run the API server and manage the schema.

Usage:
    starbloom serve --port 8080 --env production    # Run the API under uvicorn
    starbloom init-db                               # Create tables directly
    starbloom prune-tokens                          # Drop expired token rows

Configuration comes from STARBLOOM_* env vars; flags given here override
them for this process. Modules that read settings are imported inside the
commands so the overrides are in place first.
"""

from __future__ import annotations

import asyncio
import os

import click


@click.group()
def cli():
    """Starbloom social networking server."""


@cli.command()
@click.option("--host", default=None, help="Bind address (STARBLOOM_HOST).")
@click.option("--port", type=int, default=None, help="API server port (STARBLOOM_PORT).")
@click.option(
    "--env",
    "environment",
    type=click.Choice(["development", "staging", "production"]),
    default=None,
    help="Environment (STARBLOOM_ENVIRONMENT).",
)
@click.option("--dsn", default=None, help="Database URL (STARBLOOM_DATABASE_URL).")
def serve(host: str | None, port: int | None, environment: str | None, dsn: str | None):
    """Run the API server."""
    overrides = {
        "STARBLOOM_HOST": host,
        "STARBLOOM_PORT": str(port) if port is not None else None,
        "STARBLOOM_ENVIRONMENT": environment,
        "STARBLOOM_DATABASE_URL": dsn,
    }
    for key, value in overrides.items():
        if value is not None:
            os.environ[key] = value

    import uvicorn

    from starbloom.config import Settings

    cfg = Settings()
    uvicorn.run(
        "starbloom.main:app",
        host=cfg.host,
        port=cfg.port,
        timeout_keep_alive=60,
        log_level="debug" if cfg.debug else "info",
    )


@cli.command("init-db")
def init_db():
    """Create all tables (use Alembic migrations for real deployments)."""

    async def _create():
        from starbloom.db.engine import engine
        from starbloom.db.models import Base

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(_create())
    click.secho("tables created", fg="green")


@cli.command("prune-tokens")
def prune_tokens():
    """Delete every expired token row. Resolution already ignores them."""

    async def _prune() -> int:
        from starbloom.db.engine import async_session_factory, commit, engine
        from starbloom.services.token_service import TokenService

        async with async_session_factory() as session:
            removed = await TokenService(session).delete_expired()
            await commit(session)
        await engine.dispose()
        return removed

    removed = asyncio.run(_prune())
    click.echo(f"removed {removed} expired token(s)")


if __name__ == "__main__":
    cli()
