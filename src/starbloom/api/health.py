"""Health check endpoint.

Reports the server as available along with environment, version, and
whether the database answers.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from starbloom import __version__
from starbloom.config import settings
from starbloom.db.engine import get_db, store_operation
from starbloom.errors import StoreError

router = APIRouter()


@router.get("/healthcheck")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check server health and database connectivity."""
    try:
        async with store_operation():
            await db.execute(text("SELECT 1"))
        database = "ok"
    except StoreError:
        database = "unavailable"

    return {
        "status": "available" if database == "ok" else "degraded",
        "system_info": {
            "environment": settings.environment,
            "version": __version__,
        },
        "database": database,
    }
