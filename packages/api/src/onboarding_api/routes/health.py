# This project was developed with assistance from AI tools.
"""Liveness and readiness probes."""

from db import get_db_service
from fastapi import APIRouter
from fastapi.responses import JSONResponse

router = APIRouter()


@router.get("/")
async def health() -> dict[str, str]:
    """Liveness: the process is up."""
    return {"status": "ok"}


@router.get("/ready")
async def ready() -> JSONResponse:
    """Readiness: the database answers a trivial query."""
    database_ok = await get_db_service().health_check()
    return JSONResponse(
        status_code=200 if database_ok else 503,
        content={"status": "ok" if database_ok else "unavailable", "database": database_ok},
    )
