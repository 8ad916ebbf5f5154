"""Service-level routes."""

from fastapi import APIRouter

from courier.database import health_check

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health() -> dict:
    """Report service and database health."""
    database_ok = await health_check()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "connected" if database_ok else "unavailable",
    }
