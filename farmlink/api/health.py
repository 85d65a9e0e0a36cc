"""Health check endpoint."""

from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..container import ApplicationContainer
from ..dependencies import ContainerDep

health_router = APIRouter(tags=["health"])


@health_router.get("/health")
async def health(container: ApplicationContainer = ContainerDep) -> JSONResponse:
    """Report database reachability and the number of identities online."""
    database_ok = container.database_manager is not None and await container.database_manager.check_connection()
    body: dict[str, Any] = {
        "status": "healthy" if container.is_initialized and database_ok else "unhealthy",
        "database": "ok" if database_ok else "unavailable",
        **container.status(),
    }
    return JSONResponse(status_code=200 if body["status"] == "healthy" else 503, content=body)
