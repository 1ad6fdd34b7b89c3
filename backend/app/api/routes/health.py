"""Health check endpoints.

- /health: liveness, always 200
- /healthz: reports whether the directions provider is usable
"""

from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from backend.app.config import Settings, get_settings

router = APIRouter()


def check_directions(settings: Settings) -> tuple[bool, str]:
    """Check that the configured directions provider can be used.

    Returns:
        (is_ok, status_message)
    """
    if settings.routing_provider == "fixtures":
        return (True, "fixtures")
    if not settings.google_maps_api_key:
        return (False, "missing_api_key")
    return (True, "ok")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | JSONResponse:
    """Health check endpoint.

    Returns:
        200 with component status if the directions provider is usable
        503 otherwise
    """
    settings = get_settings()
    directions_ok, directions_status = check_directions(settings)

    response_body = {
        "status": "ok" if directions_ok else "degraded",
        "components": {
            "directions": directions_status,
            "language": settings.directions_language,
        },
    }

    if not directions_ok:
        return JSONResponse(content=response_body, status_code=503)

    return response_body
