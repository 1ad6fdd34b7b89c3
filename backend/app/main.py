"""FastAPI application - trip route planner."""

from fastapi import FastAPI

from backend.app.api.routes.favorites import router as favorites_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.api.routes.places import router as places_router
from backend.app.api.routes.routing import router as routing_router
from backend.app.config import get_settings
from backend.app.utils.logging import configure_logging

configure_logging(get_settings().log_level)

app = FastAPI(title="Trip Route Planner API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(routing_router)
app.include_router(places_router)
app.include_router(favorites_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Trip Route Planner API", "version": "0.1.0"}
