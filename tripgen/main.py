"""FastAPI application."""

from fastapi import FastAPI

from tripgen.api.routes.billing import router as billing_router
from tripgen.api.routes.export import router as export_router
from tripgen.api.routes.health import router as health_router
from tripgen.api.routes.itineraries import router as itineraries_router
from tripgen.api.routes.metrics import router as metrics_router
from tripgen.api.routes.trips import router as trips_router
from tripgen.config import get_settings
from tripgen.utils.logging import configure_logging

configure_logging(get_settings().log_level)

app = FastAPI(title="Trip Generator API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(trips_router)
app.include_router(itineraries_router)
app.include_router(export_router)
app.include_router(billing_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Trip Generator API", "version": "0.1.0"}
