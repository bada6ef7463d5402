# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Roster Engine Service
=====================
Duty-roster grids for volunteer teams: events (rows) x role slots (columns),
administrator pins, availability-aware auto-fill, and conflict flags.

Port: 8010
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dutyroster.controllers import (
    assignment_controller,
    availability_controller,
    roster_controller,
    system_controller,
)
from dutyroster.core.config import settings
from dutyroster.core.dependencies import get_roster_repo, get_roster_service
from dutyroster.core.logging import get_logger
from dutyroster.middleware import MetricsMiddleware, RequestIDMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    if settings.SEED_DEMO_ROSTER and get_roster_repo().count() == 0:
        get_roster_service().seed_demo()
    logger.info(
        "%s v%s started on port %d",
        settings.SERVICE_NAME, settings.SERVICE_VERSION, settings.SERVICE_PORT,
    )
    yield
    logger.info("%s shutting down", settings.SERVICE_NAME)


app = FastAPI(
    title="Roster Engine",
    description="Duty-roster grids with availability-aware, fairness-balanced auto-fill.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception",
        extra={"request_id": getattr(request.state, "request_id", None)},
    )
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "detail": str(exc)},
    )


app.include_router(system_controller.router)
app.include_router(roster_controller.router)
app.include_router(assignment_controller.router)
app.include_router(availability_controller.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT, log_level="info")
