"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from health_advisor.api.calibration import router as calibration_router
from health_advisor.api.estimates import router as estimates_router
from health_advisor.app_logging import configure_logging
from health_advisor.containers import AppContainer
from health_advisor.domain.calibration import (
    CalibrationNotStartedError,
    IneligibleTransitionError,
    MealNotFoundError,
    UnknownDayError,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(calibration_router)
    app.include_router(estimates_router)

    @app.exception_handler(IneligibleTransitionError)
    async def ineligible_handler(
        request: Request, exc: IneligibleTransitionError
    ) -> JSONResponse:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": str(exc) or "Not allowed yet"},
        )

    @app.exception_handler(CalibrationNotStartedError)
    @app.exception_handler(UnknownDayError)
    @app.exception_handler(MealNotFoundError)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": f"{type(exc).__name__}: {exc}"},
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
