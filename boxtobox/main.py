"""FastAPI application for the Box to Box trivia backend."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from boxtobox import __version__
from boxtobox.config import get_settings
from boxtobox.exceptions import (
    BoxToBoxError,
    DatabaseUnavailableError,
    MissingParameterError,
    UpstreamQueryError,
)
from boxtobox.routes.api import router as api_router
from boxtobox.routes.core import router as core_router
from boxtobox.security import limiter
from boxtobox.state import AppServices, build_services
from boxtobox.telemetry import init_sentry, is_sentry_enabled

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Only activates if SENTRY_DSN is set in environment
init_sentry(settings)

_STATUS_BY_ERROR = {
    MissingParameterError: 400,
    UpstreamQueryError: 500,
    DatabaseUnavailableError: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Box-to-Box API...")
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(settings)

    services: AppServices = app.state.services
    players = services.local_index.load_once()
    logger.info(f"[STARTUP] Local player database: {len(players)} players")
    logger.info(f"[STARTUP] Sentry enabled: {is_sentry_enabled()}")

    yield

    logger.info("Shutting down Box-to-Box API...")
    await services.client.close()


async def box_to_box_error_handler(request: Request, exc: BoxToBoxError) -> JSONResponse:
    status_code = next(
        (code for error_type, code in _STATUS_BY_ERROR.items() if isinstance(exc, error_type)),
        500,
    )
    if status_code >= 500:
        logger.error(f"[API] {request.url.path} -> {status_code}: {exc.message} ({exc.details})")
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.message, "details": exc.details},
    )


async def rate_limit_error_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    response = JSONResponse(
        status_code=429,
        content={"error": "Rate limit exceeded", "details": str(exc.detail)},
    )
    return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request parameters", "details": problems},
    )


def create_app(services: Optional[AppServices] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        services: Prebuilt services (tests inject fakes here). When omitted
            they are built from settings during lifespan startup.
    """
    app = FastAPI(
        title="Box to Box",
        description="Football trivia grid backend: entity resolution, answer precomputation and board generation",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Add rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_error_handler)
    app.add_exception_handler(BoxToBoxError, box_to_box_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Include routers
    app.include_router(core_router)
    app.include_router(api_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("boxtobox.main:app", host="0.0.0.0", port=settings.PORT)
