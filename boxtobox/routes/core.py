"""Core routes: health and metrics.

- /api/health: public, rate limited
- /metrics: Bearer token when METRICS_BEARER_TOKEN is set
"""

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import PlainTextResponse

from boxtobox.config import get_settings
from boxtobox.schemas import CamelModel
from boxtobox.security import limiter
from boxtobox.state import AppServices, get_services
from boxtobox.telemetry import get_metrics_text

router = APIRouter(tags=["core"])
settings = get_settings()


class HealthResponse(CamelModel):
    status: str
    message: str
    local_players: int


@router.get("/api/health", response_model=HealthResponse)
@limiter.limit(settings.RATE_LIMIT_HEALTH)
async def health_check(request: Request, services: AppServices = Depends(get_services)):
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        message="Box-to-Box API is running",
        local_players=len(services.local_index.load_once()),
    )


def _unauthorized(reason: str) -> PlainTextResponse:
    return PlainTextResponse(
        content=f"# Unauthorized: {reason}\n",
        status_code=401,
        media_type="text/plain",
    )


@router.get("/metrics")
async def prometheus_metrics(
    authorization: str = Header(None, alias="Authorization"),
):
    """
    Prometheus metrics endpoint.

    Exposes upstream request counts/errors/latency, cell query outcomes and
    board generation outcomes.
    """
    expected_token = settings.METRICS_BEARER_TOKEN
    if expected_token:
        if not authorization:
            return _unauthorized("Missing Authorization header")
        # Extract token from "Bearer <token>"
        parts = authorization.split(" ", 1)
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return _unauthorized("Invalid Authorization format")
        if parts[1] != expected_token:
            return _unauthorized("Invalid token")

    content, content_type = get_metrics_text()
    return PlainTextResponse(content=content, media_type=content_type)
