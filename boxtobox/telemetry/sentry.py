"""
Optional Sentry error tracking.

Enabled only when SENTRY_DSN is configured. Events leave the process
without request bodies (board labels, guesses), cookies or auth headers.
"""

import logging
import re
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from boxtobox.config import Settings, get_settings

logger = logging.getLogger(__name__)

_REDACTED_HEADERS = {"authorization", "cookie", "set-cookie", "x-forwarded-for"}
_SECRET_PARAM = re.compile(r"(?i)\b(token|api_key|secret)=([^&]*)")

_enabled = False


def scrub_sensitive_data(event: dict, hint: dict) -> Optional[dict]:
    """before_send hook: redact auth headers and secret query params, drop bodies."""
    request = event.get("request")
    if not isinstance(request, dict):
        return event

    headers = request.get("headers")
    if isinstance(headers, dict):
        request["headers"] = {
            name: "[REDACTED]" if name.lower() in _REDACTED_HEADERS else value
            for name, value in headers.items()
        }

    query_string = request.get("query_string")
    if isinstance(query_string, str):
        request["query_string"] = _SECRET_PARAM.sub(r"\1=[REDACTED]", query_string)

    if "data" in request:
        request["data"] = "[SCRUBBED]"
    return event


def init_sentry(settings: Optional[Settings] = None) -> bool:
    """Initialize the Sentry SDK once. Returns True when reporting is active."""
    global _enabled

    if _enabled:
        return True

    settings = settings or get_settings()
    if not settings.SENTRY_DSN:
        logger.info("[SENTRY] Not configured (SENTRY_DSN not set)")
        return False

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            # Upstream failures are logged at ERROR by the API layer
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        send_default_pii=False,
        before_send=scrub_sensitive_data,
    )
    _enabled = True
    logger.info(
        f"[SENTRY] Initialized: env={settings.SENTRY_ENVIRONMENT}, "
        f"traces_sample_rate={settings.SENTRY_TRACES_SAMPLE_RATE}"
    )
    return True


def is_sentry_enabled() -> bool:
    return _enabled
