"""Sentry setup for the ESG API."""

from typing import Any

import sentry_sdk
import structlog
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

logger = structlog.get_logger()

_REDACTED_HEADERS = frozenset({"authorization", "cookie"})
_UNTRACED_PATHS = frozenset({"/health"})


def _redact_headers(event: dict, hint: dict) -> dict:
    headers = event.get("request", {}).get("headers", {})
    for name in list(headers):
        if name.lower() in _REDACTED_HEADERS:
            headers[name] = "[REDACTED]"
    return event


def _make_traces_sampler(rate: float):
    def sampler(sampling_context: dict[str, Any]) -> float:
        scope = sampling_context.get("asgi_scope") or {}
        if scope.get("path") in _UNTRACED_PATHS:
            return 0.0
        return rate

    return sampler


def init_sentry(
    dsn: str | None,
    environment: str = "development",
    release: str | None = None,
    traces_sample_rate: float = 0.1,
) -> None:
    """Initialise Sentry. Must run before the FastAPI app is built; no-op without a DSN."""
    if not dsn:
        logger.warning("sentry_disabled", reason="SENTRY_DSN not set")
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sampler=_make_traces_sampler(traces_sample_rate),
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        send_default_pii=False,
        before_send=_redact_headers,
    )
    logger.info("sentry_initialized", environment=environment, traces_sample_rate=traces_sample_rate)
