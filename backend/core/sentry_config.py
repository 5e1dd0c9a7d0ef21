"""
Sentry SDK configuration.

Errors are always captured; transactions are sampled per route family.
User e-mails, cookies, bearer tokens and the video pipeline credentials are
scrubbed before anything leaves the process.
"""

import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.types import Event, Hint

HEALTH_PATHS = ("/health", "/api/health")
HEALTH_TRANSACTIONS = (*HEALTH_PATHS, "GET /health", "GET /api/health")

# Headers that may carry credentials
_SENSITIVE_HEADERS = ("Authorization", "authorization", "Cookie", "cookie")


def _before_send(event: Event, hint: Hint) -> Event | None:
    """
    Scrub PII and credentials before sending to Sentry.

    Keeps only the user id for traceability.
    """
    user = event.get("user")
    if user:
        user.pop("email", None)
        user.pop("username", None)
        if "ip_address" in user:
            user["ip_address"] = "{{auto}}"  # Anonymized by Sentry

    request = event.get("request")
    if request and isinstance(request, dict):
        request.pop("cookies", None)
        headers = request.get("headers")
        if isinstance(headers, dict):
            for name in _SENSITIVE_HEADERS:
                if name in headers:
                    headers[name] = "[Filtered]"

    extra = event.get("extra")
    if isinstance(extra, dict):
        for key in list(extra):
            if "secret" in key.lower() or "token" in key.lower():
                extra[key] = "[Filtered]"

    return event


def _before_send_transaction(event: Event, hint: Hint) -> Event | None:
    """Drop health check transactions."""
    if event.get("transaction", "") in HEALTH_TRANSACTIONS:
        return None
    return event


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    """
    Dynamic sampling based on endpoint.

    Returns:
        Sample rate between 0.0 and 1.0.
    """
    if sampling_context.get("parent_sampled") is True:
        return 1.0

    path = sampling_context.get("asgi_scope", {}).get("path", "")

    if path in HEALTH_PATHS:
        return 0.0

    # Moderation and auth are low volume and security relevant
    if path.startswith("/api/admin") or path.startswith("/api/auth"):
        return 0.5

    # Upload brokering talks to the video pipeline
    if path.startswith("/api/uploads"):
        return 0.3

    # Player events arrive several times per viewing
    if path.startswith("/api/playback"):
        return 0.01

    return 0.1


def init_sentry() -> None:
    """
    Initialize Sentry SDK with FastAPI integration.

    Call this BEFORE creating the FastAPI app instance.
    Sentry is disabled if SENTRY_DSN environment variable is not set.
    """
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("ENVIRONMENT", "development"),
        release=os.getenv("SENTRY_RELEASE", "unknown"),
        send_default_pii=False,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoguruIntegration(),
        ],
        traces_sampler=_traces_sampler,
        sample_rate=1.0,
        before_send=_before_send,
        before_send_transaction=_before_send_transaction,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[KeyboardInterrupt, SystemExit],
    )
