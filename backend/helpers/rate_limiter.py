"""IP rate limiter configuration module.

This module is separate from main.py to avoid circular imports when routers
need to access the limiter. It throttles raw request volume per client IP;
per-actor quotas on comments, reports and the like live in RateLimitService.
"""

from fastapi import Request
from slowapi import Limiter

from helpers.request_utils import get_client_ip


def _client_key(request: Request) -> str:
    return get_client_ip(request) or "unknown"


# Create rate limiter - imported by routers and main.py
limiter = Limiter(key_func=_client_key)
