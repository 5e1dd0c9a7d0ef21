"""
Request utilities for extracting client information.

Provides helpers to extract client IP addresses and limiter keys from
HTTP requests, handling proxy headers correctly.
"""

from typing import Optional

from fastapi import Request


def get_client_ip(request: Request) -> Optional[str]:
    """
    Extract the client's real IP address from the request.

    Handles common proxy headers in order of precedence:
    1. X-Forwarded-For (standard proxy header, first IP)
    2. X-Real-IP (nginx)
    3. Direct client.host

    Args:
        request: FastAPI request object

    Returns:
        Client IP address or None if not available
    """
    # Standard proxy header (comma-separated, first is client)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first_ip = forwarded_for.split(",")[0].strip()
        if first_ip:
            return first_ip

    # nginx proxy
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    # Direct connection
    if request.client:
        return request.client.host

    return None


def get_auth_identifier(request: Request, email: Optional[str] = None) -> str:
    """
    Key used by the auth-attempt limiter.

    The e-mail wins when given, so attempts against one account are counted
    together regardless of where they come from. Otherwise the client IP,
    or "unknown" when even that is missing.
    """
    if email and email.strip():
        return email.strip().lower()
    return get_client_ip(request) or "unknown"
