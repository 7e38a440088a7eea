"""
Event logger utility for authentication events.
"""
from typing import Optional
from fastapi import Request
import sys
import logging
import os

from ..config import settings

# Create handlers list
handlers = [logging.StreamHandler(sys.stdout)]

# Try to add file handler, but continue without it if directory creation fails
if settings.LOG_DIR:
    try:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(settings.LOG_DIR, "auth_events.log")))
    except OSError as e:
        print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s:%(message)s",
    handlers=handlers
)

logger = logging.getLogger(__name__)


ALLOWED_EVENT_TYPES = {
    "otp_issued",
    "login_failure",
    "signup_started",
    "otp_verified",
    "otp_failure",
    "otp_resent",
    "social_login",
    "user_created",
}


def client_ip(request: Request) -> Optional[str]:
    """Socket peer address, falling back to the first X-Forwarded-For hop."""
    if request.client and request.client.host:
        return request.client.host

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()
    return None


def log_auth_event(
    event_type: str,
    email: str,
    request: Optional[Request] = None,
    user_id: Optional[int] = None,
    metadata: dict = None
) -> None:
    """
    Write one structured line for an authentication event.

    Args:
        event_type: One of ALLOWED_EVENT_TYPES
        email: Email address the event concerns
        request: Incoming request, used for client IP and user agent
        user_id: Id of the user row, when one exists
        metadata: Optional dictionary of additional context

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    ip_address = None
    user_agent = None
    if request is not None:
        ip_address = client_ip(request)
        user_agent = request.headers.get("user-agent")

    logger.info(
        "AUTH %s email=%s user_id=%s ip=%s user_agent=%s metadata=%s",
        event_type, email, user_id, ip_address, user_agent, metadata or {}
    )
