"""
Request identity helpers: user id validation, client IP extraction, and the
admin-key dependency guarding model training routes.
"""

import hmac
import logging
import re
from typing import Optional

from fastapi import Header, HTTPException, Request

from fakefinder.config import settings

logger = logging.getLogger(__name__)

_USER_ID_MAX_LEN = 128
_USER_ID_RE = re.compile(r"^[a-zA-Z0-9\-_.]+$")


def validate_user_id(user_id: str) -> None:
    """
    Raises HTTP 400 if user_id is longer than 128 characters or contains
    characters outside [a-zA-Z0-9-_.].  Prevents Firestore key injection and
    Redis key-prefix abuse.
    """
    if len(user_id) > _USER_ID_MAX_LEN or not _USER_ID_RE.match(user_id):
        raise HTTPException(status_code=400, detail="Invalid X-User-ID")


def get_client_ip(request: Request) -> str:
    """Extracts the real client IP from headers, falling back to host."""
    cf_ip = request.headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip

    x_forwarded = request.headers.get("x-forwarded-for")
    if x_forwarded:
        return x_forwarded.split(",")[0].strip()

    return request.client.host if request.client else "127.0.0.1"


def require_admin(admin_key: Optional[str] = Header(None, alias="X-Admin-Key")) -> None:
    """
    FastAPI dependency for model training, testing, download and reset.

    Rejects with 403 when the admin key is not configured or does not match.
    """
    expected = settings.admin_api_key
    if not expected:
        logger.warning("[AUTH] ADMIN_API_KEY not set. Model management routes are disabled.")
        raise HTTPException(status_code=403, detail="Model management is disabled.")

    if not admin_key or not hmac.compare_digest(admin_key, expected):
        logger.warning("[AUTH] Rejected model management request with invalid admin key")
        raise HTTPException(status_code=403, detail="Admin privileges required.")
