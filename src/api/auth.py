"""Caller identity and API key checks.

Session verification happens upstream: the identity gateway in front of
this service authenticates the user and forwards their id in X-User-Id.
When API_KEY is set, every protected request must also carry a matching
X-API-Key, so only the gateway can reach the service.
"""

import hashlib
import os
import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException, Security
from fastapi.security import APIKeyHeader

from src.utils.logging import log, get_logger

MODULE = "auth"
logger = get_logger()

API_KEY = os.getenv("API_KEY", "")

_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def _hash_key(key: str) -> str:
    return hashlib.sha256(key.encode()).hexdigest()


def check_api_key(
    api_key: Optional[str] = Security(_api_key_header),
) -> None:
    """Reject the request unless it presents the configured API key."""
    if not API_KEY:
        return
    if not api_key or not secrets.compare_digest(_hash_key(api_key), _hash_key(API_KEY)):
        log.warning(logger, MODULE, "rejected", "Invalid or missing API key")
        raise HTTPException(status_code=401, detail="Authentication Error: invalid API key.")


def optional_user(
    _: None = Depends(check_api_key),
    user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> Optional[str]:
    """The caller's user id, or None for anonymous callers."""
    if user_id is None:
        return None
    return user_id.strip() or None


def require_user(user_id: Optional[str] = Depends(optional_user)) -> str:
    """The caller's user id; 401 when the caller is anonymous."""
    if user_id is None:
        raise HTTPException(status_code=401, detail="User not authenticated.")
    return user_id
