"""
Webhook signature verification and basic auth for admin routes
"""

import base64
import binascii
import hashlib
import hmac
import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from stockwatch.core.config import get_settings
from stockwatch.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

security = HTTPBasic()


def verify_webhook_signature(body: bytes, signature: Optional[str], secret: str) -> None:
    """
    Check that ``body`` was signed with ``secret``.

    The signature header carries base64(HMAC-SHA256(secret, raw body)). The
    digest is computed over the exact bytes received, never re-serialized JSON.
    Fails closed: any missing input, undecodable header or mismatch raises
    AuthenticationError.
    """
    if not secret:
        logger.warning("Webhook secret not configured; rejecting webhook")
        raise AuthenticationError("Webhook secret not configured")
    if not signature:
        raise AuthenticationError("No signature provided")

    try:
        provided = base64.b64decode(signature.strip(), validate=True)
    except (binascii.Error, ValueError):
        raise AuthenticationError("Malformed signature")

    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()

    if not hmac.compare_digest(provided, expected):
        raise AuthenticationError("Invalid signature")


def get_current_username(credentials: HTTPBasicCredentials = Depends(security)) -> str:
    """
    Simple HTTP Basic Auth - checks username/password from settings
    """
    settings = get_settings()
    correct_username = settings.BASIC_AUTH_USERNAME
    correct_password = settings.BASIC_AUTH_PASSWORD

    if not correct_password:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Basic auth password not configured"
        )

    is_correct_username = secrets.compare_digest(
        credentials.username.encode("utf8"),
        correct_username.encode("utf8")
    )
    is_correct_password = secrets.compare_digest(
        credentials.password.encode("utf8"),
        correct_password.encode("utf8")
    )

    if not (is_correct_username and is_correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


def require_auth():
    """
    Dependency to require authentication
    Usage: app.include_router(router, dependencies=[require_auth()])
    """
    return Depends(get_current_username)
