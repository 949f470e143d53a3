"""Login, registration and session lookup against the CMS's JWT auth."""

import base64
import json
import time
from typing import Any, Dict, Optional

from common.base.logging_config import get_logger
from common.cms.client import get_cms_client
from common.cms.errors import AuthError, CMSError
from common.cms.normalize import normalize_user
from common.cms.types import AuthResponse, User

logger = get_logger(__name__)

ME_PATH = "api/users/me?populate=role"


def fetch_current_user(token: str) -> Optional[User]:
    """
    Resolve a JWT to its user, with role populated.

    :param token: JWT issued by the CMS
    :return: User, or None if the CMS rejects the token
    :raises CMSError: If the CMS cannot be reached
    """
    try:
        body = get_cms_client().get(ME_PATH, token=token)
    except CMSError as e:
        if e.status is None or e.status >= 500:
            raise
        logger.info(f"Token rejected by CMS: {e}")
        return None
    if not isinstance(body, dict):
        return None
    return normalize_user(body)


def _complete_auth(body: Dict[str, Any]) -> AuthResponse:
    """Swap the bare user from an auth response for the role-populated one."""
    jwt = body.get("jwt")
    if not jwt:
        raise AuthError("CMS returned no token")

    fallback = normalize_user(body.get("user") or {})
    try:
        user = fetch_current_user(jwt) or fallback
    except CMSError as e:
        logger.warning(f"Could not load role for user {fallback.id}: {e}")
        user = fallback
    return AuthResponse(jwt=jwt, user=user)


def login(identifier: str, password: str) -> AuthResponse:
    """
    Log in with username or email and password.

    :raises AuthError: With the CMS's message and status on rejection
    """
    try:
        body = get_cms_client().post(
            "api/auth/local", json={"identifier": identifier, "password": password}
        ) or {}
    except CMSError as e:
        raise AuthError(e.message or "Login failed", e.status) from e
    response = _complete_auth(body)
    logger.info(f"User {response.user.id} logged in")
    return response


def register(username: str, email: str, password: str) -> AuthResponse:
    """
    Create an account and log it in.

    :raises AuthError: With the CMS's message and status on rejection
    """
    try:
        body = get_cms_client().post(
            "api/auth/local/register",
            json={"username": username, "email": email, "password": password},
        ) or {}
    except CMSError as e:
        raise AuthError(e.message or "Registration failed", e.status) from e
    response = _complete_auth(body)
    logger.info(f"User {response.user.id} registered")
    return response


def decode_token_claims(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode a JWT payload without verifying its signature.

    Only for diagnostics; the CMS remains the authority on validity.
    """
    parts = token.split('.')
    if len(parts) != 3:
        return None
    payload = parts[1] + '=' * (-len(parts[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(payload.encode('ascii')))
    except (ValueError, UnicodeEncodeError):
        return None
    return claims if isinstance(claims, dict) else None


def token_expired(claims: Dict[str, Any], now: Optional[float] = None) -> bool:
    exp = claims.get("exp")
    if exp is None:
        return False
    return (now if now is not None else time.time()) > float(exp)
