"""Password hashing and signed session tokens."""

import hashlib
import hmac
import logging
import secrets
from datetime import timedelta
from typing import Any, Dict, Tuple

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from dashboard.config.settings import settings
from dashboard.services.exceptions import AuthenticationError
from dashboard.utils.ids import generate_session_id
from dashboard.utils.redis_client import has_flag, make_key, set_flag
from dashboard.utils.timing import utc_now

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
PBKDF2_ITERATIONS = 100_000


def hash_password(password: str) -> str:
    """PBKDF2-SHA256, stored as '<salt>$<hex digest>'."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"{salt}${digest.hex()}"


def verify_password(password: str, hashed: str) -> bool:
    try:
        salt, hash_hex = hashed.split("$", 1)
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return hmac.compare_digest(digest.hex(), hash_hex)


def issue_token(user_id: int) -> Tuple[str, Dict[str, Any]]:
    """
    Create a session token for a user.

    Returns:
        (token, claims)
    """
    now = utc_now()
    claims = {
        "sub": str(user_id),
        "sid": generate_session_id(),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=settings.session_ttl_seconds)).timestamp()),
    }
    token = jwt.encode(claims, settings.session_secret, algorithm=JWT_ALGORITHM)
    return token, claims


def decode_token(token: str) -> Dict[str, Any]:
    """
    Validate a session token and return its claims.

    Raises:
        AuthenticationError: If the token is invalid, expired or revoked
    """
    try:
        claims = jwt.decode(token, settings.session_secret, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        raise AuthenticationError("Session expired") from e
    except InvalidTokenError as e:
        raise AuthenticationError("Invalid session") from e

    if "sub" not in claims or "sid" not in claims:
        raise AuthenticationError("Invalid session")

    if is_revoked(claims["sid"]):
        raise AuthenticationError("Session has been logged out")

    return claims


def claims_user_id(claims: Dict[str, Any]) -> int:
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise AuthenticationError("Invalid session") from e


def revoke_session(claims: Dict[str, Any]) -> bool:
    """
    Revoke a session until its token would have expired anyway.

    Returns False when Redis is unavailable; the token then stays valid until
    it expires.
    """
    ttl = int(claims.get("exp", 0) - utc_now().timestamp())
    if ttl <= 0:
        return True
    revoked = set_flag(make_key("session", "revoked", claims["sid"]), ttl)
    if not revoked:
        logger.warning("[AUTH] Could not revoke session; Redis unavailable")
    return revoked


def is_revoked(session_id: str) -> bool:
    return has_flag(make_key("session", "revoked", session_id))
