"""FastAPI dependencies: store access, current user and permission guards."""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from dashboard.config.roles import Permission
from dashboard.config.settings import settings
from dashboard.models.domain import UserRecord
from dashboard.services.auth import claims_user_id, decode_token
from dashboard.services.exceptions import AuthenticationError, InvalidRequestError
from dashboard.services.permissions import check_permission
from dashboard.services.store import MemoryStore, store

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_store() -> MemoryStore:
    return store


def session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Session token from the Bearer header, else from the session cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise AuthenticationError("Unauthorized")
    return token


def get_session_claims(token: str = Depends(session_token)) -> dict:
    return decode_token(token)


def get_current_user(
    claims: dict = Depends(get_session_claims),
    db: MemoryStore = Depends(get_store),
) -> UserRecord:
    user = db.get_user(claims_user_id(claims))
    if user is None:
        logger.warning("[AUTH] Session refers to a deleted user")
        raise AuthenticationError("Unauthorized")
    return user


def require_permission(permission: Permission):
    """Dependency factory: the current user, provided their role grants ``permission``."""

    def dependency(user: UserRecord = Depends(get_current_user)) -> UserRecord:
        check_permission(user.role, permission)
        return user

    return dependency


def parse_id(raw: str, label: str = "content") -> int:
    """Path ids arrive as strings so malformed ones get a 400, not a 422."""
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise InvalidRequestError(f"Invalid {label} ID")
