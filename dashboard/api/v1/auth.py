"""Session endpoints: login, logout and the caller's own profile."""

import logging
from fastapi import APIRouter, Depends, Response

from dashboard.api.dependencies import get_current_user, get_session_claims, get_store
from dashboard.config.settings import settings
from dashboard.models.domain import UserPublic, UserRecord
from dashboard.models.errors import ErrorResponseWrapper
from dashboard.models.requests import LoginRequest, StatusUpdate
from dashboard.models.responses import LoginResponse, MessageResponse
from dashboard.services.auth import issue_token, revoke_session, verify_password
from dashboard.services.exceptions import AuthenticationError
from dashboard.services.permissions import get_user_permissions
from dashboard.services.store import MemoryStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponseWrapper, "description": "Invalid credentials"}},
    summary="Log in",
)
async def login(
    credentials: LoginRequest,
    response: Response,
    db: MemoryStore = Depends(get_store),
) -> LoginResponse:
    """
    Check credentials and open a session.

    The session token is returned in the body and set as an HttpOnly cookie;
    the user is marked online.
    """
    user = db.get_user_by_username(credentials.username)
    if user is None or not verify_password(credentials.password, user.password_hash):
        logger.warning(f"[AUTH] Failed login for {credentials.username!r}")
        raise AuthenticationError("Invalid username or password")

    token, _ = issue_token(user.id)
    user = db.update_user_status(user.id, "online")
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.env == "production",
    )
    logger.info(f"[AUTH] {user.username} logged in")

    return LoginResponse(
        user=user.public(),
        token=token,
        permissions=[p.value for p in get_user_permissions(user.role)],
    )


@router.post("/logout", response_model=MessageResponse, summary="Log out")
async def logout(
    response: Response,
    claims: dict = Depends(get_session_claims),
    user: UserRecord = Depends(get_current_user),
    db: MemoryStore = Depends(get_store),
) -> MessageResponse:
    revoke_session(claims)
    db.update_user_status(user.id, "offline")
    response.delete_cookie(settings.session_cookie_name)
    logger.info(f"[AUTH] {user.username} logged out")
    return MessageResponse(message="Logged out successfully")


@router.get("/users/me", response_model=UserPublic, summary="Current user")
async def me(user: UserRecord = Depends(get_current_user)) -> UserPublic:
    return user.public()


@router.post("/users/status", response_model=UserPublic, summary="Set presence status")
async def set_status(
    update: StatusUpdate,
    user: UserRecord = Depends(get_current_user),
    db: MemoryStore = Depends(get_store),
) -> UserPublic:
    return db.update_user_status(user.id, update.status).public()
