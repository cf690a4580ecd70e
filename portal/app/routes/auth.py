"""Admin sign-in routes"""

from typing import Optional

from fastapi import APIRouter, Depends

from ..dependencies import get_bearer_token, get_session_store, require_admin
from ..exceptions import InvalidInputError, InvalidSessionError
from ..models.schemas import LoginRequest, LoginResponse, MessageResponse, SessionInfo
from ..services.session_service import AdminSession, SessionStore, validate_login_form

router = APIRouter(prefix="/api/v1/auth", tags=["Admin Auth"])


@router.post("/login", response_model=LoginResponse)
async def login(credentials: LoginRequest, sessions: SessionStore = Depends(get_session_store)):
    errors = validate_login_form(credentials.email, credentials.password)
    if errors:
        raise InvalidInputError("Please correct the highlighted fields", errors)

    session = sessions.sign_in(credentials.email, credentials.password)
    if session is None:
        raise InvalidSessionError("Login failed. Please check your email and password.")

    return LoginResponse(
        success=True,
        token=session.token,
        email=session.email,
        expiresAt=session.expires_at,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: Optional[str] = Depends(get_bearer_token),
    sessions: SessionStore = Depends(get_session_store),
):
    sessions.sign_out(token)
    return MessageResponse(success=True, message="Logged out")


@router.get("/session", response_model=SessionInfo)
async def current_session(session: AdminSession = Depends(require_admin)):
    return SessionInfo(authenticated=True, email=session.email, expiresAt=session.expires_at)
