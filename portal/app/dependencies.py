from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .services.applicant_service import ApplicantService
from .services.session_service import AdminSession, SessionStore

bearer_scheme = HTTPBearer(auto_error=False)


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_applicant_service(request: Request) -> ApplicantService:
    return request.app.state.applicant_service


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


def require_admin(
    token: Optional[str] = Depends(get_bearer_token),
    sessions: SessionStore = Depends(get_session_store),
) -> AdminSession:
    return sessions.require(token)
