import re
import secrets
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from pydantic import BaseModel

from ..config import settings
from ..exceptions import InvalidSessionError
from ..utils.logging import logger

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
MIN_PASSWORD_LENGTH = 6


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AdminSession(BaseModel):
    token: str
    email: str
    created_at: datetime
    expires_at: datetime


def validate_login_form(email: Optional[str], password: Optional[str]) -> Dict[str, str]:
    """Return field -> message for every problem with the login form."""
    errors: Dict[str, str] = {}

    if not email:
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.search(email):
        errors["email"] = "Email is invalid"

    if not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"

    return errors


class SessionStore:
    """In-process admin sessions with a fixed time-to-live."""

    def __init__(
        self,
        ttl_minutes: Optional[int] = None,
        admin_email: Optional[str] = None,
        admin_password: Optional[str] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.ttl = timedelta(minutes=ttl_minutes or settings.SESSION_TTL_MINUTES)
        self.admin_email = admin_email if admin_email is not None else settings.ADMIN_EMAIL
        self.admin_password = admin_password if admin_password is not None else settings.ADMIN_PASSWORD
        self._clock = clock
        self._sessions: Dict[str, AdminSession] = {}
        self._lock = threading.Lock()

    def sign_in(self, email: str, password: str) -> Optional[AdminSession]:
        """Open a session when the credentials match the configured admin."""
        if not self.admin_password:
            logger.log_error("admin_login_not_configured")
            return None

        email_matches = constant_time_equal(email.strip().lower(), self.admin_email.strip().lower())
        password_matches = constant_time_equal(password, self.admin_password)
        if not (email_matches and password_matches):
            logger.log_step("admin_login_failed", {"email": email})
            return None

        now = self._clock()
        session = AdminSession(
            token=secrets.token_urlsafe(32),
            email=self.admin_email,
            created_at=now,
            expires_at=now + self.ttl,
        )
        with self._lock:
            self._purge_expired(now)
            self._sessions[session.token] = session
        logger.log_step("admin_login_succeeded", {
            "email": session.email,
            "expires_at": session.expires_at.isoformat()
        })
        return session

    def _purge_expired(self, now: datetime) -> None:
        """Drop every expired session. Caller holds the lock."""
        expired = [token for token, session in self._sessions.items() if session.expires_at <= now]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.log_step("admin_sessions_purged", {"count": len(expired)})

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get(self, token: Optional[str]) -> Optional[AdminSession]:
        """Return the live session for a token; expired sessions are dropped."""
        if not token:
            return None
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.expires_at <= self._clock():
                del self._sessions[token]
                logger.log_step("admin_session_expired", {"email": session.email})
                return None
            return session

    def require(self, token: Optional[str]) -> AdminSession:
        session = self.get(token)
        if session is None:
            raise InvalidSessionError()
        return session

    def sign_out(self, token: Optional[str]) -> bool:
        if not token:
            return False
        with self._lock:
            session = self._sessions.pop(token, None)
        if session is not None:
            logger.log_step("admin_logged_out", {"email": session.email})
        return session is not None


def constant_time_equal(left: str, right: str) -> bool:
    return secrets.compare_digest(left.encode("utf-8"), right.encode("utf-8"))
