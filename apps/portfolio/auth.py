"""
Admin authentication gate

States: anonymous -> authenticating -> authenticated, and back to anonymous
on logout. A successful login persists the admin record id as the session
token; at startup that token is checked against the admins collection.

The same token is the bearer credential HTTP clients present on every
admin request; `admin_for_token` validates it against the store each time.

The one authorization rule is role == "admin".
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from apps.portfolio.notices import ERROR, SUCCESS, Notice, NoticeBoard
from apps.portfolio.passwords import verify_password
from apps.portfolio.store import ADMINS

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
INVALID_CREDENTIALS = "Invalid credentials"
LOGIN_FAILED = "Login failed"
LOGIN_SUCCESSFUL = "Login successful!"


class AuthState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class LoginOutcome:
    """Result of one credential check."""
    notice: Notice
    admin: Optional[dict] = None

    @property
    def ok(self) -> bool:
        return self.admin is not None

    @property
    def token(self) -> Optional[str]:
        return self.admin["id"] if self.admin else None


def session_payload(admin: Optional[dict], state: Optional[AuthState] = None) -> dict:
    if state is None:
        state = AuthState.AUTHENTICATED if admin else AuthState.ANONYMOUS
    authenticated = state == AuthState.AUTHENTICATED
    return {
        "state": state.value,
        "is_authenticated": authenticated,
        "is_admin": authenticated,
        "email": admin.get("email") if admin else None,
    }


class AdminAuthGate:
    """
    Admin session of the process (the persisted token slot) plus the
    per-request checks used by the HTTP layer.
    """

    def __init__(self, store, session_slot, notices: NoticeBoard):
        self.store = store
        self.session_slot = session_slot
        self.notices = notices
        self.state = AuthState.ANONYMOUS
        self.email: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated

    def _reset(self) -> None:
        self.state = AuthState.ANONYMOUS
        self.email = None

    def admin_for_token(self, token: Optional[str]) -> Optional[dict]:
        """
        The admin record a session token belongs to, or None.

        A missing record, a non-admin role and a store failure all give None.
        """
        if not token:
            return None
        try:
            record = self.store.find_one(ADMINS, "id", token)
        except Exception as e:
            logger.error(f"Admin session check failed: {type(e).__name__}: {e}", exc_info=True)
            return None
        if record and record.get("role") == ADMIN_ROLE:
            return record
        return None

    def check_credentials(self, email: str, password: str) -> LoginOutcome:
        """
        Verify an email and password without touching the process session.

        Unknown email, wrong password and non-admin role all give the same
        "Invalid credentials" notice.
        """
        try:
            record = self.store.find_one(ADMINS, "email", email)
        except Exception as e:
            logger.error(f"Admin login failed: {type(e).__name__}: {e}", exc_info=True)
            return LoginOutcome(Notice(ERROR, LOGIN_FAILED))

        if (
            not record
            or record.get("role") != ADMIN_ROLE
            or not verify_password(password, record.get("password_hash") or "")
        ):
            logger.info(f"Rejected admin login for {email}")
            return LoginOutcome(Notice(ERROR, INVALID_CREDENTIALS))

        return LoginOutcome(Notice(SUCCESS, LOGIN_SUCCESSFUL), record)

    def hydrate(self) -> bool:
        """
        Restore the session from the persisted token.

        A token that no longer matches an admin record is discarded.
        Returns True if the session is authenticated afterwards.
        """
        token = self.session_slot.read()
        if not token:
            return False

        record = self.admin_for_token(token)
        if record:
            self.state = AuthState.AUTHENTICATED
            self.email = record.get("email")
            logger.info(f"Restored admin session for {self.email}")
            return True

        logger.info("Discarding stale admin session token")
        self.session_slot.clear()
        self._reset()
        return False

    def sign_in(self, email: str, password: str) -> LoginOutcome:
        """Check credentials, persist the token and post the outcome notice."""
        self.state = AuthState.AUTHENTICATING
        self.email = None

        outcome = self.check_credentials(email, password)
        if outcome.ok:
            try:
                self.session_slot.write(outcome.token)
            except OSError as e:
                logger.error(f"Persisting admin session failed: {e}", exc_info=True)
                outcome = LoginOutcome(Notice(ERROR, LOGIN_FAILED))

        if outcome.ok:
            self.state = AuthState.AUTHENTICATED
            self.email = outcome.admin.get("email")
            logger.info(f"Admin {self.email} logged in")
        else:
            self._reset()
        self.notices.post(outcome.notice)
        return outcome

    def login(self, email: str, password: str) -> bool:
        return self.sign_in(email, password).ok

    def logout(self) -> bool:
        try:
            self.session_slot.clear()
        except OSError as e:
            logger.error(f"Clearing admin session failed: {e}", exc_info=True)
        if self.email:
            logger.info(f"Admin {self.email} logged out")
        self._reset()
        self.notices.success("Logged out successfully")
        return True

    def as_dict(self) -> dict:
        return session_payload({"email": self.email} if self.email else None, self.state)
