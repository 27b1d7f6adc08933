"""
Session state values owned by ``SessionController``.

A ``SessionState`` is immutable; every transition produces a new one.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


# Routes emitted through the controller's navigate callback
HOME_ROUTE = "/"
PROFILE_ROUTE = "/profile"
SUCCESS_ROUTE = "/success"


class SessionStatus(str, Enum):
    UNKNOWN = "unknown"          # before bootstrap() has run
    LOGGED_OUT = "logged_out"
    VERIFYING = "verifying"
    LOGGED_IN = "logged_in"
    LOGIN_ERROR = "login_error"
    REGISTER_ERROR = "register_error"


_UNAUTHENTICATED = frozenset({
    SessionStatus.LOGGED_OUT,
    SessionStatus.LOGIN_ERROR,
    SessionStatus.REGISTER_ERROR,
})


def freeze_identity(user: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return a read-only copy of an identity received from the issuer."""
    return MappingProxyType(dict(user))


@dataclass(frozen=True)
class SessionState:
    status: SessionStatus
    user: Optional[Mapping[str, Any]] = field(default=None)
    message: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.LOGGED_IN

    @property
    def is_logged_out(self) -> bool:
        """True for LOGGED_OUT and the two error refinements of it."""
        return self.status in _UNAUTHENTICATED

    @property
    def is_settled(self) -> bool:
        """False while the state is not yet authoritative."""
        return self.status not in (SessionStatus.UNKNOWN, SessionStatus.VERIFYING)

    # ── Constructors ─────────────────────────────────────────────────────

    @classmethod
    def unknown(cls) -> "SessionState":
        return cls(SessionStatus.UNKNOWN)

    @classmethod
    def logged_out(cls) -> "SessionState":
        return cls(SessionStatus.LOGGED_OUT)

    @classmethod
    def verifying(cls) -> "SessionState":
        return cls(SessionStatus.VERIFYING)

    @classmethod
    def logged_in(cls, user: Mapping[str, Any]) -> "SessionState":
        return cls(SessionStatus.LOGGED_IN, user=freeze_identity(user))

    @classmethod
    def login_error(cls, message: str) -> "SessionState":
        return cls(SessionStatus.LOGIN_ERROR, message=message)

    @classmethod
    def register_error(cls, message: str) -> "SessionState":
        return cls(SessionStatus.REGISTER_ERROR, message=message)
