"""
Portal Authentication Package

Public API:
    SessionController -- owns the client session state machine
    SessionState      -- immutable state value (status, user, message)
    IssuerClient      -- HTTP client for the Session Issuer
    TokenStore        -- persisted token slot interface and implementations

The Streamlit gate (``require_auth``, ``logout``) lives in
``portal.auth.middleware``.
"""

from .controller import SessionController  # noqa: F401
from .errors import (  # noqa: F401
    DuplicateIdentifier,
    InvalidCredentials,
    InvalidInput,
    InvalidToken,
    SessionError,
    TransportFailure,
)
from .issuer_client import IssuerClient  # noqa: F401
from .state import SessionState, SessionStatus  # noqa: F401
from .storage import (  # noqa: F401
    CookieTokenStore,
    FileTokenStore,
    MemoryTokenStore,
    TokenStore,
)
