"""
Session Controller -- the single owner of client-visible session state.

The controller holds exactly one ``SessionState`` and changes it only through
its transition methods (``bootstrap``, ``login``, ``logout``, ``register``).
Collaborators are injected:

- an issuer client (``IssuerClient`` or anything with ``login``,
  ``register`` and ``resolve_identity``),
- a ``TokenStore`` holding the persisted bearer token,
- an optional ``navigate(route)`` callback for the UI layer,
- an optional ``on_change(state)`` listener called after every transition.

Flow
----
bootstrap:  slot empty -> LOGGED_OUT
            slot set   -> VERIFYING -> LOGGED_IN | LOGGED_OUT (slot cleared)
login:      rejected   -> LOGIN_ERROR, slot untouched, message returned
            accepted   -> token stored -> VERIFYING -> LOGGED_IN (navigate
                          to /profile) | LOGGED_OUT (slot cleared)
logout:     slot cleared -> LOGGED_OUT, navigate to /
register:   rejected   -> REGISTER_ERROR, message returned
            accepted   -> navigate to /success; never logs in
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, Optional

from .errors import InvalidToken, SessionError, TransportFailure
from .state import (
    HOME_ROUTE,
    PROFILE_ROUTE,
    SUCCESS_ROUTE,
    SessionState,
    SessionStatus,
)
from .storage import TokenStore

logger = logging.getLogger(__name__)


def _no_navigation(route: str) -> None:
    pass


class SessionController:
    """Own the session state machine for one client."""

    def __init__(
        self,
        issuer,
        store: TokenStore,
        navigate: Optional[Callable[[str], None]] = None,
        on_change: Optional[Callable[[SessionState], None]] = None,
    ) -> None:
        self._issuer = issuer
        self._store = store
        self._navigate = navigate or _no_navigation
        self._on_change = on_change
        self._state = SessionState.unknown()
        self._bootstrapped = False
        self._in_flight = False
        # Operations run one at a time; Streamlit may call in from several
        # script threads for the same browser session.
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> Optional[Mapping[str, Any]]:
        return self._state.user

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def is_ready(self) -> bool:
        """False until bootstrap has produced an authoritative state."""
        return self._state.is_settled

    @property
    def in_flight(self) -> bool:
        """
        True while an operation is talking to the issuer.

        Visible to ``on_change`` listeners and to other threads; a single
        Streamlit script run never renders while it is set.
        """
        return self._in_flight

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def bootstrap(self) -> SessionState:
        """
        Rebuild session state from the persisted token alone.

        Runs its checks once; later calls return the current state untouched.
        Failures are silent: the slot is cleared and the state is LOGGED_OUT.
        """
        with self._operation():
            if self._bootstrapped:
                return self._state
            self._bootstrapped = True

            if self._store.get() is None:
                self._set_state(SessionState.logged_out())
                return self._state

            try:
                self._verify_stored_token()
            except SessionError as exc:
                logger.info("Discarding persisted session: %s", exc.message)
                self._discard_session()
            except Exception:
                logger.exception("Unexpected error verifying persisted session")
                self._discard_session()
            return self._state

    def login(self, username: str, password: str) -> Optional[str]:
        """
        Log in with *username* / *password*.

        Returns ``None`` on success, otherwise a human-readable error message.
        """
        with self._operation():
            try:
                token = self._issuer.login(username, password)
            except SessionError as exc:
                if not self._state.is_authenticated:
                    self._set_state(SessionState.login_error(exc.message))
                return exc.message

            self._store.set(token)
            try:
                self._verify_stored_token()
            except SessionError as exc:
                logger.warning("Issued token could not be verified: %s", exc.message)
                self._discard_session()
                return exc.message
            except Exception:
                logger.exception("Unexpected error verifying issued token")
                self._discard_session()
                return TransportFailure().message

            self._navigate(PROFILE_ROUTE)
            return None

    def logout(self) -> None:
        """Forget the session. Always succeeds, also when already logged out."""
        with self._operation():
            self._store.clear()
            self._set_state(SessionState.logged_out())
            self._navigate(HOME_ROUTE)

    def register(self, user_data: Mapping[str, Any]) -> Optional[str]:
        """
        Create an account without logging in.

        Returns ``None`` on success, otherwise a human-readable error message.
        """
        with self._operation():
            try:
                self._issuer.register(user_data)
            except SessionError as exc:
                if not self._state.is_authenticated:
                    self._set_state(SessionState.register_error(exc.message))
                return exc.message

            if self._state.status in (SessionStatus.LOGIN_ERROR, SessionStatus.REGISTER_ERROR):
                self._set_state(SessionState.logged_out())
            self._navigate(SUCCESS_ROUTE)
            return None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self) -> Iterator[None]:
        with self._lock:
            self._in_flight = True
            try:
                yield
            finally:
                self._in_flight = False

    def _verify_stored_token(self) -> None:
        """Resolve the token currently in the slot; LOGGED_IN on success."""
        token = self._store.get()
        if not token:
            raise InvalidToken()

        self._set_state(SessionState.verifying())
        user = self._issuer.resolve_identity(token)
        self._set_state(SessionState.logged_in(user))

    def _discard_session(self) -> None:
        self._store.clear()
        self._set_state(SessionState.logged_out())

    def _set_state(self, state: SessionState) -> None:
        previous = self._state
        self._state = state
        logger.debug("Session state %s -> %s", previous.status.value, state.status.value)
        if self._on_change is not None:
            self._on_change(state)
