"""
Portal Streamlit Authentication Middleware

Provides ``require_auth()`` -- call it at the top of every protected page
to gate access behind login.  Also exposes ``logout()`` for the sidebar and
``navigate()`` / ``current_route()`` for the page router.

Each browser session owns one ``SessionController`` stored in
``st.session_state``; the bearer token lives in a browser cookie managed by
``extra-streamlit-components`` (or a local file when ``TOKEN_STORE=file``).
"""

import logging
import time
from typing import Any, Mapping, Optional

import streamlit as st
from extra_streamlit_components import CookieManager

from ..config import get_settings
from .controller import SessionController
from .issuer_client import IssuerClient
from .state import HOME_ROUTE, SessionStatus
from .storage import CookieTokenStore, FileTokenStore, TokenStore

logger = logging.getLogger(__name__)

_CONTROLLER_KEY = "session_controller"
_STORE_KEY = "token_store"
_SLOT_WAITS_KEY = "token_slot_waits"
_ROUTE_KEY = "route"


# ── Cookie manager singleton ─────────────────────────────────────────────────


def get_cookie_manager() -> CookieManager:
    """
    Return a singleton ``CookieManager`` instance.

    The manager is stored in ``st.session_state`` so that only one instance
    exists per Streamlit browser session, preventing duplicate component
    registration errors.
    """
    if "cookie_manager" not in st.session_state:
        st.session_state["cookie_manager"] = CookieManager()
    return st.session_state["cookie_manager"]


def _build_token_store() -> TokenStore:
    settings = get_settings()
    if settings.TOKEN_STORE == "file":
        return FileTokenStore(settings.TOKEN_FILE)
    return CookieTokenStore(
        get_cookie_manager(),
        cookie_name=settings.SESSION_COOKIE_NAME,
        max_age_days=settings.SESSION_COOKIE_DAYS,
    )


def get_token_store() -> TokenStore:
    """Return this browser session's token slot, creating it once."""
    if _STORE_KEY not in st.session_state:
        st.session_state[_STORE_KEY] = _build_token_store()
    return st.session_state[_STORE_KEY]


def _token_slot_loaded() -> bool:
    """
    Refresh the token slot for this script run.

    False while the browser has not reported its cookies yet, for at most
    ``COOKIE_READ_ATTEMPTS`` runs; after that an empty report is taken to
    mean there are no cookies.
    """
    if get_token_store().sync():
        return True
    waits = st.session_state.get(_SLOT_WAITS_KEY, 0)
    if waits >= get_settings().COOKIE_READ_ATTEMPTS:
        return True
    st.session_state[_SLOT_WAITS_KEY] = waits + 1
    return False


# ── Navigation ────────────────────────────────────────────────────────────────


def current_route() -> str:
    return st.session_state.get(_ROUTE_KEY, HOME_ROUTE)


def navigate(route: str) -> None:
    """Switch the visible page and rerun the script."""
    st.session_state[_ROUTE_KEY] = route
    st.rerun()


# ── Controller per browser session ───────────────────────────────────────────


def get_controller() -> SessionController:
    """Return this browser session's ``SessionController``, creating it once."""
    if _CONTROLLER_KEY not in st.session_state:
        settings = get_settings()
        issuer = IssuerClient(
            settings.BACKEND_URL,
            timeout=settings.REQUEST_TIMEOUT_SECS,
        )
        st.session_state[_CONTROLLER_KEY] = SessionController(
            issuer,
            get_token_store(),
            navigate=navigate,
        )
    return st.session_state[_CONTROLLER_KEY]


# ── Main auth gate ────────────────────────────────────────────────────────────


def require_auth() -> Optional[Mapping[str, Any]]:
    """
    Enforce authentication on the current page.

    Call this at the very top of a Streamlit page script.  It returns the
    authenticated identity if a valid session exists, or ``None`` after
    rendering login / register forms so the caller can ``st.stop()``.

    The first call in a browser session runs ``bootstrap()``, which verifies
    any token left over from a previous visit.  Bootstrapping waits until the
    browser has reported its cookies, otherwise a stored token would be missed.
    """
    controller = get_controller()
    slot_loaded = _token_slot_loaded()
    if not controller.is_ready:
        if not slot_loaded:
            with st.spinner("Checking your session..."):
                time.sleep(get_settings().COOKIE_READ_WAIT_SECS)
            st.rerun()
        with st.spinner("Checking your session..."):
            controller.bootstrap()

    if controller.is_authenticated:
        return controller.user

    _show_auth_forms()
    return None


# ── Auth forms ────────────────────────────────────────────────────────────────


def _show_auth_forms() -> None:
    """
    Render Login and Register tabs.

    On success the controller navigates (``/profile`` after login,
    ``/success`` after registration), which reruns the page.
    """
    controller = get_controller()
    state = controller.state

    login_tab, register_tab = st.tabs(["Login", "Register"])

    # ── Login tab ─────────────────────────────────────────────────────────
    with login_tab:
        with st.form("login_form", clear_on_submit=False):
            st.subheader("Sign in to your account")
            login_username = st.text_input("Username", key="login_username")
            login_password = st.text_input(
                "Password", type="password", key="login_password"
            )
            login_submitted = st.form_submit_button(
                "Sign in", use_container_width=True
            )

        if login_submitted:
            if not login_username or not login_password:
                st.error("Please enter both username and password.")
                return
            error = controller.login(login_username, login_password)
            if error:
                st.error(error)
        elif state.status is SessionStatus.LOGIN_ERROR:
            st.error(state.message)

    # ── Register tab ──────────────────────────────────────────────────────
    with register_tab:
        with st.form("register_form", clear_on_submit=False):
            st.subheader("Create a new account")
            reg_username = st.text_input("Username", key="reg_username")
            reg_display_name = st.text_input("Display name", key="reg_display_name")
            reg_email = st.text_input("Email (optional)", key="reg_email")
            reg_password = st.text_input(
                "Password", type="password", key="reg_password"
            )
            reg_confirm = st.text_input(
                "Confirm password", type="password", key="reg_confirm"
            )
            register_submitted = st.form_submit_button(
                "Create account", use_container_width=True
            )

        if register_submitted:
            if not reg_username or not reg_password:
                st.error("Username and password are required.")
                return
            if reg_password != reg_confirm:
                st.error("Passwords do not match.")
                return

            user_data = {"username": reg_username, "password": reg_password}
            if reg_display_name:
                user_data["display_name"] = reg_display_name
            if reg_email:
                user_data["email"] = reg_email

            error = controller.register(user_data)
            if error:
                st.error(error)
        elif state.status is SessionStatus.REGISTER_ERROR:
            st.error(state.message)


# ── Logout ────────────────────────────────────────────────────────────────────


def logout() -> None:
    """
    Clear the persisted token and return to the home page.

    Safe to call even if the user is not currently authenticated.
    """
    get_controller().logout()
