"""
Portal Sidebar UI Component

Renders the application sidebar with user info, a backend connection test
and the logout button.
"""

import requests
import streamlit as st

from ..auth.middleware import logout, navigate
from ..auth.state import HOME_ROUTE, PROFILE_ROUTE
from ..config import get_settings


def render_sidebar(user) -> None:
    """
    Render the full application sidebar.

    Parameters
    ----------
    user : Mapping
        The identity returned by ``require_auth()``.
    """
    settings = get_settings()

    # ── User Info ─────────────────────────────────────────────────────────
    st.sidebar.markdown(f"**{user.get('display_name') or user.get('username')}**")
    if user.get("email"):
        st.sidebar.caption(user["email"])

    if st.sidebar.button("Home", key="btn_nav_home", use_container_width=True):
        navigate(HOME_ROUTE)
    if st.sidebar.button("Profile", key="btn_nav_profile", use_container_width=True):
        navigate(PROFILE_ROUTE)

    # ── Backend Connection ────────────────────────────────────────────────
    st.sidebar.markdown("---")
    st.sidebar.subheader("Backend Connection")
    st.sidebar.text(f"URL: {settings.BACKEND_URL}")

    if st.sidebar.button("Test Connection", key="btn_test_connection"):
        try:
            resp = requests.get(
                f"{settings.BACKEND_URL.rstrip('/')}/health",
                timeout=settings.REQUEST_TIMEOUT_SECS,
            )
            if resp.status_code == 200:
                data = resp.json()
                st.session_state["backend_connected"] = True
                st.sidebar.success(
                    f"Connected  --  database: {'up' if data.get('database') else 'down'}"
                )
            else:
                st.session_state["backend_connected"] = False
                st.sidebar.error(f"Connection failed (HTTP {resp.status_code})")
        except requests.exceptions.RequestException as exc:
            st.session_state["backend_connected"] = False
            st.sidebar.error(f"Connection error: {exc}")

    # ── Logout ────────────────────────────────────────────────────────────
    st.sidebar.markdown("---")
    if st.sidebar.button("Log out", key="btn_logout", use_container_width=True):
        logout()
