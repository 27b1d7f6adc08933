"""
Portal page bodies for the three routes: home, profile, registration success.
"""

import streamlit as st

from ..auth.middleware import navigate
from ..auth.state import HOME_ROUTE


def render_home_page(user) -> None:
    st.title(f"Welcome, {user.get('display_name') or user.get('username')}")
    st.write("You are signed in. Use the sidebar to view your profile or log out.")


def render_profile_page(user) -> None:
    """Show the read-only identity returned by the issuer."""
    st.title("Profile")

    col_label, col_value = st.columns([1, 3])
    for label, key in (
        ("Username", "username"),
        ("Display name", "display_name"),
        ("Email", "email"),
        ("User ID", "id"),
        ("Member since", "created_at"),
    ):
        col_label.markdown(f"**{label}**")
        col_value.write(user.get(key) or "—")


def render_success_page() -> None:
    st.title("Account created")
    st.success("Your account is ready. Sign in with your new credentials.")
    if st.button("Go to sign in", key="btn_success_home"):
        navigate(HOME_ROUTE)
