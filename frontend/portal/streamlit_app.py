"""
Portal -- Main Streamlit Application

Entry point for the Streamlit frontend.  Gates every page behind the
session controller and routes between home, profile and the
registration-success page.

    streamlit run frontend/portal/streamlit_app.py
"""

import os
import sys

# Ensure the frontend/ directory is on sys.path so absolute imports like
# ``from portal.auth.middleware import ...`` work when Streamlit runs this
# file as __main__.
_frontend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _frontend_dir not in sys.path:
    sys.path.insert(0, _frontend_dir)

import streamlit as st

# ── Page config (must be the first Streamlit call) ────────────────────────────
st.set_page_config(page_title="Portal", page_icon=":key:", layout="centered")

from portal.auth.middleware import current_route, get_controller, require_auth
from portal.auth.state import PROFILE_ROUTE, SUCCESS_ROUTE
from portal.components.sidebar import render_sidebar
from portal.views.account import (
    render_home_page,
    render_profile_page,
    render_success_page,
)

route = current_route()

# ── Registration success (no session is created by registering) ──────────────
if route == SUCCESS_ROUTE and not get_controller().is_authenticated:
    render_success_page()
    st.stop()

# ── Authentication gate ──────────────────────────────────────────────────────
user = require_auth()
if user is None:
    st.stop()

# ── Sidebar ──────────────────────────────────────────────────────────────────
render_sidebar(user)

# ── Main content area ────────────────────────────────────────────────────────
if route == PROFILE_ROUTE:
    render_profile_page(user)
else:
    render_home_page(user)
