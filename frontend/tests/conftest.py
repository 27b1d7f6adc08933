"""
Shared pytest fixtures for the portal client test suite.

``FakeIssuer`` stands in for ``IssuerClient`` with an in-memory credential
store, so controller tests run without HTTP.
"""

import pytest

from portal.auth.controller import SessionController
from portal.auth.errors import (
    DuplicateIdentifier,
    InvalidCredentials,
    InvalidInput,
    InvalidToken,
)
from portal.auth.storage import MemoryTokenStore


class FakeIssuer:
    """In-memory issuer with the same surface as ``IssuerClient``."""

    def __init__(self):
        self.users = {}   # username -> (password, identity)
        self.tokens = {}  # token -> username
        self.resolved = []
        self.login_error = None
        self.resolve_error = None
        self.on_resolve = None

    def register(self, user_data):
        username = user_data.get("username")
        password = user_data.get("password")
        if not username or not password:
            raise InvalidInput("Username and password are required")
        if username in self.users:
            raise DuplicateIdentifier(f"A user named '{username}' already exists.")
        identity = {
            "id": username,
            "username": username,
            "display_name": user_data.get("display_name"),
        }
        self.users[username] = (password, identity)

    def login(self, username, password):
        if self.login_error is not None:
            raise self.login_error
        entry = self.users.get(username)
        if entry is None or entry[0] != password:
            raise InvalidCredentials("Invalid credentials")
        token = f"token-{len(self.tokens) + 1}"
        self.tokens[token] = username
        return token

    def resolve_identity(self, token):
        self.resolved.append(token)
        if self.on_resolve is not None:
            self.on_resolve()
        if self.resolve_error is not None:
            raise self.resolve_error
        if token not in self.tokens:
            raise InvalidToken()
        return dict(self.users[self.tokens[token]][1])


@pytest.fixture()
def issuer():
    return FakeIssuer()


@pytest.fixture()
def store():
    return MemoryTokenStore()


@pytest.fixture()
def routes():
    """Every route the controller asked the UI to navigate to."""
    return []


@pytest.fixture()
def states():
    """Every state the controller passed through, in order."""
    return []


@pytest.fixture()
def controller(issuer, store, routes, states):
    return SessionController(
        issuer,
        store,
        navigate=routes.append,
        on_change=states.append,
    )
