"""HTTP contract tests for /login, /register, /user/me and /health."""

import pytest

from issuer.db.models import AuditLog


def _register(client, username="alice", password="pw1", **extra):
    return client.post("/register", json={"username": username, "password": password, **extra})


def _login(client, username="alice", password="pw1"):
    return client.post("/login", json={"username": username, "password": password})


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


def test_register_returns_empty_body(client):
    r = _register(client, display_name="Alice", email="alice@example.com")
    assert r.status_code == 201
    assert r.json() == {}


def test_register_issues_no_token(client):
    r = _register(client)
    assert "token" not in r.json()


def test_register_duplicate(client):
    assert _register(client).status_code == 201
    r = _register(client, password="other")
    assert r.status_code == 409
    assert "already exists" in r.json()["message"]


def test_register_missing_password(client):
    r = client.post("/register", json={"username": "alice"})
    assert r.status_code == 400
    assert r.json()["message"].startswith("Invalid input")


def test_register_short_password(client):
    r = _register(client, password="ab")
    assert r.status_code == 400
    assert "at least 3" in r.json()["message"]


def test_register_password_over_bcrypt_limit(client):
    r = _register(client, password="x" * 100)
    assert r.status_code == 400
    assert "72 bytes" in r.json()["message"]


def test_register_password_limit_counts_utf8_bytes(client):
    r = _register(client, password="\u00e9" * 40)
    assert r.status_code == 400
    assert "72 bytes" in r.json()["message"]


def test_register_accepts_identifier_secret_spelling(client):
    r = client.post("/register", json={"identifier": "alice", "secret": "pw1"})
    assert r.status_code == 201
    assert _login(client).status_code == 200


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


def test_login_success(client):
    _register(client)
    r = _login(client)
    assert r.status_code == 200
    assert set(r.json()) == {"token"}


@pytest.mark.parametrize("username,password", [
    ("alice", "wrong"),
    ("nobody", "pw1"),
])
def test_login_invalid_credentials(client, username, password):
    _register(client)
    r = _login(client, username, password)
    assert r.status_code == 401
    assert r.json() == {"message": "Invalid credentials"}


def test_login_overlong_password_is_invalid_credentials(client):
    _register(client)
    r = _login(client, "alice", "y" * 100)
    assert r.status_code == 401
    assert r.json() == {"message": "Invalid credentials"}


def test_failed_login_is_audited(client, db_session):
    _login(client, "nobody", "pw1")
    row = db_session.query(AuditLog).one()
    assert row.action_type == "user.login_failed"
    assert row.action_details == {"username": "nobody"}


def test_login_malformed_body(client):
    r = client.post("/login", content=b"not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert "message" in r.json()


# ═══════════════════════════════════════════════════════════
# Identity
# ═══════════════════════════════════════════════════════════


def test_me_with_token(client):
    _register(client, display_name="Alice")
    token = _login(client).json()["token"]

    r = client.get("/user/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["username"] == "alice"
    assert user["display_name"] == "Alice"
    assert "password_hash" not in user
    assert user["id"]


def test_me_is_repeatable(client):
    _register(client)
    token = _login(client).json()["token"]
    headers = {"Authorization": f"Bearer {token}"}

    first = client.get("/user/me", headers=headers).json()
    second = client.get("/user/me", headers=headers).json()
    assert first == second


def test_me_without_token(client):
    r = client.get("/user/me")
    assert r.status_code == 401
    assert "message" in r.json()
    assert r.headers["www-authenticate"] == "Bearer"


def test_me_with_garbage_token(client):
    r = client.get("/user/me", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# Health
# ═══════════════════════════════════════════════════════════


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "database": True}
