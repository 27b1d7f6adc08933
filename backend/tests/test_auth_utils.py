"""Tests for auth utility functions (password hashing, JWT, user management)."""

from datetime import datetime, timedelta, timezone

import pytest

from issuer import auth_utils
from issuer.auth_utils import (
    MAX_PASSWORD_BYTES,
    UsernameTakenError,
    authenticate_user,
    create_jwt,
    create_session,
    decode_jwt,
    hash_password,
    register_user,
    verify_password,
    verify_session,
)


class TestPasswordHashing:
    def test_hash_and_verify_correct_password(self):
        password = "MySecurePassword123!"
        hashed = hash_password(password)
        assert verify_password(password, hashed) is True

    def test_verify_wrong_password(self):
        hashed = hash_password("correct-password")
        assert verify_password("wrong-password", hashed) is False

    def test_hash_is_not_plaintext(self):
        password = "test123"
        hashed = hash_password(password)
        assert hashed != password
        assert hashed.startswith("$2")  # bcrypt prefix

    def test_hash_rejects_password_over_bcrypt_limit(self):
        with pytest.raises(ValueError, match="72 bytes"):
            hash_password("x" * (MAX_PASSWORD_BYTES + 1))

    def test_hash_accepts_password_at_bcrypt_limit(self):
        password = "x" * MAX_PASSWORD_BYTES
        assert verify_password(password, hash_password(password)) is True

    def test_verify_overlong_password_is_false(self):
        hashed = hash_password("correct-password")
        assert verify_password("y" * 100, hashed) is False

    def test_limit_counts_utf8_bytes(self):
        hashed = hash_password("correct-password")
        # 40 characters, 80 bytes
        assert verify_password("\u00e9" * 40, hashed) is False


class TestJWT:
    def test_create_and_decode_jwt(self, settings):
        token = create_jwt("session-token-abc", "user-id-123", settings)
        payload = decode_jwt(token, settings)
        assert payload is not None
        assert payload["sub"] == "session-token-abc"
        assert payload["user_id"] == "user-id-123"

    def test_decode_invalid_token(self, settings):
        assert decode_jwt("invalid.token.here", settings) is None

    def test_decode_garbage(self, settings):
        assert decode_jwt("not a jwt at all", settings) is None

    def test_decode_wrong_secret(self, settings):
        token = create_jwt("sess", "user", settings)

        class WrongSettings:
            JWT_SECRET_KEY = "wrong-secret"
            JWT_ALGORITHM = "HS256"

        assert decode_jwt(token, WrongSettings()) is None

    def test_decode_expired(self, settings):
        class ExpiredSettings:
            JWT_SECRET_KEY = settings.JWT_SECRET_KEY
            JWT_ALGORITHM = settings.JWT_ALGORITHM
            JWT_EXPIRY_DAYS = -1

        token = create_jwt("sess", "user", ExpiredSettings())
        assert decode_jwt(token, settings) is None


class TestUserRegistration:
    def test_register_creates_user(self, db_session):
        user = register_user(db_session, "newbie", "Password123!", "New User")
        assert user.username_lower == "newbie"
        assert user.display_name == "New User"
        assert user.id is not None

    def test_register_duplicate_username_raises(self, db_session, test_user):
        with pytest.raises(ValueError, match="already exists"):
            register_user(db_session, "tester", "Pass123!", "Duplicate")

    def test_register_case_insensitive_username(self, db_session, test_user):
        with pytest.raises(ValueError):
            register_user(db_session, "TESTER", "Pass123!", "Dup")

    def test_register_raises_username_taken(self, db_session, test_user):
        with pytest.raises(UsernameTakenError):
            register_user(db_session, "tester", "Pass123!")

    def test_register_race_on_unique_username(self, db_session, test_user, monkeypatch):
        # Another request inserted "tester" after our lookup ran.
        monkeypatch.setattr(auth_utils, "find_user", lambda db, username: None)

        with pytest.raises(UsernameTakenError, match="already exists"):
            register_user(db_session, "Tester", "Pass123!")


class TestAuthentication:
    def test_authenticate_valid_credentials(self, db_session, test_user):
        user = authenticate_user(db_session, "tester", "TestPass123!")
        assert user is not None
        assert user.id == test_user.id
        assert user.last_login_at is not None

    def test_authenticate_wrong_password(self, db_session, test_user):
        assert authenticate_user(db_session, "tester", "WrongPassword") is None

    def test_authenticate_nonexistent_user(self, db_session):
        assert authenticate_user(db_session, "nobody", "Pass123!") is None

    def test_authenticate_inactive_user(self, db_session, test_user):
        test_user.is_active = False
        db_session.flush()
        assert authenticate_user(db_session, "tester", "TestPass123!") is None


class TestSessionManagement:
    def test_create_and_verify_session(self, db_session, test_user):
        session_obj = create_session(
            db_session, test_user.id, timedelta(days=7), ip_address="127.0.0.1"
        )
        assert len(session_obj.session_token) == 64

        user = verify_session(db_session, session_obj.session_token)
        assert user is not None
        assert user.id == test_user.id

    def test_verify_nonexistent_session(self, db_session):
        assert verify_session(db_session, "nonexistent-token") is None

    def test_verify_revoked_session(self, db_session, test_user):
        session_obj = create_session(db_session, test_user.id, timedelta(days=7))
        session_obj.is_revoked = True
        db_session.flush()

        assert verify_session(db_session, session_obj.session_token) is None

    def test_verify_expired_session(self, db_session, test_user):
        session_obj = create_session(db_session, test_user.id, timedelta(days=-1))
        assert verify_session(db_session, session_obj.session_token) is None

    def test_verify_does_not_touch_session(self, db_session, test_user):
        session_obj = create_session(db_session, test_user.id, timedelta(days=7))
        db_session.commit()

        verify_session(db_session, session_obj.session_token)
        assert not db_session.dirty
