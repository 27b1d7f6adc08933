"""
Session Issuer Authentication Utilities

Core functions for password hashing (bcrypt), JWT token management,
user registration, authentication, and database session lifecycle.
"""

import secrets
from datetime import datetime, timedelta, timezone
from uuid import UUID

import bcrypt
import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from issuer.db.models import User, Session as SessionModel


# ── Password helpers ─────────────────────────────────────────────────────────

# bcrypt refuses input longer than this.
MAX_PASSWORD_BYTES = 72


class UsernameTakenError(ValueError):
    """Raised by ``register_user`` when the username already exists."""


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(password: str) -> str:
    """
    Hash a plain-text password using bcrypt with 12 rounds.

    Raises ValueError for passwords longer than ``MAX_PASSWORD_BYTES``.
    """
    if password_too_long(password):
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a plain-text password against a stored bcrypt hash."""
    if password_too_long(password):
        # No stored hash can match: hash_password never accepts such input.
        return False
    return bcrypt.checkpw(
        password.encode("utf-8"),
        password_hash.encode("utf-8"),
    )


# ── JWT helpers ──────────────────────────────────────────────────────────────

def create_jwt(session_token: str, user_id: str, settings) -> str:
    """Create a signed JWT embedding the session token and user identity."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": session_token,
        "user_id": str(user_id),
        "exp": now + timedelta(days=settings.JWT_EXPIRY_DAYS),
        "iat": now,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_jwt(token: str, settings) -> dict | None:
    """
    Decode and validate a JWT.

    Returns the payload dictionary on success, or ``None`` if the token is
    expired, malformed, or has an invalid signature.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.InvalidTokenError:
        return None


# ── User registration & authentication ───────────────────────────────────────

def find_user(db: Session, username: str) -> User | None:
    """Look up a user by case-insensitive username."""
    username_lower = username.strip().lower()
    return db.query(User).filter(User.username_lower == username_lower).first()


def register_user(
    db: Session,
    username: str,
    password: str,
    display_name: str | None = None,
    email: str | None = None,
) -> User:
    """
    Register a new user account.

    Raises UsernameTakenError if the username is taken, including when a
    concurrent registration inserts it between the lookup and the flush.
    """
    taken = UsernameTakenError(f"A user named '{username}' already exists.")
    if find_user(db, username) is not None:
        raise taken

    user = User(
        username=username.strip(),
        password_hash=hash_password(password),
        display_name=display_name.strip() if display_name else None,
        email=email.strip() if email else None,
    )
    db.add(user)
    try:
        db.flush()  # Populate user.id before returning
    except IntegrityError as exc:
        # username_lower is the only unique column a new row can collide on
        db.rollback()
        raise taken from exc
    return user


def authenticate_user(db: Session, username: str, password: str) -> User | None:
    """
    Validate a username/password pair and return the corresponding user.

    On success the user's ``last_login_at`` timestamp is updated.
    Returns ``None`` if the user is unknown, inactive, or the password is wrong.
    """
    user = find_user(db, username)
    if user is None or not user.is_active:
        return None

    if not verify_password(password, user.password_hash):
        return None

    user.last_login_at = datetime.now(timezone.utc)
    db.flush()
    return user


# ── Database session management ──────────────────────────────────────────────

def create_session(
    db: Session,
    user_id: UUID,
    lifetime: timedelta,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SessionModel:
    """
    Create a new authenticated session row.

    Generates a cryptographically random 64-character hex token and stores
    it in the ``sessions`` table, expiring after *lifetime*.
    """
    token = secrets.token_hex(32)  # 64 hex characters
    now = datetime.now(timezone.utc)

    session_obj = SessionModel(
        user_id=user_id,
        session_token=token,
        ip_address=ip_address,
        user_agent=user_agent,
        expires_at=now + lifetime,
    )
    db.add(session_obj)
    db.flush()
    return session_obj


def verify_session(db: Session, session_token: str) -> User | None:
    """
    Look up an active (non-revoked, non-expired) session by its token.

    Read-only: the session row is not touched. Returns the associated active
    ``User``, or ``None``.
    """
    now = datetime.now(timezone.utc)

    session_obj = (
        db.query(SessionModel)
        .filter(
            SessionModel.session_token == session_token,
            SessionModel.is_revoked.is_(False),
            SessionModel.expires_at > now,
        )
        .first()
    )
    if session_obj is None:
        return None

    return (
        db.query(User)
        .filter(User.id == session_obj.user_id, User.is_active.is_(True))
        .first()
    )
