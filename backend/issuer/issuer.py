"""
Session Issuer operations: login, register, resolve_identity.

These compose the low-level helpers in ``issuer.auth_utils`` into the three
operations the HTTP layer exposes, raising ``issuer.errors`` kinds on
rejection.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from issuer.auth_utils import (
    MAX_PASSWORD_BYTES,
    UsernameTakenError,
    authenticate_user,
    create_jwt,
    create_session,
    decode_jwt,
    password_too_long,
    register_user,
    verify_session,
)
from issuer.db.audit import log_login, log_login_failed, log_register
from issuer.db.models import User
from issuer.errors import (
    DuplicateIdentifier,
    InvalidCredentials,
    InvalidInput,
    InvalidToken,
)

logger = logging.getLogger(__name__)


def login(
    db: Session,
    username: str,
    password: str,
    settings,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> str:
    """
    Exchange a username/password pair for a fresh bearer token.

    Raises:
        InvalidCredentials: unknown username or wrong password. The two cases
            produce the same error so callers cannot tell which usernames exist.
    """
    user = authenticate_user(db, username, password)
    if user is None:
        logger.info("Rejected login for %r from %s", username, ip_address or "unknown")
        log_login_failed(db, username=username, ip=ip_address)
        raise InvalidCredentials()

    session_obj = create_session(
        db,
        user.id,
        lifetime=timedelta(days=settings.JWT_EXPIRY_DAYS),
        ip_address=ip_address,
        user_agent=user_agent,
    )
    log_login(db, user_id=user.id, ip=ip_address)
    logger.info("User %s logged in", user.id)
    return create_jwt(session_obj.session_token, str(user.id), settings)


def register(
    db: Session,
    username: str | None,
    password: str | None,
    display_name: str | None = None,
    email: str | None = None,
    password_min_length: int = 1,
    ip_address: str | None = None,
) -> User:
    """
    Create a new credential/identity pair. Does not log the user in.

    Raises:
        InvalidInput: username or password missing or blank, or password
            shorter than *password_min_length* or longer than
            ``MAX_PASSWORD_BYTES`` once UTF-8 encoded.
        DuplicateIdentifier: the username is taken (case-insensitive).
    """
    if not username or not username.strip():
        raise InvalidInput("Username is required")
    if not password:
        raise InvalidInput("Password is required")
    if len(password) < password_min_length:
        raise InvalidInput(
            f"Password must be at least {password_min_length} characters"
        )
    if password_too_long(password):
        raise InvalidInput(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

    try:
        user = register_user(db, username, password, display_name, email)
    except UsernameTakenError as exc:
        raise DuplicateIdentifier(str(exc)) from exc

    log_register(db, user_id=user.id, ip=ip_address)
    logger.info("Registered user %s", user.id)
    return user


def resolve_identity(db: Session, token: str | None, settings) -> User:
    """
    Resolve a bearer token to the user it was issued for.

    Pure lookup: no expiry extension, no activity tracking.

    Raises:
        InvalidToken: absent, malformed, badly signed or expired token, or a
            token whose session was revoked, expired, or belongs to an
            inactive user.
    """
    if not token:
        raise InvalidToken("Missing authorization header")

    payload = decode_jwt(token, settings)
    if payload is None:
        raise InvalidToken()

    session_token = payload.get("sub")
    if not session_token:
        raise InvalidToken("Invalid token payload")

    user = verify_session(db, session_token)
    if user is None:
        logger.warning("Token references an unknown or expired session")
        raise InvalidToken("Session expired or revoked")

    return user
