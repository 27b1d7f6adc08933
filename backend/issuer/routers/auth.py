"""
Credential endpoints: login, register, get current user.

Rate-limited per client IP: login (LOGIN_RATE_LIMIT), register
(REGISTER_RATE_LIMIT) within RATE_LIMIT_WINDOW_SECS.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from issuer import issuer
from issuer.auth import get_current_user
from issuer.config import Settings, get_settings
from issuer.db.connection import get_db_session
from issuer.db.models import User
from issuer.errors import InvalidCredentials
from issuer.rate_limit import (
    RateLimiter,
    get_client_ip,
    get_login_limiter,
    get_register_limiter,
)
from issuer.schemas import (
    ErrorResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(
    tags=["auth"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
    },
)


def to_user_response(user: User) -> UserResponse:
    """Project a ``User`` row onto the read-only identity sent to clients."""
    return UserResponse(
        id=str(user.id),
        username=user.username,
        display_name=user.display_name,
        email=user.email,
        created_at=user.created_at.isoformat() if user.created_at else None,
    )


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    request: Request,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
    limiter: RateLimiter = Depends(get_login_limiter),
) -> TokenResponse:
    """Authenticate with username/password and return a bearer token."""
    ip = get_client_ip(request, trust_proxy=settings.TRUST_PROXY_HEADERS)
    limiter.check(ip)

    try:
        token = issuer.login(
            db,
            body.username,
            body.password,
            settings,
            ip_address=ip,
            user_agent=request.headers.get("user-agent"),
        )
    except InvalidCredentials:
        db.commit()  # keep the login_failed audit row
        raise
    return TokenResponse(token=token)


@router.post(
    "/register",
    status_code=201,
    responses={409: {"model": ErrorResponse}},
)
def register(
    body: RegisterRequest,
    request: Request,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
    limiter: RateLimiter = Depends(get_register_limiter),
) -> dict:
    """Create a new user account. No token is issued."""
    ip = get_client_ip(request, trust_proxy=settings.TRUST_PROXY_HEADERS)
    limiter.check(ip)

    issuer.register(
        db,
        body.username,
        body.password,
        display_name=body.display_name,
        email=body.email,
        password_min_length=settings.PASSWORD_MIN_LENGTH,
        ip_address=ip,
    )
    return {}


@router.get("/user/me", response_model=MeResponse)
def get_me(user: User = Depends(get_current_user)) -> MeResponse:
    """Return the identity bound to the presented bearer token."""
    return MeResponse(user=to_user_response(user))
