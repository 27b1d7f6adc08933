"""
FastAPI authentication dependencies.

Privileged routes declare ``Depends(get_current_user)`` to require a valid
``Authorization: Bearer <token>`` header.
"""

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from issuer.config import Settings, get_settings
from issuer.db.connection import get_db_session
from issuer.db.models import User
from issuer.issuer import resolve_identity

_bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer_scheme),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db_session),
) -> User:
    """
    Validate a Bearer JWT token and return the authenticated ``User``.

    Raises:
        InvalidToken (401) if the token is missing, expired, or invalid.
    """
    token = credentials.credentials if credentials is not None else None
    return resolve_identity(db, token, settings)
