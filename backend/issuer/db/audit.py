"""
Session Issuer Audit Logging Utilities

Convenience helpers that create ``AuditLog`` rows for credential-store
events: registration, successful login and rejected login.
"""

import uuid
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from issuer.db.models import AuditLog


# ── Core helper ──────────────────────────────────────────────────────────────

def log_action(
    db_session: Session,
    user_id: Optional[uuid.UUID],
    action_type: str,
    action_details: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
) -> AuditLog:
    """
    Create an ``AuditLog`` entry and add it to the given *db_session*.

    The caller is responsible for committing the session.
    """
    entry = AuditLog(
        user_id=user_id,
        action_type=action_type,
        action_details=action_details,
        ip_address=ip_address,
    )
    db_session.add(entry)
    return entry


# ── Convenience wrappers ─────────────────────────────────────────────────────

def log_login(db: Session, user_id: uuid.UUID, ip: Optional[str] = None) -> AuditLog:
    return log_action(db, user_id=user_id, action_type="user.login", ip_address=ip)


def log_login_failed(db: Session, username: str, ip: Optional[str] = None) -> AuditLog:
    return log_action(db, user_id=None, action_type="user.login_failed",
                      action_details={"username": username}, ip_address=ip)


def log_register(db: Session, user_id: uuid.UUID, ip: Optional[str] = None) -> AuditLog:
    return log_action(db, user_id=user_id, action_type="user.register", ip_address=ip)
