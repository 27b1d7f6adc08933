"""
Health-check endpoint: no authentication required.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from issuer.db.connection import get_db_session
from issuer.schemas import HealthResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(db: Session = Depends(get_db_session)) -> HealthResponse:
    """Report service liveness and whether the credential store answers."""
    try:
        db.execute(text("SELECT 1"))
        database = True
    except SQLAlchemyError as exc:
        logger.warning("Database check failed: %s", exc)
        database = False

    return HealthResponse(status="ok", database=database)
