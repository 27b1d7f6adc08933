"""
FastAPI application assembly for the Session Issuer.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from issuer.config import get_settings
from issuer.db.connection import get_engine
from issuer.db.models import Base
from issuer.errors import IssuerError

# Import routers
from issuer.routers import auth, health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic."""
    settings = get_settings()
    app.state.settings = settings

    if settings.CREATE_TABLES_ON_STARTUP:
        Base.metadata.create_all(bind=get_engine())
        logger.info("Ensured credential store tables exist")

    logger.info("Session Issuer starting up")
    logger.info("  FRONTEND_URL     = %s", settings.FRONTEND_URL)
    logger.info("  JWT_ALGORITHM    = %s", settings.JWT_ALGORITHM)
    logger.info("  JWT_EXPIRY_DAYS  = %d", settings.JWT_EXPIRY_DAYS)
    logger.info("  LOGIN_RATE_LIMIT = %d / %d s",
                settings.LOGIN_RATE_LIMIT, settings.RATE_LIMIT_WINDOW_SECS)

    yield  # Application is running

    logger.info("Session Issuer shutting down")


# ── Error rendering ──────────────────────────────────────────────────────────
# Every failure leaves the service as {"message": "..."}.

async def _issuer_error_handler(request: Request, exc: IssuerError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message},
        headers=headers,
    )


async def _http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())[1:])
        problems.append(f"{field}: {error['msg']}" if field else error["msg"])
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid input: " + "; ".join(problems)},
    )


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Session Issuer",
        description="Credential validation and bearer-token sessions",
        version="0.1.0",
        lifespan=lifespan,
    )

    # ---- CORS ----
    # Only the configured frontend origin may call the issuer from a browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type"],
    )

    # ---- Error handlers ----
    app.add_exception_handler(IssuerError, _issuer_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    # ---- Routers ----
    app.include_router(health.router)
    app.include_router(auth.router)

    return app


# Module-level app instance for uvicorn
app = create_app()
