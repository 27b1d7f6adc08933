"""
HTTP client for the Session Issuer.

Wraps the three wire operations (``POST /login``, ``POST /register``,
``GET /user/me``) and turns every outcome into either a plain return value or
one of the ``portal.auth.errors`` kinds.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Type

import requests

from .errors import (
    DuplicateIdentifier,
    InvalidCredentials,
    InvalidInput,
    InvalidToken,
    SessionError,
    TransportFailure,
)

logger = logging.getLogger(__name__)

_LOGIN_ERRORS: Dict[int, Type[SessionError]] = {
    400: InvalidInput,
    401: InvalidCredentials,
    422: InvalidInput,
}

_REGISTER_ERRORS: Dict[int, Type[SessionError]] = {
    400: InvalidInput,
    409: DuplicateIdentifier,
    422: InvalidInput,
}


class IssuerClient:
    """
    Talk to the Session Issuer over HTTP.

    Parameters
    ----------
    base_url : str
        Issuer root URL, e.g. ``"http://localhost:8000"``.
    timeout : float
        Per-request timeout in seconds.  A hung request surfaces as
        ``TransportFailure`` instead of blocking forever.
    http : requests.Session, optional
        Session used to send requests.  Anything with a ``requests``-style
        ``request(method, url, **kwargs)`` method works (FastAPI's
        ``TestClient`` included).
    """

    def __init__(self, base_url: str, timeout: float = 10.0, http=None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = http if http is not None else requests.Session()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def login(self, username: str, password: str) -> str:
        """Exchange credentials for a bearer token."""
        body = self._request(
            "POST",
            "/login",
            json={"username": username, "password": password},
            errors=_LOGIN_ERRORS,
        )
        token = body.get("token")
        if not isinstance(token, str) or not token:
            raise TransportFailure("Malformed login response")
        return token

    def register(self, user_data: Mapping[str, Any]) -> None:
        """Create an account. Never returns a token."""
        self._request("POST", "/register", json=dict(user_data), errors=_REGISTER_ERRORS)

    def resolve_identity(self, token: str) -> Dict[str, Any]:
        """Return the identity bound to *token*."""
        body = self._request(
            "GET",
            "/user/me",
            headers={"Authorization": f"Bearer {token}"},
            errors={},
            rejected=InvalidToken,
        )
        user = body.get("user")
        if not isinstance(user, dict):
            raise TransportFailure("Malformed identity response")
        return user

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        errors: Mapping[int, Type[SessionError]],
        rejected: Type[SessionError] = SessionError,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)

        # ValueError covers UnicodeEncodeError for a header that cannot be
        # encoded, e.g. a corrupted token outside latin-1.
        try:
            response = self._http.request(method, url, timeout=self.timeout, **kwargs)
        except (requests.exceptions.RequestException, ValueError) as exc:
            logger.warning("Request to issuer failed (%s %s): %s", method, path, exc)
            raise TransportFailure() from exc

        status = response.status_code
        if status >= 500:
            raise TransportFailure(status_code=status)

        body = self._json(response)

        if 200 <= status < 300:
            if body is None:
                raise TransportFailure("Malformed response from server", status)
            return body

        message = body.get("message") if body else None
        kind = errors.get(status, rejected)
        raise kind(message if isinstance(message, str) else None, status)

    @staticmethod
    def _json(response) -> Optional[Dict[str, Any]]:
        try:
            body = response.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else None
