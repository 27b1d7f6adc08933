"""Error kinds raised by the Session Issuer.

Each error carries the HTTP status it maps to and a human-readable message.
Routers let them propagate; ``issuer.main`` renders them as ``{"message": ...}``.
"""


class IssuerError(Exception):
    """Base class for rejected issuer operations."""

    status_code = 400
    default_message = "Request rejected"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCredentials(IssuerError):
    """Unknown username or wrong password (never distinguished)."""

    status_code = 401
    default_message = "Invalid credentials"


class DuplicateIdentifier(IssuerError):
    status_code = 409
    default_message = "Username already exists"


class InvalidInput(IssuerError):
    status_code = 400
    default_message = "Invalid input"


class InvalidToken(IssuerError):
    """Token absent, malformed, expired, or bound to a dead session."""

    status_code = 401
    default_message = "Invalid or expired token"
