"""Failures reported by the issuer client.

``TransportFailure`` covers everything that is not a deliberate rejection by
the issuer: connection errors, timeouts, unparseable or incomplete bodies and
5xx responses.
"""


class SessionError(Exception):
    default_message = "Request failed"

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        self.message = message or self.default_message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidCredentials(SessionError):
    default_message = "Invalid credentials"


class DuplicateIdentifier(SessionError):
    default_message = "Username already exists"


class InvalidInput(SessionError):
    default_message = "Invalid input"


class InvalidToken(SessionError):
    default_message = "Session expired"


class TransportFailure(SessionError):
    default_message = "Could not reach the server. Please try again."
