"""Exception types for the transfer shortener."""

from typing import Optional


class ShortenerError(Exception):
    """Base class for all transfer shortener errors."""


class InvalidTargetError(ShortenerError, ValueError):
    """Target URL is empty or not an absolute URL."""


class EmptyTokenError(ShortenerError, ValueError):
    """Token lookup was attempted with an empty token."""


class TokenNotFoundError(ShortenerError, LookupError):
    """No short link is stored under the token."""

    def __init__(self, token: str):
        super().__init__(f"Token not found: {token}")
        self.token = token


class DuplicateTokenError(ShortenerError):
    """The store already holds a short link with this token."""

    def __init__(self, token: str):
        super().__init__(f"Token already exists: {token}")
        self.token = token


class TokenCollisionError(ShortenerError):
    """Could not mint an unused token within the allowed retries."""


class PersistenceError(ShortenerError):
    """Token store read or write failed."""


class BackendError(ShortenerError):
    """Base class for failures talking to the transfer backend."""


class BackendRejectedError(BackendError):
    """Backend answered an upload with a non-success status."""

    def __init__(self, status_code: int, body: str = ""):
        super().__init__(f"Backend returned {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class BackendUnavailableError(BackendError):
    """Connection to the backend could not be established or was lost."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause
