"""Domain errors raised by the service layer.

Each error carries the HTTP status it maps to so the API layer can render it
without knowing about individual error types.
"""

from typing import Optional


class ShortenerError(Exception):
    status_code = 400
    message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class InvalidUrlError(ShortenerError):
    status_code = 400
    message = "Invalid URL format"


class CodeTakenError(ShortenerError):
    status_code = 409
    message = "This short code is already in use"


class ExhaustedError(ShortenerError):
    status_code = 503
    message = "Could not generate a unique short code"


class NotFoundError(ShortenerError):
    status_code = 404
    message = "Link not found"


class NotFoundOrForbiddenError(NotFoundError):
    # Same response whether the id is missing or owned by someone else
    message = "Link not found or not authorized"


class LinkExpiredError(ShortenerError):
    status_code = 410
    message = "Link expired"


class InvalidEmailError(ShortenerError):
    status_code = 400
    message = "Please enter a valid email address"


class WeakPasswordError(ShortenerError):
    status_code = 400
    message = "Password does not meet the requirements"


class EmailTakenError(ShortenerError):
    status_code = 409
    message = "This email address is already registered"


class InvalidCredentialsError(ShortenerError):
    status_code = 401
    message = "Invalid email or password"


class InvalidTokenError(ShortenerError):
    status_code = 401
    message = "Invalid or expired token"


class RateLimitedError(ShortenerError):
    status_code = 429
    message = "Rate limit exceeded"
