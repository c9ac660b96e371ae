"""Typed exceptions for auth failures."""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""


class AlreadyExistsError(AuthError):
    """Registration conflict: email or username is already taken."""


class InvalidCredentialsError(AuthError):
    """
    Email/password pair did not authenticate.

    Raised identically for unknown emails and wrong passwords so callers
    cannot tell which half was wrong.
    """


class InvalidTokenError(AuthError):
    """
    Token is invalid, expired, or has been superseded.

    Used for both refresh tokens and access tokens.
    """


class StorageError(AuthError):
    """User store operation failed.

    Carries the backend exception as `cause` for logging. The message is safe
    to show; the cause is not.
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)


class ConfigurationError(AuthError):
    """Startup misconfiguration (missing signing secret, bad token lifetime)."""
