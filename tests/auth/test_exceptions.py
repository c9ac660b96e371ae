"""Tests for auth/exceptions.py - Typed exceptions for auth failures."""

import pytest

from auth.exceptions import (
    AuthError,
    AlreadyExistsError,
    InvalidCredentialsError,
    InvalidTokenError,
    StorageError,
    ConfigurationError,
)


class TestExceptionInheritance:
    """All auth exceptions should inherit from AuthError."""

    @pytest.mark.parametrize(
        "exc_class",
        [
            AlreadyExistsError,
            InvalidCredentialsError,
            InvalidTokenError,
            StorageError,
            ConfigurationError,
        ],
    )
    def test_inherits(self, exc_class):
        assert issubclass(exc_class, AuthError)


class TestStorageError:
    """StorageError should carry the backend cause separately."""

    def test_stores_cause(self):
        cause = ConnectionError("server closed the connection")
        err = StorageError("User store get_user_by_email failed", cause=cause)
        assert err.cause is cause

    def test_message_excludes_cause(self):
        """Safe message never includes backend details."""
        err = StorageError("User store create_user failed", cause=RuntimeError("pg_hba.conf"))
        assert "pg_hba" not in str(err)

    def test_cause_optional(self):
        assert StorageError("failed").cause is None
