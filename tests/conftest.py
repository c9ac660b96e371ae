"""Shared test fixtures for auth service test suite."""

import os
from pathlib import Path
from unittest.mock import Mock
from uuid import UUID, uuid4

import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

from auth.config import AuthConfig
from auth.exceptions import StorageError
from auth.hashing import CredentialHasher
from auth.security_logger import SecurityLogger
from auth.service import AuthService
from auth.tokens import TokenIssuer
from auth.types import NewUser, User
from utils.durations import now_utc


TEST_SIGNING_SECRET = "test-signing-secret-0123456789abcdef"


# =============================================================================
# IN-MEMORY USER STORE
# =============================================================================


class InMemoryUserStore:
    """UserStore fake with the same uniqueness rules as the users table.

    Returns copies so callers can never mutate stored rows in place.
    Set `fail_with` to make every call raise StorageError.
    """

    def __init__(self):
        self.users: dict[UUID, User] = {}
        self.fail_with: Exception | None = None
        self.calls: list[str] = []

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise StorageError(f"User store {name} failed", cause=self.fail_with)

    def _find(self, predicate) -> User | None:
        for user in self.users.values():
            if predicate(user):
                return user.model_copy()
        return None

    def get_user_by_id(self, user_id: UUID) -> User | None:
        self._check("get_user_by_id")
        user = self.users.get(user_id)
        return user.model_copy() if user else None

    def get_user_by_email(self, email: str) -> User | None:
        self._check("get_user_by_email")
        return self._find(lambda u: u.email == email)

    def get_user_by_username(self, username: str) -> User | None:
        self._check("get_user_by_username")
        return self._find(lambda u: u.username == username)

    def get_user_by_refresh_token(self, token: str) -> User | None:
        self._check("get_user_by_refresh_token")
        if not token:
            return None
        return self._find(lambda u: u.refresh_token == token)

    def create_user(self, new_user: NewUser) -> User | None:
        self._check("create_user")
        for user in self.users.values():
            if user.email == new_user.email or user.username == new_user.username:
                return None
        user = User(
            id=uuid4(),
            username=new_user.username,
            email=new_user.email,
            password_hash=new_user.password_hash,
            salt=new_user.salt,
            refresh_token=None,
            birth_date=new_user.birth_date,
            created_at=now_utc(),
        )
        self.users[user.id] = user
        return user.model_copy()

    def update_refresh_token(
        self, user_id: UUID, token: str, expected_token: str | None = None
    ) -> User | None:
        self._check("update_refresh_token")
        user = self.users.get(user_id)
        if user is None:
            return None
        if expected_token is not None and user.refresh_token != expected_token:
            return None
        updated = user.model_copy(update={"refresh_token": token})
        self.users[user_id] = updated
        return updated.model_copy()


# =============================================================================
# AUTH FIXTURES
# =============================================================================


@pytest.fixture
def config() -> AuthConfig:
    """Test config with cheap hashing so the suite stays fast."""
    return AuthConfig(
        signing_secret=TEST_SIGNING_SECRET,
        access_token_ttl="15m",
        hash_iterations=1000,
    )


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def hasher(config) -> CredentialHasher:
    return CredentialHasher(config)


@pytest.fixture
def token_issuer(config) -> TokenIssuer:
    return TokenIssuer(config)


@pytest.fixture
def mock_security_logger():
    """Mock security logger - audit rows are covered by test_security_logger."""
    return Mock(spec=SecurityLogger)


@pytest.fixture
def auth_service(user_store, hasher, token_issuer, mock_security_logger) -> AuthService:
    return AuthService(
        user_store=user_store,
        hasher=hasher,
        token_issuer=token_issuer,
        security_logger=mock_security_logger,
    )


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="session")
def db():
    """Session-scoped PostgresClient against TEST_DATABASE_URL.

    Tests using it are skipped when no test database is configured.
    """
    database_url = os.getenv("TEST_DATABASE_URL")
    if not database_url:
        pytest.skip("TEST_DATABASE_URL not set")

    from auth.database import AuthDatabase
    from clients.postgres_client import PostgresClient

    client = PostgresClient(database_url)
    AuthDatabase(client).ensure_schema()
    yield client
    client.close()


@pytest.fixture
def clean_db(db):
    """Empty auth tables before and after each test."""
    db.execute("TRUNCATE users, security_events")
    yield db
    db.execute("TRUNCATE users, security_events")
