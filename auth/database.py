"""Database operations for authentication.

The auth service depends only on the narrow UserStore contract below.
AuthDatabase implements it over PostgresClient. Uniqueness of username,
email and refresh_token is enforced by the table itself, so two concurrent
registrations for the same key cannot both succeed.
"""

import logging
from typing import Any, Protocol
from uuid import UUID

import psycopg2

from clients.postgres_client import PostgresClient
from auth.exceptions import StorageError
from auth.types import NewUser, User

logger = logging.getLogger(__name__)

AUTH_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    username text NOT NULL UNIQUE,
    email text NOT NULL UNIQUE,
    password_hash text NOT NULL,
    salt text NOT NULL,
    refresh_token text UNIQUE,
    birth_date date,
    created_at timestamptz NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS security_events (
    id bigserial PRIMARY KEY,
    event_type text NOT NULL,
    email text,
    user_id uuid,
    ip_address inet,
    user_agent text,
    details jsonb,
    created_at timestamptz NOT NULL DEFAULT now()
);

CREATE INDEX IF NOT EXISTS security_events_created_at_idx
    ON security_events (created_at);
"""

_USER_COLUMNS = "id, username, email, password_hash, salt, refresh_token, birth_date, created_at"


class UserStore(Protocol):
    """Persistence contract the auth service depends on.

    Every method raises StorageError on backend failure.
    """

    def get_user_by_id(self, user_id: UUID) -> User | None: ...

    def get_user_by_email(self, email: str) -> User | None: ...

    def get_user_by_username(self, username: str) -> User | None: ...

    def get_user_by_refresh_token(self, token: str) -> User | None: ...

    def create_user(self, new_user: NewUser) -> User | None:
        """Insert user. Returns None if username or email is already taken."""
        ...

    def update_refresh_token(
        self, user_id: UUID, token: str, expected_token: str | None = None
    ) -> User | None:
        """Atomically replace the user's refresh token, return the updated row.

        With expected_token, only replace while it is the stored token.
        """
        ...


def _row_to_user(row: dict[str, Any]) -> User:
    return User(
        id=UUID(row["id"]) if isinstance(row["id"], str) else row["id"],
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        salt=row["salt"],
        refresh_token=row["refresh_token"],
        birth_date=row["birth_date"],
        created_at=row["created_at"],
    )


class AuthDatabase:
    """Postgres-backed UserStore."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def ensure_schema(self) -> None:
        """Create auth tables if missing."""
        self._run(self._db.execute, "ensure_schema", AUTH_SCHEMA)

    def _run(self, method, operation: str, query: str, params: tuple | None = None):
        """Run a client call, translating driver errors into StorageError."""
        try:
            return method(query, params)
        except psycopg2.Error as e:
            logger.error(f"User store {operation} failed: {type(e).__name__}: {e}")
            raise StorageError(f"User store {operation} failed", cause=e) from e

    def _find_one(self, operation: str, where: str, value: Any) -> User | None:
        row = self._run(
            self._db.execute_single,
            operation,
            f"SELECT {_USER_COLUMNS} FROM users WHERE {where} = %s",
            (value,),
        )
        if row is None:
            return None
        return _row_to_user(row)

    def get_user_by_id(self, user_id: UUID) -> User | None:
        """Find user by ID."""
        return self._find_one("get_user_by_id", "id", str(user_id))

    def get_user_by_email(self, email: str) -> User | None:
        """Find user by email (exact match, case-sensitive)."""
        return self._find_one("get_user_by_email", "email", email)

    def get_user_by_username(self, username: str) -> User | None:
        """Find user by username (exact match, case-sensitive)."""
        return self._find_one("get_user_by_username", "username", username)

    def get_user_by_refresh_token(self, token: str) -> User | None:
        """Find the user currently holding this refresh token."""
        if not token:
            return None
        return self._find_one("get_user_by_refresh_token", "refresh_token", token)

    def create_user(self, new_user: NewUser) -> User | None:
        """Insert new user.

        Returns:
            The created User, or None if username/email collided with an
            existing row (including one committed by a concurrent request).
        """
        rows = self._run(
            self._db.execute_returning,
            "create_user",
            f"""INSERT INTO users (username, email, password_hash, salt, birth_date)
               VALUES (%s, %s, %s, %s, %s)
               ON CONFLICT DO NOTHING
               RETURNING {_USER_COLUMNS}""",
            (
                new_user.username,
                new_user.email,
                new_user.password_hash,
                new_user.salt,
                new_user.birth_date,
            ),
        )
        if not rows:
            return None
        return _row_to_user(rows[0])

    def update_refresh_token(
        self, user_id: UUID, token: str, expected_token: str | None = None
    ) -> User | None:
        """Replace refresh token in a single statement, return updated user.

        Args:
            expected_token: If given, the update is a compare-and-swap and
                only applies while this is still the stored token.

        Returns:
            Updated User, or None if the user no longer exists or the
            expected token was already replaced.
        """
        if expected_token is None:
            query = f"""UPDATE users SET refresh_token = %s
               WHERE id = %s
               RETURNING {_USER_COLUMNS}"""
            params = (token, str(user_id))
        else:
            query = f"""UPDATE users SET refresh_token = %s
               WHERE id = %s AND refresh_token = %s
               RETURNING {_USER_COLUMNS}"""
            params = (token, str(user_id), expected_token)

        rows = self._run(
            self._db.execute_returning,
            "update_refresh_token",
            query,
            params,
        )
        if not rows:
            return None
        return _row_to_user(rows[0])
