"""Security event logging for auth audit trail.

Append-only log to the security_events table. The audit trail is
best-effort: a failed insert is reported through the application log and
never undoes or blocks the auth operation that produced it.
"""

import logging
from enum import Enum
from typing import Any
from uuid import UUID

import psycopg2
from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from utils.durations import now_utc

logger = logging.getLogger(__name__)


class SecurityEvent(Enum):
    """Auth security event types."""

    USER_REGISTERED = "user_registered"
    REGISTRATION_CONFLICT = "registration_conflict"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    TOKEN_REFRESHED = "token_refreshed"
    REFRESH_FAILED = "refresh_failed"


class SecurityLogger:
    """Append-only security event logger."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def log(
        self,
        event: SecurityEvent,
        email: str | None = None,
        user_id: UUID | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Log security event to database."""
        logger.info(
            f"security event {event.value}: user_id={user_id} ip={ip_address}"
            + (f" details={details}" if details else "")
        )
        try:
            self._db.execute_returning(
                """INSERT INTO security_events
                   (event_type, email, user_id, ip_address, user_agent, details, created_at)
                   VALUES (%s, %s, %s, %s, %s, %s, %s)
                   RETURNING id""",
                (
                    event.value,
                    email,
                    str(user_id) if user_id else None,
                    ip_address,
                    user_agent,
                    Json(details) if details else None,
                    now_utc(),
                ),
            )
        except psycopg2.Error:
            logger.exception(f"Failed to record security event {event.value}")
