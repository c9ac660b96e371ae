"""Application factory: wires config, storage and auth routes explicitly."""

import logging

from fastapi import FastAPI

from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from auth.api import create_auth_router
from auth.config import AuthConfig, load_auth_config
from auth.database import AuthDatabase
from auth.hashing import CredentialHasher
from auth.security_logger import SecurityLogger
from auth.security_middleware import AuthMiddleware
from auth.service import AuthService
from auth.tokens import TokenIssuer
from clients.postgres_client import PostgresClient
from clients.vault_client import get_database_url

logger = logging.getLogger(__name__)


def create_app(
    config: AuthConfig | None = None,
    postgres: PostgresClient | None = None,
) -> FastAPI:
    """Build the FastAPI app.

    Configuration and database are resolved here, at startup, so a missing
    signing secret or unreachable Vault stops the process before it serves
    a single request.
    """
    config = config or load_auth_config()
    postgres = postgres or PostgresClient(get_database_url())

    auth_db = AuthDatabase(postgres)
    auth_db.ensure_schema()

    token_issuer = TokenIssuer(config)
    auth_service = AuthService(
        user_store=auth_db,
        hasher=CredentialHasher(config),
        token_issuer=token_issuer,
        security_logger=SecurityLogger(postgres),
    )

    app = FastAPI(title="Auth Service")
    register_error_handlers(app)

    # Added last runs first: request IDs exist before auth checks run
    app.add_middleware(AuthMiddleware, token_issuer=token_issuer)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(create_auth_router(auth_service), prefix="/users")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    logger.info("Auth service ready")
    return app
