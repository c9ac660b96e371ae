"""HTTP routes for authentication."""

import ipaddress

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.base import error_response, ErrorCodes
from auth.exceptions import (
    AlreadyExistsError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from auth.service import AuthService
from auth.types import LoginRequest, RefreshRequest, RegisterRequest, TokenPair


def _get_client_ip(request: Request) -> str | None:
    """Extract valid IP address from request, or None if invalid."""
    if not request.client:
        return None
    host = request.client.host
    try:
        ipaddress.ip_address(host)
        return host
    except ValueError:
        return None


def _error(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(
            code,
            message,
            getattr(request.state, "request_id", None),
        ).model_dump(mode="json"),
    )


def create_auth_router(auth_service: AuthService) -> APIRouter:
    """Create auth router with injected service."""
    router = APIRouter(tags=["users"])

    @router.post("/register", status_code=201, response_model=TokenPair)
    def register(request: Request, body: RegisterRequest):
        """Register a new user and return the first token pair."""
        try:
            return auth_service.register_user(
                body,
                ip_address=_get_client_ip(request),
                user_agent=request.headers.get("User-Agent"),
            )
        except AlreadyExistsError:
            return _error(request, 409, ErrorCodes.ALREADY_EXISTS, "User already exists")

    @router.post("/login", status_code=201, response_model=TokenPair)
    def login(request: Request, body: LoginRequest):
        """Exchange email/password for a token pair."""
        try:
            return auth_service.login_user(
                body,
                ip_address=_get_client_ip(request),
                user_agent=request.headers.get("User-Agent"),
            )
        except InvalidCredentialsError as e:
            return _error(request, 401, ErrorCodes.INVALID_CREDENTIALS, str(e))

    @router.post("/refresh", status_code=201, response_model=TokenPair)
    def refresh(request: Request, body: RefreshRequest):
        """Exchange the current refresh token for a new token pair."""
        try:
            return auth_service.refresh_token(
                body.refresh_token,
                ip_address=_get_client_ip(request),
                user_agent=request.headers.get("User-Agent"),
            )
        except InvalidTokenError as e:
            return _error(request, 401, ErrorCodes.INVALID_TOKEN, str(e))

    @router.get("/me")
    def get_current_user(request: Request):
        """Get the user identified by the bearer access token.

        Requires authentication (middleware sets request.state.user_id).
        """
        if not hasattr(request.state, "user_id"):
            return _error(request, 401, ErrorCodes.NOT_AUTHENTICATED, "Authentication required")

        try:
            user = auth_service.get_user(request.state.user_id)
        except InvalidTokenError as e:
            return _error(request, 401, ErrorCodes.INVALID_TOKEN, str(e))

        return {
            "id": str(user.id),
            "username": user.username,
            "email": user.email,
            "birthDate": user.birth_date.isoformat() if user.birth_date else None,
        }

    return router
