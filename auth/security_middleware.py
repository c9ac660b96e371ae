"""Security middleware for FastAPI - bearer access token validation."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from auth.tokens import TokenIssuer
from auth.exceptions import InvalidTokenError
from api.base import error_response, ErrorCodes


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that validates the access token on protected routes.

    For protected routes:
    1. Extracts the token from 'Authorization: Bearer <token>'
    2. Verifies signature and expiry via TokenIssuer
    3. Sets user_id and claims in request.state

    Public paths bypass authentication entirely.
    """

    PUBLIC_PATHS = [
        "/users/register",
        "/users/login",
        "/users/refresh",
        "/health",
        "/docs",
        "/openapi.json",
    ]

    def __init__(self, app, token_issuer: TokenIssuer):
        super().__init__(app)
        self._token_issuer = token_issuer

    def _is_public_path(self, path: str) -> bool:
        """Check if path is in public paths list."""
        for public_path in self.PUBLIC_PATHS:
            if path == public_path or path.startswith(public_path + "/"):
                return True
        return False

    @staticmethod
    def _bearer_token(request: Request) -> str | None:
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None
        return token.strip()

    def _unauthorized(self, request: Request, code: str, message: str) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            headers={"WWW-Authenticate": "Bearer"},
            content=error_response(
                code,
                message,
                getattr(request.state, "request_id", None),
            ).model_dump(mode="json"),
        )

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        if self._is_public_path(request.url.path):
            return await call_next(request)

        token = self._bearer_token(request)
        if token is None:
            return self._unauthorized(
                request, ErrorCodes.NOT_AUTHENTICATED, "Authentication required"
            )

        try:
            claims = self._token_issuer.decode_access_token(token)
        except InvalidTokenError:
            return self._unauthorized(
                request, ErrorCodes.INVALID_TOKEN, "Invalid or expired token"
            )

        request.state.user_id = claims.id
        request.state.claims = claims

        return await call_next(request)
