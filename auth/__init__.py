"""Authentication: credential hashing, token issuance and rotation."""

from auth.exceptions import (
    AuthError,
    AlreadyExistsError,
    InvalidCredentialsError,
    InvalidTokenError,
    StorageError,
    ConfigurationError,
)
from auth.types import (
    User,
    NewUser,
    TokenPair,
    AccessTokenClaims,
    RegisterRequest,
    LoginRequest,
    RefreshRequest,
)
from auth.config import AuthConfig, load_auth_config
from auth.hashing import CredentialHasher
from auth.tokens import TokenIssuer
from auth.database import AuthDatabase, UserStore
from auth.security_logger import SecurityLogger, SecurityEvent
from auth.service import AuthService
from auth.security_middleware import AuthMiddleware
from auth.api import create_auth_router
