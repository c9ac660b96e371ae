"""Authentication configuration."""

import logging
import os
from datetime import timedelta

from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from auth.exceptions import ConfigurationError
from utils.durations import parse_duration

logger = logging.getLogger(__name__)

MIN_SECRET_LENGTH = 32


class AuthConfig(BaseModel):
    """
    Authentication configuration.

    The signing secret has no default: it must always be operator-provided.
    Durations use the "30m" / "12h" / "7d" notation (bare numbers are seconds).
    """

    # Access token signing
    signing_secret: SecretStr = Field(
        ...,
        description="Symmetric key for signing access tokens",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="HMAC algorithm for access tokens",
        pattern=r"^HS(256|384|512)$",
    )
    access_token_ttl: str = Field(
        default="30m",
        description="Access token lifetime",
    )

    # Refresh tokens
    refresh_token_bytes: int = Field(
        default=64,
        description="Random bytes per refresh token (hex-encoded, so 2x characters)",
        ge=32,
        le=128,
    )

    # Password hashing (PBKDF2-HMAC-SHA512)
    hash_iterations: int = Field(
        default=210_000,
        description="PBKDF2 iteration count",
        ge=1,
    )
    # 512 bytes is 8 SHA-512 output blocks, so each hash costs 8x the
    # iteration count (roughly 1s of CPU at the default). Kept for
    # compatibility with existing stored hashes.
    hash_key_length: int = Field(
        default=512,
        description="Derived key length in bytes",
        ge=32,
        le=1024,
    )
    salt_bytes: int = Field(
        default=16,
        description="Random bytes per salt",
        ge=16,
        le=64,
    )

    @field_validator("signing_secret")
    @classmethod
    def _secret_must_be_strong(cls, value: SecretStr) -> SecretStr:
        secret = value.get_secret_value()
        if not secret.strip():
            raise ValueError("signing secret must not be blank")
        if len(secret) < MIN_SECRET_LENGTH:
            raise ValueError(
                f"signing secret must be at least {MIN_SECRET_LENGTH} characters"
            )
        return value

    @field_validator("access_token_ttl")
    @classmethod
    def _ttl_must_parse(cls, value: str) -> str:
        parse_duration(value)
        return value

    @property
    def access_token_lifetime(self) -> timedelta:
        return parse_duration(self.access_token_ttl)


def load_auth_config(signing_secret: str | None = None) -> AuthConfig:
    """Build AuthConfig at startup. Fails fast on any misconfiguration.

    The signing secret comes from the argument, else Vault. Optional settings
    are read from AUTH_* environment variables.

    Raises:
        ConfigurationError: If the secret is missing or any setting is invalid.
    """
    if signing_secret is None:
        from clients.vault_client import get_signing_secret

        try:
            signing_secret = get_signing_secret()
        except (KeyError, PermissionError, ValueError) as e:
            raise ConfigurationError(f"Signing secret unavailable: {e}") from e

    overrides = {
        "jwt_algorithm": os.getenv("AUTH_JWT_ALGORITHM"),
        "access_token_ttl": os.getenv("AUTH_ACCESS_TOKEN_TTL"),
        "hash_iterations": os.getenv("AUTH_HASH_ITERATIONS"),
    }

    try:
        config = AuthConfig(
            signing_secret=signing_secret,
            **{k: v for k, v in overrides.items() if v is not None},
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid auth configuration: {e}") from e

    logger.info(
        f"Auth config loaded: algorithm={config.jwt_algorithm}, "
        f"access_token_ttl={config.access_token_ttl}, "
        f"hash_iterations={config.hash_iterations}"
    )
    return config
