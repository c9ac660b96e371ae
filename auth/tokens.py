"""Access and refresh token issuance.

Access tokens are HMAC-signed JWTs carrying the user's id and username.
Refresh tokens are opaque random hex strings with no embedded claims; their
only meaning is "the value currently stored against this user".
"""

import secrets
from datetime import datetime, timezone
from uuid import UUID, uuid4

from jose import JWTError, jwt

from auth.config import AuthConfig
from auth.exceptions import ConfigurationError, InvalidTokenError
from auth.types import AccessTokenClaims
from utils.durations import now_utc


class TokenIssuer:
    """Creates signed access tokens and opaque refresh tokens."""

    def __init__(self, config: AuthConfig):
        secret = config.signing_secret.get_secret_value()
        if not secret:
            raise ConfigurationError("Signing secret is required")

        self._secret = secret
        self._algorithm = config.jwt_algorithm
        self._ttl = config.access_token_lifetime
        self._refresh_token_bytes = config.refresh_token_bytes

    def issue_access_token(self, user_id: UUID, username: str) -> str:
        """Sign a short-lived token for user."""
        now = now_utc()
        claims = {
            "sub": str(user_id),
            "id": str(user_id),
            "username": username,
            "iat": now,
            "exp": now + self._ttl,
            "jti": uuid4().hex,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def issue_refresh_token(self) -> str:
        """Fresh high-entropy refresh token, hex-encoded."""
        return secrets.token_bytes(self._refresh_token_bytes).hex()

    def decode_access_token(self, token: str) -> AccessTokenClaims:
        """Verify signature and expiry, return claims.

        Raises:
            InvalidTokenError: If token is malformed, tampered, or expired.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
            return AccessTokenClaims(
                id=UUID(payload["id"]),
                username=payload["username"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (JWTError, KeyError, TypeError, ValueError) as e:
            raise InvalidTokenError("Invalid or expired token") from e
