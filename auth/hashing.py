"""Salted password hashing.

PBKDF2-HMAC-SHA512 with a per-user random salt. The derived key is stored
hex-encoded next to the hex salt. Comparison is constant-time.
"""

import hashlib
import hmac
import secrets

from auth.config import AuthConfig


class CredentialHasher:
    """Derives and verifies password hashes."""

    ALGORITHM = "sha512"

    def __init__(self, config: AuthConfig):
        self._iterations = config.hash_iterations
        self._key_length = config.hash_key_length
        self._salt_bytes = config.salt_bytes
        self._dummy_salt: str | None = None
        self._dummy_hash: str | None = None

    def generate_salt(self) -> str:
        """Fresh random salt, hex-encoded."""
        return secrets.token_bytes(self._salt_bytes).hex()

    def hash_password(self, password: str, salt: str) -> str:
        """Derive the hex hash of password under salt.

        Deterministic: same inputs always give the same output.

        Raises:
            ValueError: If salt is empty.
        """
        if not salt:
            raise ValueError("salt must not be empty")

        derived = hashlib.pbkdf2_hmac(
            self.ALGORITHM,
            password.encode("utf-8"),
            salt.encode("utf-8"),
            self._iterations,
            dklen=self._key_length,
        )
        return derived.hex()

    def verify_password(self, password: str, salt: str, expected_hash: str) -> bool:
        """Recompute and compare in constant time."""
        candidate = self.hash_password(password, salt)
        return hmac.compare_digest(
            candidate.encode("ascii"),
            expected_hash.encode("utf-8"),
        )

    def verify_unknown_user(self, password: str) -> bool:
        """Run a full verification against a throwaway hash. Always False.

        Login calls this when no user matches the email, so that path costs
        the same derivation as a wrong password.
        """
        if self._dummy_salt is None:
            self._dummy_salt = self.generate_salt()
            self._dummy_hash = self.hash_password(secrets.token_hex(16), self._dummy_salt)
        self.verify_password(password, self._dummy_salt, self._dummy_hash)
        return False
