"""Authentication service - orchestrates register, login and token refresh."""

import logging
from uuid import UUID

from auth.database import UserStore
from auth.exceptions import (
    AlreadyExistsError,
    InvalidCredentialsError,
    InvalidTokenError,
    StorageError,
)
from auth.hashing import CredentialHasher
from auth.security_logger import SecurityLogger, SecurityEvent
from auth.tokens import TokenIssuer
from auth.types import (
    LoginRequest,
    NewUser,
    RegisterRequest,
    TokenPair,
    User,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Password or login is incorrect"


class AuthService:
    """Orchestrates the credential and token lifecycle.

    Handles:
    - Registration (uniqueness on email and username)
    - Login (non-enumerable failure)
    - Refresh token rotation (single active refresh token per user)

    Every success issues a fresh token pair and overwrites the user's stored
    refresh token, so only the most recently issued refresh token is usable.
    """

    def __init__(
        self,
        user_store: UserStore,
        hasher: CredentialHasher,
        token_issuer: TokenIssuer,
        security_logger: SecurityLogger,
    ):
        self._users = user_store
        self._hasher = hasher
        self._tokens = token_issuer
        self._security_logger = security_logger

    def register_user(
        self,
        request: RegisterRequest,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> TokenPair:
        """Create user and issue first token pair.

        Flow:
        1. Reject taken email
        2. Reject taken username
        3. Salt and hash password
        4. Insert (store rejects a concurrent duplicate)
        5. Issue token pair

        Raises:
            AlreadyExistsError: If email or username is taken.
            StorageError: If the store fails.
        """
        if self._users.get_user_by_email(request.email) is not None:
            self._log_conflict(request, "email_taken", ip_address, user_agent)
            raise AlreadyExistsError("User already exists")

        if self._users.get_user_by_username(request.username) is not None:
            self._log_conflict(request, "username_taken", ip_address, user_agent)
            raise AlreadyExistsError("User already exists")

        salt = self._hasher.generate_salt()
        new_user = NewUser(
            username=request.username,
            email=request.email,
            password_hash=self._hasher.hash_password(request.password, salt),
            salt=salt,
            birth_date=request.birth_date,
        )

        user = self._users.create_user(new_user)
        if not user:
            # Lost a race with a concurrent registration for the same key
            self._log_conflict(request, "insert_conflict", ip_address, user_agent)
            raise AlreadyExistsError("User not created")

        token_pair = self._issue_token_pair(user)

        self._security_logger.log(
            SecurityEvent.USER_REGISTERED,
            email=user.email,
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        return token_pair

    def login_user(
        self,
        request: LoginRequest,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> TokenPair:
        """Check email/password and issue token pair.

        Unknown email and wrong password raise the same error with the same
        message, and both pay for one full hash derivation.

        Raises:
            InvalidCredentialsError: If the pair does not authenticate.
            StorageError: If the store fails.
        """
        user = self._users.get_user_by_email(request.email)

        if user is None:
            self._hasher.verify_unknown_user(request.password)
            self._security_logger.log(
                SecurityEvent.LOGIN_FAILED,
                email=request.email,
                ip_address=ip_address,
                user_agent=user_agent,
                details={"reason": "user_not_found"},
            )
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        if not self._hasher.verify_password(request.password, user.salt, user.password_hash):
            self._security_logger.log(
                SecurityEvent.LOGIN_FAILED,
                email=user.email,
                user_id=user.id,
                ip_address=ip_address,
                user_agent=user_agent,
                details={"reason": "wrong_password"},
            )
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

        token_pair = self._issue_token_pair(user)

        self._security_logger.log(
            SecurityEvent.LOGIN_SUCCEEDED,
            email=user.email,
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        return token_pair

    def refresh_token(
        self,
        refresh_token: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> TokenPair:
        """Exchange the current refresh token for a new pair.

        No password re-check: holding the current refresh token is the
        credential. The submitted token is swapped out only if it is still
        the stored one, so two requests racing on the same token cannot both
        succeed.

        Raises:
            InvalidTokenError: If no user holds this token.
            StorageError: If the store fails.
        """
        user = self._users.get_user_by_refresh_token(refresh_token) if refresh_token else None

        if user is None:
            self._log_refresh_failure("token_not_found", ip_address, user_agent)
            raise InvalidTokenError("Token is incorrect")

        try:
            token_pair = self._issue_token_pair(user, expected_token=refresh_token)
        except InvalidTokenError:
            self._log_refresh_failure("token_already_rotated", ip_address, user_agent, user)
            raise

        self._security_logger.log(
            SecurityEvent.TOKEN_REFRESHED,
            email=user.email,
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        return token_pair

    def get_user(self, user_id: UUID) -> User:
        """Load the user an access token was issued to.

        Raises:
            InvalidTokenError: If the user no longer exists.
        """
        user = self._users.get_user_by_id(user_id)
        if user is None:
            raise InvalidTokenError("Token is incorrect")
        return user

    def _issue_token_pair(self, user: User, expected_token: str | None = None) -> TokenPair:
        """Rotate the stored refresh token, then sign an access token.

        The access token is built from the post-update row, never from the
        caller's possibly stale copy. With expected_token set, the rotation
        only applies while that token is still stored.

        Raises:
            InvalidTokenError: If expected_token was already rotated away.
            StorageError: If the user vanished or the store fails.
        """
        new_refresh_token = self._tokens.issue_refresh_token()

        updated = self._users.update_refresh_token(
            user.id, new_refresh_token, expected_token=expected_token
        )
        if updated is None:
            if expected_token is not None:
                raise InvalidTokenError("Token is incorrect")
            logger.error(f"User {user.id} disappeared during token issuance")
            raise StorageError("User store update_refresh_token failed")

        return TokenPair(
            access_token=self._tokens.issue_access_token(updated.id, updated.username),
            refresh_token=new_refresh_token,
        )

    def _log_refresh_failure(
        self,
        reason: str,
        ip_address: str | None,
        user_agent: str | None,
        user: User | None = None,
    ) -> None:
        self._security_logger.log(
            SecurityEvent.REFRESH_FAILED,
            email=user.email if user else None,
            user_id=user.id if user else None,
            ip_address=ip_address,
            user_agent=user_agent,
            details={"reason": reason},
        )

    def _log_conflict(
        self,
        request: RegisterRequest,
        reason: str,
        ip_address: str | None,
        user_agent: str | None,
    ) -> None:
        self._security_logger.log(
            SecurityEvent.REGISTRATION_CONFLICT,
            email=request.email,
            ip_address=ip_address,
            user_agent=user_agent,
            details={"reason": reason, "username": request.username},
        )
