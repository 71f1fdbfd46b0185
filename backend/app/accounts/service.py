"""Account registration, sign-in and bearer-token resolution.

Passwords are stored as passlib PBKDF2-SHA256 hashes. Bearer tokens are opaque
random strings; only their SHA-256 hash is stored, with an expiry.
"""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone

from passlib.context import CryptContext
from pydantic import EmailStr, TypeAdapter, ValidationError

from backend.app.db.repositories import AccountStore, ProfileStore, StorageError, TokenRecord
from backend.app.models.auth import AuthSession, Identity
from backend.app.models.documents import utcnow

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

USER_EXISTS_MESSAGE = "User already registered"
INVALID_CREDENTIALS_MESSAGE = "Invalid login credentials"
WEAK_PASSWORD_MESSAGE = f"Password should be at least {MIN_PASSWORD_LENGTH} characters"
INVALID_EMAIL_MESSAGE = "Unable to validate email address: invalid format"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

_email_adapter = TypeAdapter(EmailStr)


class AuthError(Exception):
    """Sign-up or sign-in rejected; `message` is shown to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2."""
    return pwd_context.hash(password)


def verify_password(password: str, encoded: str) -> bool:
    """Check a password against a stored hash; unrecognised hashes never match."""
    try:
        return pwd_context.verify(password, encoded)
    except ValueError:
        return False


def hash_token(token: str) -> str:
    """Hash a bearer token for storage."""
    return hashlib.sha256(token.encode()).hexdigest()


def normalize_email(email: str) -> str:
    """Trim and lowercase an email address.

    Raises:
        AuthError: If the address is not shaped like an email
    """
    normalized = email.strip().lower()
    try:
        _email_adapter.validate_python(normalized)
    except ValidationError:
        raise AuthError(INVALID_EMAIL_MESSAGE) from None
    return normalized


def _as_aware(value: datetime) -> datetime:
    # sqlite hands back naive datetimes; they were written as UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class AccountService:
    """Identity collaborator on the server side."""

    def __init__(
        self,
        accounts: AccountStore,
        profiles: ProfileStore,
        *,
        signup_credits: int = 3,
        token_ttl_hours: int = 168,
    ) -> None:
        self._accounts = accounts
        self._profiles = profiles
        self._signup_credits = signup_credits
        self._token_ttl = timedelta(hours=token_ttl_hours)

    async def sign_up(self, email: str, password: str) -> Identity:
        """Register an account and its starting profile.

        Does not sign the user in; the caller must call `sign_in` next.

        Raises:
            AuthError: Invalid email, short password or email already registered
        """
        email = normalize_email(email)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(WEAK_PASSWORD_MESSAGE)

        if await self._accounts.get_account_by_email(email) is not None:
            raise AuthError(USER_EXISTS_MESSAGE)

        try:
            account = await self._accounts.create_account(email, hash_password(password))
        except StorageError as e:
            # Lost a race with a concurrent sign-up for the same email
            raise AuthError(USER_EXISTS_MESSAGE) from e

        await self._profiles.create(
            account.user_id, email, plan="free", credits_remaining=self._signup_credits
        )
        logger.info(f"Registered account {account.user_id}")
        return Identity(user_id=account.user_id, email=email)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Verify credentials and issue a bearer token.

        Raises:
            AuthError: Unknown email or wrong password
        """
        try:
            email = normalize_email(email)
        except AuthError:
            raise AuthError(INVALID_CREDENTIALS_MESSAGE) from None

        account = await self._accounts.get_account_by_email(email)
        if account is None or not verify_password(password, account.password_hash):
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)

        token = secrets.token_urlsafe(32)
        await self._accounts.save_token(
            TokenRecord(
                token_hash=hash_token(token),
                user_id=account.user_id,
                expires_at=utcnow() + self._token_ttl,
                revoked=False,
            )
        )
        return AuthSession(
            access_token=token, user=Identity(user_id=account.user_id, email=account.email)
        )

    async def sign_out(self, token: str) -> None:
        """Revoke a bearer token; unknown tokens are ignored."""
        await self._accounts.revoke_token(hash_token(token))

    async def resolve(self, token: str) -> Identity | None:
        """Return the identity a live token belongs to, None otherwise."""
        record = await self._accounts.get_token(hash_token(token))
        if record is None or record.revoked:
            return None
        if _as_aware(record.expires_at) <= utcnow():
            return None

        account = await self._accounts.get_account(record.user_id)
        if account is None:
            return None
        return Identity(user_id=account.user_id, email=account.email)
