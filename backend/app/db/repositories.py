"""Repository protocol interfaces for data access."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from backend.app.models.common import DocType
from backend.app.models.documents import GeneratedDoc, UsageLogEntry, UserProfile


class StorageError(Exception):
    """A storage read or write failed."""

    pass


@dataclass
class AccountRecord:
    """Account credentials record."""

    user_id: str
    email: str
    password_hash: str
    created_at: datetime


@dataclass
class TokenRecord:
    """Issued bearer token (stored hashed)."""

    token_hash: str
    user_id: str
    expires_at: datetime
    revoked: bool


class DocumentStore(Protocol):
    """Owner-scoped document collection."""

    async def insert(
        self,
        user_id: str,
        *,
        document_type: DocType,
        input_data: dict[str, str] | None,
        generated_text: str,
    ) -> GeneratedDoc:
        """Persist a document and return it with its permanent id.

        Raises:
            StorageError: If the write fails
        """
        ...

    async def list_for_owner(self, user_id: str) -> list[GeneratedDoc]:
        """List the owner's documents, newest first.

        Raises:
            StorageError: If the read fails
        """
        ...


class ProfileStore(Protocol):
    """User profile collection."""

    async def get(self, user_id: str) -> UserProfile | None:
        """Read a profile, None if the user has none."""
        ...

    async def create(
        self, user_id: str, email: str, *, plan: str, credits_remaining: int
    ) -> UserProfile:
        """Create the profile for a freshly registered user."""
        ...

    async def update_credits(self, user_id: str, credits_remaining: int) -> UserProfile:
        """Overwrite the credit balance with a caller-computed value.

        Raises:
            StorageError: If the profile does not exist or the write fails
        """
        ...


class UsageLogStore(Protocol):
    """Append-only usage log.

    Appending an entry with credits_used > 0 debits the owner's balance by
    that amount, floored at zero, as part of the same write.
    """

    async def append(
        self, user_id: str, *, action: str, credits_used: int, doc_id: str | None = None
    ) -> UsageLogEntry:
        """Append an entry.

        Raises:
            StorageError: If the write fails
        """
        ...


class AccountStore(Protocol):
    """Credentials and bearer-token storage."""

    async def create_account(self, email: str, password_hash: str) -> AccountRecord:
        """Create an account; raises StorageError if the email is taken."""
        ...

    async def get_account_by_email(self, email: str) -> AccountRecord | None:
        """Look up an account by (normalized) email."""
        ...

    async def get_account(self, user_id: str) -> AccountRecord | None:
        """Look up an account by id."""
        ...

    async def save_token(self, token: TokenRecord) -> None:
        """Store a newly issued token."""
        ...

    async def get_token(self, token_hash: str) -> TokenRecord | None:
        """Look up a token by hash."""
        ...

    async def revoke_token(self, token_hash: str) -> None:
        """Mark a token revoked (no-op if unknown)."""
        ...


@dataclass
class RetryAfter:
    """Rate limit retry-after information."""

    seconds: int


class RateLimiter(Protocol):
    """Rate limiter interface."""

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available.

        Args:
            key: Rate limit key
            now: Current timestamp

        Returns:
            RetryAfter if over quota, None if allowed
        """
        ...
