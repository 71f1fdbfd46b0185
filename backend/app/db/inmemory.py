"""In-memory implementations of repository interfaces."""

import uuid
from datetime import datetime, timedelta

from backend.app.db.repositories import AccountRecord, RetryAfter, StorageError, TokenRecord
from backend.app.models.common import DocType
from backend.app.models.documents import GeneratedDoc, UsageLogEntry, UserProfile, utcnow


class InMemoryDocumentStore:
    """In-memory implementation of DocumentStore."""

    def __init__(self) -> None:
        self._documents: dict[str, tuple[str, GeneratedDoc]] = {}

    async def insert(
        self,
        user_id: str,
        *,
        document_type: DocType,
        input_data: dict[str, str] | None,
        generated_text: str,
    ) -> GeneratedDoc:
        """Persist a document under a new UUID."""
        doc = GeneratedDoc(
            id=str(uuid.uuid4()),
            document_type=document_type,
            generated_text=generated_text,
            input_data=dict(input_data) if input_data is not None else None,
            created_at=utcnow(),
        )
        self._documents[doc.id] = (user_id, doc)
        return doc

    async def list_for_owner(self, user_id: str) -> list[GeneratedDoc]:
        """List the owner's documents, newest first."""
        # Walk newest-inserted first so equal timestamps keep recency order
        results = [
            doc for owner, doc in reversed(self._documents.values()) if owner == user_id
        ]
        results.sort(key=lambda d: d.created_at, reverse=True)
        return results

    def count_for_owner(self, user_id: str) -> int:
        """Number of stored documents owned by the user."""
        return sum(1 for owner, _ in self._documents.values() if owner == user_id)


class InMemoryProfileStore:
    """In-memory implementation of ProfileStore."""

    def __init__(self) -> None:
        self._profiles: dict[str, UserProfile] = {}

    async def get(self, user_id: str) -> UserProfile | None:
        """Read a profile."""
        return self._profiles.get(user_id)

    async def create(
        self, user_id: str, email: str, *, plan: str, credits_remaining: int
    ) -> UserProfile:
        """Create a profile."""
        profile = UserProfile(
            id=user_id, email=email, plan=plan, credits_remaining=credits_remaining
        )
        self._profiles[user_id] = profile
        return profile

    async def update_credits(self, user_id: str, credits_remaining: int) -> UserProfile:
        """Overwrite the credit balance."""
        profile = self._profiles.get(user_id)
        if profile is None:
            raise StorageError(f"profile {user_id} not found")

        updated = profile.model_copy(update={"credits_remaining": max(0, credits_remaining)})
        self._profiles[user_id] = updated
        return updated

    def debit(self, user_id: str, amount: int) -> None:
        """Decrement-if-positive, used by the usage log."""
        profile = self._profiles.get(user_id)
        if profile is not None:
            self._profiles[user_id] = profile.debited(amount)


class InMemoryUsageLogStore:
    """In-memory implementation of UsageLogStore."""

    def __init__(self, profiles: InMemoryProfileStore) -> None:
        self._profiles = profiles
        self.entries: list[UsageLogEntry] = []

    async def append(
        self, user_id: str, *, action: str, credits_used: int, doc_id: str | None = None
    ) -> UsageLogEntry:
        """Append an entry and debit the owner's credits."""
        entry = UsageLogEntry(
            id=str(uuid.uuid4()),
            user_id=user_id,
            action=action,
            credits_used=credits_used,
            doc_id=doc_id,
        )
        self.entries.append(entry)

        if credits_used > 0:
            self._profiles.debit(user_id, credits_used)

        return entry


class InMemoryAccountStore:
    """In-memory implementation of AccountStore."""

    def __init__(self) -> None:
        self._accounts: dict[str, AccountRecord] = {}
        self._tokens: dict[str, TokenRecord] = {}

    async def create_account(self, email: str, password_hash: str) -> AccountRecord:
        """Create an account."""
        if await self.get_account_by_email(email) is not None:
            raise StorageError(f"account {email} already exists")

        record = AccountRecord(
            user_id=str(uuid.uuid4()),
            email=email,
            password_hash=password_hash,
            created_at=utcnow(),
        )
        self._accounts[record.user_id] = record
        return record

    async def get_account_by_email(self, email: str) -> AccountRecord | None:
        """Look up an account by email."""
        for record in self._accounts.values():
            if record.email == email:
                return record
        return None

    async def get_account(self, user_id: str) -> AccountRecord | None:
        """Look up an account by id."""
        return self._accounts.get(user_id)

    async def save_token(self, token: TokenRecord) -> None:
        """Store a token."""
        self._tokens[token.token_hash] = token

    async def get_token(self, token_hash: str) -> TokenRecord | None:
        """Look up a token."""
        return self._tokens.get(token_hash)

    async def revoke_token(self, token_hash: str) -> None:
        """Revoke a token."""
        token = self._tokens.get(token_hash)
        if token is not None:
            token.revoked = True


class InMemoryRateLimiter:
    """In-memory implementation of RateLimiter using fixed window."""

    def __init__(self, max_requests: int, window_seconds: int = 60) -> None:
        """Initialize rate limiter.

        Args:
            max_requests: Maximum requests per window
            window_seconds: Window size in seconds (default 60)
        """
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._windows: dict[str, tuple[datetime, int]] = {}

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available."""
        if key not in self._windows:
            self._windows[key] = (now, 1)
            return None

        window_start, count = self._windows[key]
        window_end = window_start + timedelta(seconds=self._window_seconds)

        if now >= window_end:
            self._windows[key] = (now, 1)
            return None

        if count >= self._max_requests:
            seconds_remaining = int((window_end - now).total_seconds())
            return RetryAfter(seconds=max(1, seconds_remaining))

        self._windows[key] = (window_start, count + 1)
        return None
