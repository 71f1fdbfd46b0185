"""Document, profile and usage-log models."""

import secrets
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from backend.app.models.common import DocType

# Storage assigns UUIDs; locally generated ids carry this prefix instead.
TRANSIENT_ID_PREFIX = "local-"


def new_transient_id() -> str:
    """Create a locally generated, not-yet-persisted document id."""
    return f"{TRANSIENT_ID_PREFIX}{secrets.token_hex(6)}"


def is_transient_id(doc_id: str) -> bool:
    """Return True if the id was generated locally and never persisted."""
    return doc_id.startswith(TRANSIENT_ID_PREFIX)


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class GeneratedDoc(BaseModel):
    """A generated document.

    The text never changes once set; the only allowed change is promotion
    from a transient id to the permanent id assigned by storage.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    document_type: DocType
    generated_text: str
    input_data: dict[str, str] | None = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def is_transient(self) -> bool:
        """True while the document only exists in memory."""
        return is_transient_id(self.id)

    def promoted(self, permanent_id: str) -> "GeneratedDoc":
        """Return a copy carrying the storage-assigned id."""
        return self.model_copy(update={"id": permanent_id})


class UserProfile(BaseModel):
    """Billing profile of an authenticated user."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    plan: str = "free"
    credits_remaining: int = Field(0, ge=0)

    def debited(self, amount: int = 1) -> "UserProfile":
        """Return a copy with `amount` credits removed, floored at zero."""
        return self.model_copy(
            update={"credits_remaining": max(0, self.credits_remaining - amount)}
        )


class UsageLogEntry(BaseModel):
    """Append-only record attributing credits to an action."""

    id: str
    user_id: str
    action: str
    credits_used: int = Field(..., ge=0)
    doc_id: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
