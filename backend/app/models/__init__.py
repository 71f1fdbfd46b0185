"""Models package - re-exports for convenience."""

from backend.app.models.auth import AuthEvent, AuthSession, Identity
from backend.app.models.common import DocType, FieldType, OperationStatus, Page
from backend.app.models.documents import (
    TRANSIENT_ID_PREFIX,
    GeneratedDoc,
    UsageLogEntry,
    UserProfile,
    is_transient_id,
    new_transient_id,
)
from backend.app.models.templates import DocConfig, FormField

__all__ = [
    # Common
    "DocType",
    "FieldType",
    "OperationStatus",
    "Page",
    # Templates
    "DocConfig",
    "FormField",
    # Documents
    "GeneratedDoc",
    "UserProfile",
    "UsageLogEntry",
    "TRANSIENT_ID_PREFIX",
    "new_transient_id",
    "is_transient_id",
    # Auth
    "AuthEvent",
    "AuthSession",
    "Identity",
]
