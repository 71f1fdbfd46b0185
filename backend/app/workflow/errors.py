"""User-facing error taxonomy for the drafting workflow.

Every collaborator failure is converted to one of these at the boundary of a
workflow operation; each carries the message shown to the user.
"""

QUOTA_EXHAUSTED_MESSAGE = "You've used your free drafts. Please top up your account to continue."
DUPLICATE_MESSAGE = "This document is already generated with these details."
GENERATION_FAILED_MESSAGE = (
    "We couldn't generate your document. Don't worry, no credits were used. Please try again."
)
PERSISTENCE_FAILED_MESSAGE = "Your draft could not be saved to your account."
AUTH_FAILED_MESSAGE = "Authentication failed."


class DraftError(Exception):
    """Base class for workflow errors shown to the user."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.message == other.message  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self.message))


class QuotaExhausted(DraftError):
    """Authenticated user has no credits left."""

    default_message = QUOTA_EXHAUSTED_MESSAGE


class DuplicateSubmission(DraftError):
    """Identical input resubmitted while its result is still displayed."""

    default_message = DUPLICATE_MESSAGE


class InvalidSubmission(DraftError):
    """No template selected or required fields left blank."""

    default_message = "Please select a document type."


class GenerationFailure(DraftError):
    """Generation collaborator failed or returned nothing; nothing was charged."""

    default_message = GENERATION_FAILED_MESSAGE


class PersistenceFailure(DraftError):
    """Saving or claiming a document failed; the text is still displayed."""

    default_message = PERSISTENCE_FAILED_MESSAGE


class AuthFailure(DraftError):
    """Sign-in or sign-up rejected by the identity collaborator."""

    default_message = AUTH_FAILED_MESSAGE


class OperationPending(DraftError):
    """A previous request of the same kind has not resolved yet."""

    default_message = "Please wait for the current request to finish."
