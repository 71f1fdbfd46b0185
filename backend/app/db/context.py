"""Request context for ownership enforcement."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Request context containing the authenticated user identity.

    Used to scope every document, profile and usage-log operation to its owner.
    """

    user_id: UUID
    email: str
