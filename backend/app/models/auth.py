"""Identity and auth-session models."""

from dataclasses import dataclass
from enum import Enum


class AuthEvent(str, Enum):
    """Session change notifications delivered by an auth client."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


@dataclass(frozen=True)
class Identity:
    """Authenticated user identity as seen by the workflow."""

    user_id: str
    email: str


@dataclass(frozen=True)
class AuthSession:
    """An authenticated session held by an auth client."""

    access_token: str
    user: Identity
