"""Identity tracker: follows the auth collaborator and loads user data."""

import logging
from collections.abc import Callable

from backend.app.accounts.client import AuthClient, AuthListener
from backend.app.db.repositories import DocumentStore, ProfileStore
from backend.app.models.auth import Identity
from backend.app.models.common import OperationStatus
from backend.app.models.documents import GeneratedDoc
from backend.app.workflow.state import SessionState, UserLoad

logger = logging.getLogger(__name__)


class IdentityTracker:
    """Derives the current identity from the auth client and decides follow-ups.

    Transition decisions take the previous and new identity as arguments so
    they never depend on a value captured before an await.
    """

    def __init__(
        self, auth: AuthClient, documents: DocumentStore, profiles: ProfileStore
    ) -> None:
        self._auth = auth
        self._documents = documents
        self._profiles = profiles

    async def current_identity(self) -> Identity | None:
        """Resolve whatever session the auth client currently holds."""
        session = await self._auth.get_session()
        return session.user if session else None

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        return self._auth.subscribe(listener)

    @staticmethod
    def needs_history(prev: Identity | None, new: Identity | None) -> bool:
        """History is fetched fresh whenever a (different) user becomes present."""
        if new is None:
            return False
        return prev is None or prev.user_id != new.user_id

    @staticmethod
    def should_claim(prev: Identity | None, new: Identity | None, state: SessionState) -> bool:
        """Guest -> signed-in with an unclaimed document and no claim attempted yet."""
        return (
            prev is None
            and new is not None
            and state.has_unclaimed_document
            and state.claim == OperationStatus.IDLE
        )

    async def load_user(self, identity: Identity, *, include_history: bool = True) -> UserLoad:
        """Fetch profile (and history). Failures are logged and leave fields None."""
        profile = None
        try:
            profile = await self._profiles.get(identity.user_id)
        except Exception as e:
            logger.error(f"Profile Fetch Error for {identity.user_id}: {e}")

        history = None
        if include_history:
            history = await self.fetch_history(identity)

        return UserLoad(identity=identity, profile=profile, history=history)

    async def fetch_history(self, identity: Identity) -> tuple[GeneratedDoc, ...] | None:
        """List the user's documents newest first, None if storage failed."""
        try:
            docs = await self._documents.list_for_owner(identity.user_id)
        except Exception as e:
            logger.error(f"History Sync Failure for {identity.user_id}: {e}")
            return None
        return tuple(docs)
