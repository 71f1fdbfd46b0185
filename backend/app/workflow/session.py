"""Draft session: the workflow facade driven by the front-end.

Each public method is one named transition. The facade owns the current
SessionState, runs the collaborator calls a transition needs, and applies
their outcomes through the state reducers. No method raises for collaborator
failures; they end up as `state.error` or in the log.
"""

import logging
from collections.abc import Callable, Mapping

from backend.app.accounts.client import AuthClient
from backend.app.accounts.service import AuthError
from backend.app.db.repositories import DocumentStore, ProfileStore, UsageLogStore
from backend.app.llm.client import DocumentGenerator
from backend.app.models.auth import AuthEvent, AuthSession, Identity
from backend.app.models.common import OperationStatus, Page
from backend.app.utils.logging import StructuredWorkflowLogger
from backend.app.utils.metrics import WorkflowMetrics
from backend.app.workflow.claim import ClaimReconciler
from backend.app.workflow.errors import AuthFailure, DraftError, OperationPending
from backend.app.workflow.generation import GenerationController
from backend.app.workflow.identity import IdentityTracker
from backend.app.workflow.state import SessionState, UserLoad

logger = logging.getLogger(__name__)

SIGNUP_NOTICE = "Account created. Please sign in to continue."


class DraftSession:
    """One browser session of the drafting workflow."""

    def __init__(
        self,
        generator: DocumentGenerator,
        documents: DocumentStore,
        profiles: ProfileStore,
        usage_logs: UsageLogStore,
        auth: AuthClient,
        *,
        metrics: WorkflowMetrics | None = None,
        log: StructuredWorkflowLogger | None = None,
        state: SessionState | None = None,
    ) -> None:
        metrics = metrics or WorkflowMetrics()
        log = log or StructuredWorkflowLogger()
        self._auth = auth
        self._generation = GenerationController(
            generator, documents, profiles, metrics=metrics, log=log
        )
        self._claims = ClaimReconciler(
            documents, usage_logs, profiles, metrics=metrics, log=log
        )
        self._identity = IdentityTracker(auth, documents, profiles)
        self._state = state or SessionState()
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    # --- lifecycle ----------------------------------------------------------

    async def start(self) -> SessionState:
        """Resolve the initial session and follow subsequent auth events."""
        identity = await self._identity.current_identity()
        await self.auth_transition(AuthEvent.INITIAL_SESSION, identity)
        if self._unsubscribe is None:
            self._unsubscribe = self._identity.subscribe(self._on_auth_event)
        return self._state

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def _on_auth_event(self, event: AuthEvent, session: AuthSession | None) -> None:
        await self.auth_transition(event, session.user if session else None)

    # --- view transitions ---------------------------------------------------

    def navigate(self, page: Page) -> SessionState:
        self._state = self._state.navigate(page)
        return self._state

    def select_template(self, template_id: str) -> SessionState:
        self._state = self._state.select_template(template_id)
        return self._state

    def clear_result(self) -> SessionState:
        self._state = self._state.clear_result()
        return self._state

    def open_document(self, doc_id: str) -> SessionState:
        """Reopen a history item; unknown ids leave the state unchanged."""
        for doc in self._state.history:
            if doc.id == doc_id:
                self._state = self._state.open_document(doc)
                break
        return self._state

    def request_export(self) -> str | None:
        """Text to copy or download, or None when the guest must sign in first."""
        self._state = self._state.request_export()
        if self._state.identity is None or self._state.active_doc is None:
            return None
        return self._state.active_doc.generated_text

    def dismiss_login_prompt(self) -> SessionState:
        self._state = self._state.dismiss_login_prompt()
        return self._state

    # --- generation ---------------------------------------------------------

    async def submit_generation(self, values: Mapping[str, object]) -> SessionState:
        """Validate, generate and (when signed in) persist and debit."""
        try:
            inputs = self._generation.validate(self._state, values)
        except DraftError as e:
            self._state = self._state.with_error(e)
            return self._state

        self._state = self._state.generation_pending()
        outcome = await self._generation.run(self._state, inputs)
        self._state = self._state.generation_finished(outcome)

        # Started as a guest, finished signed in: the sign-in saw no document to claim
        if outcome.user_id is None and self._state.identity is not None:
            await self.claim_document()
        return self._state

    # --- identity and claim -------------------------------------------------

    async def auth_transition(self, event: AuthEvent, identity: Identity | None) -> SessionState:
        """Apply an auth event: reset, load the user, claim a guest document."""
        prev = self._state.identity
        logger.info(f"Auth event {event.value}: {prev is not None} -> {identity is not None}")

        self._state = self._state.identity_changed(prev, identity)
        if identity is None:
            return self._state

        load = await self._identity.load_user(
            identity, include_history=self._identity.needs_history(prev, identity)
        )
        self._state = self._state.user_loaded(load)

        if self._identity.should_claim(prev, identity, self._state):
            await self.claim_document()

        return self._state

    async def claim_document(self) -> SessionState:
        """Persist the displayed guest document, at most once."""
        if not self._claims.can_claim(self._state):
            return self._state

        self._state = self._state.claim_pending()
        outcome = await self._claims.claim(self._state)
        self._state = self._state.claim_finished(outcome)
        return self._state

    async def refresh_history(self) -> SessionState:
        identity = self._state.identity
        if identity is None:
            return self._state
        history = await self._identity.fetch_history(identity)
        if history is not None:
            self._state = self._state.user_loaded(UserLoad(identity=identity, history=history))
        return self._state

    # --- auth forms ---------------------------------------------------------

    async def sign_in(self, email: str, password: str) -> SessionState:
        """Sign in; the SIGNED_IN event drives loading and claiming."""
        if self._state.auth == OperationStatus.PENDING:
            self._state = self._state.with_error(OperationPending())
            return self._state

        self._state = self._state.auth_pending()
        try:
            await self._auth.sign_in(email, password)
        except AuthError as e:
            self._state = self._state.auth_finished(error=AuthFailure(e.message))
            return self._state

        landing = Page.FORM if self._state.template_id else Page.HOME
        self._state = self._state.auth_finished().navigate(landing)
        return self._state

    async def sign_up(self, email: str, password: str) -> SessionState:
        """Register; the user still has to sign in afterwards."""
        if self._state.auth == OperationStatus.PENDING:
            self._state = self._state.with_error(OperationPending())
            return self._state

        self._state = self._state.auth_pending()
        try:
            await self._auth.sign_up(email, password)
        except AuthError as e:
            self._state = self._state.auth_finished(error=AuthFailure(e.message))
            return self._state

        self._state = self._state.auth_finished(notice=SIGNUP_NOTICE)
        return self._state

    async def sign_out(self) -> SessionState:
        """Sign out; the SIGNED_OUT event resets the session to a guest."""
        await self._auth.sign_out()
        return self._state
