"""Session state for the drafting workflow.

A single immutable value replaces the front-end's scattered flags. Every
transition returns a new SessionState; operation outcomes are applied through
reducers that receive the outcome explicitly instead of reading captured
variables.
"""

from dataclasses import dataclass, field, replace

from backend.app.catalog import get_template, template_for_type
from backend.app.models.auth import Identity
from backend.app.models.common import OperationStatus, Page
from backend.app.models.documents import GeneratedDoc, UserProfile
from backend.app.models.templates import DocConfig
from backend.app.workflow.errors import DraftError
from backend.app.workflow.guard import DuplicateGuard


@dataclass(frozen=True)
class GenerationOutcome:
    """Result of one generation attempt, applied by `generation_finished`."""

    view_token: int
    user_id: str | None
    inputs: dict[str, str]
    doc: GeneratedDoc | None = None
    profile: UserProfile | None = None
    error: DraftError | None = None


@dataclass(frozen=True)
class ClaimOutcome:
    """Result of one claim attempt, applied by `claim_finished`."""

    user_id: str
    transient_id: str
    doc: GeneratedDoc | None = None
    profile: UserProfile | None = None
    error: DraftError | None = None
    skipped: bool = False


@dataclass(frozen=True)
class UserLoad:
    """Profile and (optionally) history fetched for an identity."""

    identity: Identity
    profile: UserProfile | None = None
    history: tuple[GeneratedDoc, ...] | None = None


@dataclass(frozen=True)
class SessionState:
    """Everything the front-end displays for one browser session."""

    page: Page = Page.HOME
    identity: Identity | None = None
    profile: UserProfile | None = None
    history: tuple[GeneratedDoc, ...] = ()

    template_id: str | None = None
    active_doc: GeneratedDoc | None = None
    active_inputs: dict[str, str] | None = None
    guard: DuplicateGuard = field(default_factory=DuplicateGuard)
    # Bumped whenever the displayed result is invalidated
    view_token: int = 0

    generation: OperationStatus = OperationStatus.IDLE
    auth: OperationStatus = OperationStatus.IDLE
    claim: OperationStatus = OperationStatus.IDLE

    error: DraftError | None = None
    notice: str | None = None
    show_login_prompt: bool = False

    # --- derived -----------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def template(self) -> DocConfig | None:
        return get_template(self.template_id) if self.template_id else None

    @property
    def can_submit(self) -> bool:
        """Generate control is enabled."""
        return self.template_id is not None and self.generation != OperationStatus.PENDING

    @property
    def has_unclaimed_document(self) -> bool:
        return self.active_doc is not None and self.active_doc.is_transient

    def _owned_by(self, user_id: str | None) -> bool:
        return user_id is not None and self.identity is not None and self.identity.user_id == user_id

    # --- navigation and selection -------------------------------------------

    def navigate(self, page: Page) -> "SessionState":
        return replace(self, page=page, show_login_prompt=False)

    def select_template(self, template_id: str) -> "SessionState":
        """Show a fresh form for `template_id` (KeyError if unknown)."""
        get_template(template_id)
        return replace(
            self._without_result(),
            template_id=template_id,
            page=Page.FORM,
            error=None,
        )

    def clear_result(self) -> "SessionState":
        return replace(self._without_result(), error=None)

    def open_document(self, doc: GeneratedDoc) -> "SessionState":
        """Reopen a history item in the form view."""
        config = template_for_type(doc.document_type)
        inputs = dict(doc.input_data) if doc.input_data else None
        base = self._without_result()
        return replace(
            base,
            template_id=config.id if config else None,
            active_doc=doc,
            active_inputs=inputs,
            guard=base.guard.record(inputs) if inputs else base.guard,
            page=Page.FORM,
            error=None,
        )

    def _without_result(self) -> "SessionState":
        return replace(
            self,
            active_doc=None,
            active_inputs=None,
            guard=self.guard.rearm(),
            view_token=self.view_token + 1,
            claim=OperationStatus.IDLE,
            show_login_prompt=False,
        )

    # --- messages -----------------------------------------------------------

    def with_error(self, error: DraftError | None) -> "SessionState":
        return replace(self, error=error)

    def with_notice(self, notice: str | None) -> "SessionState":
        return replace(self, notice=notice)

    def request_export(self) -> "SessionState":
        """Guests are prompted to sign in before copying or downloading."""
        if self.identity is None:
            return replace(self, show_login_prompt=True)
        return self

    def dismiss_login_prompt(self) -> "SessionState":
        return replace(self, show_login_prompt=False)

    # --- generation ---------------------------------------------------------

    def generation_pending(self) -> "SessionState":
        return replace(self, generation=OperationStatus.PENDING, error=None, notice=None)

    def generation_finished(self, outcome: GenerationOutcome) -> "SessionState":
        """Apply a generation outcome.

        Storage effects (profile, history) are kept even when the view has
        moved on; the document itself is only shown if the view is unchanged.
        """
        state = self
        if outcome.profile is not None and state._owned_by(outcome.user_id):
            state = replace(state, profile=outcome.profile)
        if (
            outcome.doc is not None
            and not outcome.doc.is_transient
            and state._owned_by(outcome.user_id)
        ):
            state = replace(state, history=(outcome.doc, *state.history))

        if outcome.view_token != state.view_token:
            return replace(state, generation=OperationStatus.IDLE)

        if outcome.error is not None or outcome.doc is None:
            return replace(state, generation=OperationStatus.FAILED, error=outcome.error)

        return replace(
            state,
            active_doc=outcome.doc,
            active_inputs=dict(outcome.inputs),
            guard=state.guard.record(outcome.inputs),
            generation=OperationStatus.SUCCEEDED,
            claim=OperationStatus.IDLE,
            error=None,
        )

    # --- identity -----------------------------------------------------------

    def identity_changed(self, prev: Identity | None, new: Identity | None) -> "SessionState":
        """Apply an auth transition from `prev` to `new`.

        Signing out (or switching user) drops every artifact of the previous
        user: profile, history, displayed document and template selection.
        """
        if new is None and prev is None:
            return self

        if new is None:
            return SessionState(
                page=Page.AUTH if self.page == Page.AUTH else Page.HOME,
                view_token=self.view_token + 1,
                generation=self.generation,
                notice=self.notice,
            )

        if prev is not None and prev.user_id != new.user_id:
            return SessionState(
                page=Page.HOME,
                identity=new,
                view_token=self.view_token + 1,
                generation=self.generation,
            )

        return replace(self, identity=new)

    def user_loaded(self, load: UserLoad) -> "SessionState":
        if not self._owned_by(load.identity.user_id):
            return self
        state = self
        if load.profile is not None:
            state = replace(state, profile=load.profile)
        if load.history is not None:
            state = replace(state, history=load.history)
        return state

    # --- claim --------------------------------------------------------------

    def claim_pending(self) -> "SessionState":
        return replace(self, claim=OperationStatus.PENDING)

    def claim_finished(self, outcome: ClaimOutcome) -> "SessionState":
        if outcome.skipped:
            return replace(self, claim=OperationStatus.IDLE)

        state = self
        if outcome.profile is not None and state._owned_by(outcome.user_id):
            state = replace(state, profile=outcome.profile)

        if outcome.doc is None:
            return replace(state, claim=OperationStatus.FAILED)

        if state.active_doc is not None and state.active_doc.id == outcome.transient_id:
            state = replace(state, active_doc=outcome.doc)
        if state._owned_by(outcome.user_id) and all(d.id != outcome.doc.id for d in state.history):
            state = replace(state, history=(outcome.doc, *state.history))

        return replace(state, claim=OperationStatus.SUCCEEDED)

    # --- auth forms ---------------------------------------------------------

    def auth_pending(self) -> "SessionState":
        return replace(self, auth=OperationStatus.PENDING, error=None, notice=None)

    def auth_finished(
        self, *, error: DraftError | None = None, notice: str | None = None
    ) -> "SessionState":
        if error is not None:
            return replace(self, auth=OperationStatus.FAILED, error=error)
        return replace(self, auth=OperationStatus.SUCCEEDED, notice=notice)
