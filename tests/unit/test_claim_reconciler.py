"""Unit tests for the guest-document claim reconciler."""

import pytest

from backend.app.db.inmemory import (
    InMemoryDocumentStore,
    InMemoryProfileStore,
    InMemoryUsageLogStore,
)
from backend.app.db.repositories import StorageError
from backend.app.models.auth import Identity
from backend.app.models.common import DocType, OperationStatus
from backend.app.models.documents import GeneratedDoc, new_transient_id
from backend.app.workflow.claim import CLAIM_ACTION, ClaimReconciler
from backend.app.workflow.errors import PersistenceFailure
from backend.app.workflow.state import GenerationOutcome, SessionState

USER = Identity(user_id="0b8f1c9e-2d55-4a4b-8f5e-6c1f0c2b7a10", email="asha@example.com")
INPUTS = {"name": "Asha", "type": "Sick", "startDate": "2025-01-01", "endDate": "2025-01-02", "reason": "fever"}


class BrokenDocumentStore(InMemoryDocumentStore):
    async def insert(
        self,
        user_id: str,
        *,
        document_type: DocType,
        input_data: dict[str, str] | None,
        generated_text: str,
    ) -> GeneratedDoc:
        raise StorageError("database unavailable")


def _guest_result_then_sign_in() -> SessionState:
    state = SessionState().select_template("leave")
    doc = GeneratedDoc(
        id=new_transient_id(),
        document_type=DocType.LEAVE_LETTER,
        generated_text="Dear Sir",
        input_data=dict(INPUTS),
    )
    state = state.generation_finished(
        GenerationOutcome(view_token=state.view_token, user_id=None, inputs=INPUTS, doc=doc)
    )
    return state.identity_changed(None, USER)


@pytest.fixture
def reconciler(
    documents: InMemoryDocumentStore,
    usage_logs: InMemoryUsageLogStore,
    profiles: InMemoryProfileStore,
) -> ClaimReconciler:
    return ClaimReconciler(documents, usage_logs, profiles)


def test_can_claim_requires_identity_and_transient_doc() -> None:
    """Test claim preconditions."""
    guest = SessionState().select_template("leave")
    signed_in = _guest_result_then_sign_in()

    assert not ClaimReconciler.can_claim(guest)
    assert ClaimReconciler.can_claim(signed_in)
    assert not ClaimReconciler.can_claim(signed_in.claim_pending())


@pytest.mark.asyncio
async def test_claim_persists_logs_usage_and_refreshes_profile(
    reconciler: ClaimReconciler,
    documents: InMemoryDocumentStore,
    usage_logs: InMemoryUsageLogStore,
    profiles: InMemoryProfileStore,
) -> None:
    """Test a claim stores the doc, logs one credit and returns the new balance."""
    await profiles.create(USER.user_id, USER.email, plan="free", credits_remaining=3)
    state = _guest_result_then_sign_in()
    transient = state.active_doc
    assert transient is not None

    outcome = await reconciler.claim(state)

    assert outcome.error is None
    assert outcome.doc is not None
    assert not outcome.doc.is_transient
    assert outcome.doc.generated_text == transient.generated_text
    assert outcome.transient_id == transient.id

    stored = await documents.list_for_owner(USER.user_id)
    assert [d.id for d in stored] == [outcome.doc.id]
    assert stored[0].input_data == INPUTS

    assert len(usage_logs.entries) == 1
    entry = usage_logs.entries[0]
    assert (entry.action, entry.credits_used, entry.doc_id) == (CLAIM_ACTION, 1, outcome.doc.id)

    assert outcome.profile is not None
    assert outcome.profile.credits_remaining == 2


@pytest.mark.asyncio
async def test_claim_of_persisted_doc_is_skipped(
    reconciler: ClaimReconciler, documents: InMemoryDocumentStore
) -> None:
    """Test a document that already has a permanent id is never claimed again."""
    state = _guest_result_then_sign_in()
    assert state.active_doc is not None
    state = SessionState(
        identity=USER,
        active_doc=state.active_doc.promoted("7b0f4b1e-7f7e-4b8c-9d51-3a0d1f6f2b11"),
    )

    outcome = await reconciler.claim(state)

    assert outcome.skipped
    assert documents.count_for_owner(USER.user_id) == 0


@pytest.mark.asyncio
async def test_claim_failure_is_reported_not_raised(
    usage_logs: InMemoryUsageLogStore, profiles: InMemoryProfileStore
) -> None:
    """Test a storage failure yields a PersistenceFailure outcome and no usage entry."""
    reconciler = ClaimReconciler(BrokenDocumentStore(), usage_logs, profiles)
    state = _guest_result_then_sign_in()

    outcome = await reconciler.claim(state)

    assert outcome.doc is None
    assert outcome.error == PersistenceFailure()
    assert usage_logs.entries == []

    finished = state.claim_pending().claim_finished(outcome)
    assert finished.claim == OperationStatus.FAILED
    assert finished.has_unclaimed_document
    assert not ClaimReconciler.can_claim(finished)


@pytest.mark.asyncio
async def test_claim_floors_credits_at_zero(
    reconciler: ClaimReconciler, profiles: InMemoryProfileStore
) -> None:
    """Test claiming with an empty balance keeps it at zero."""
    await profiles.create(USER.user_id, USER.email, plan="free", credits_remaining=0)

    outcome = await reconciler.claim(_guest_result_then_sign_in())

    assert outcome.profile is not None
    assert outcome.profile.credits_remaining == 0
