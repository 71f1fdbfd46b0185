"""Claim reconciler: persist a guest-generated document after sign-in."""

import logging

from backend.app.db.repositories import DocumentStore, ProfileStore, UsageLogStore
from backend.app.models.common import OperationStatus
from backend.app.utils.logging import StructuredWorkflowLogger
from backend.app.utils.metrics import WorkflowMetrics
from backend.app.workflow.errors import PersistenceFailure
from backend.app.workflow.state import ClaimOutcome, SessionState

logger = logging.getLogger(__name__)

CLAIM_ACTION = "claim_guest_document"


class ClaimReconciler:
    """Converts the displayed transient document into a persisted one, once.

    The transient id is the single-claim guard: once the document carries a
    storage id, claiming it again is a no-op. The credit for a claim is taken
    by the usage-log write on the storage side; the profile is re-read
    afterwards to pick up the new balance.
    """

    def __init__(
        self,
        documents: DocumentStore,
        usage_logs: UsageLogStore,
        profiles: ProfileStore,
        *,
        metrics: WorkflowMetrics | None = None,
        log: StructuredWorkflowLogger | None = None,
    ) -> None:
        self._documents = documents
        self._usage_logs = usage_logs
        self._profiles = profiles
        self._metrics = metrics or WorkflowMetrics()
        self._log = log or StructuredWorkflowLogger()

    @staticmethod
    def can_claim(state: SessionState) -> bool:
        """Signed in, a transient document displayed, and no claim attempted for it."""
        return (
            state.identity is not None
            and state.has_unclaimed_document
            and state.claim == OperationStatus.IDLE
        )

    async def claim(self, state: SessionState) -> ClaimOutcome:
        """Persist the displayed document under the signed-in user. Never raises."""
        doc = state.active_doc
        identity = state.identity
        if identity is None or doc is None or not doc.is_transient:
            return ClaimOutcome(
                user_id=identity.user_id if identity else "",
                transient_id=doc.id if doc else "",
                skipped=True,
            )

        user_id = identity.user_id
        inputs = state.active_inputs if state.active_inputs is not None else doc.input_data

        try:
            saved = await self._documents.insert(
                user_id,
                document_type=doc.document_type,
                input_data=inputs,
                generated_text=doc.generated_text,
            )
        except Exception as e:
            logger.error(f"Failed to claim document: {e}")
            self._metrics.inc_claim("failed")
            self._log.log_claim(user_id, doc.id, "failed", error_reason=type(e).__name__)
            return ClaimOutcome(
                user_id=user_id, transient_id=doc.id, error=PersistenceFailure()
            )

        claimed = doc.promoted(saved.id)

        try:
            await self._usage_logs.append(
                user_id, action=CLAIM_ACTION, credits_used=1, doc_id=saved.id
            )
            self._metrics.inc_credits_debited("claim")
        except Exception as e:
            logger.error(f"Failed to record usage for claimed document {saved.id}: {e}")

        profile = None
        try:
            profile = await self._profiles.get(user_id)
        except Exception as e:
            logger.warning(f"Profile refresh after claim failed: {e}")

        self._metrics.inc_claim("success")
        self._log.log_claim(user_id, doc.id, "success", doc_id=saved.id)

        return ClaimOutcome(
            user_id=user_id, transient_id=doc.id, doc=claimed, profile=profile
        )
