"""Generation controller.

validate request -> call the generator -> persist and debit (authenticated
only) -> describe the result as a GenerationOutcome.

The debit is only issued after the generator returned non-empty text and the
document was persisted, so a failed or empty generation never costs a credit.
"""

import logging
import time
from collections.abc import Callable, Mapping

from backend.app.db.repositories import DocumentStore, ProfileStore
from backend.app.llm.client import DocumentGenerator, GenerationError, GenerationRateLimited
from backend.app.models.auth import Identity
from backend.app.models.common import OperationStatus
from backend.app.models.documents import GeneratedDoc, UserProfile, new_transient_id
from backend.app.models.templates import DocConfig
from backend.app.utils.logging import StructuredWorkflowLogger
from backend.app.utils.metrics import WorkflowMetrics
from backend.app.workflow.errors import (
    GenerationFailure,
    InvalidSubmission,
    OperationPending,
    QuotaExhausted,
)
from backend.app.workflow.state import GenerationOutcome, SessionState

logger = logging.getLogger(__name__)


def normalize_submission(template: DocConfig, values: Mapping[str, object]) -> dict[str, str]:
    """Keep declared fields only, as stripped strings, in template order.

    Raises:
        InvalidSubmission: If a required field is blank
    """
    normalized: dict[str, str] = {}
    missing: list[str] = []
    for form_field in template.fields:
        raw = values.get(form_field.name)
        value = "" if raw is None else str(raw).strip()
        if form_field.required and not value:
            missing.append(form_field.label)
        normalized[form_field.name] = value

    if missing:
        raise InvalidSubmission(f"Please fill in: {', '.join(missing)}")

    return normalized


class GenerationController:
    """Orchestrates one document generation for a session."""

    def __init__(
        self,
        generator: DocumentGenerator,
        documents: DocumentStore,
        profiles: ProfileStore,
        *,
        metrics: WorkflowMetrics | None = None,
        log: StructuredWorkflowLogger | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._generator = generator
        self._documents = documents
        self._profiles = profiles
        self._metrics = metrics or WorkflowMetrics()
        self._log = log or StructuredWorkflowLogger()
        self._clock = clock

    def validate(self, state: SessionState, values: Mapping[str, object]) -> dict[str, str]:
        """Check every precondition before any collaborator call.

        Returns:
            The normalized field values

        Raises:
            OperationPending: A generation is already in flight
            InvalidSubmission: No template selected or required fields blank
            QuotaExhausted: Authenticated user with no credits
            DuplicateSubmission: Same input as the result still displayed
        """
        if state.generation == OperationStatus.PENDING:
            raise OperationPending()

        template = state.template
        if template is None:
            raise InvalidSubmission()

        if (
            state.identity is not None
            and state.profile is not None
            and state.profile.credits_remaining <= 0
        ):
            raise QuotaExhausted()

        inputs = normalize_submission(template, values)

        if state.active_doc is not None:
            state.guard.check(inputs)

        return inputs

    async def run(self, state: SessionState, inputs: dict[str, str]) -> GenerationOutcome:
        """Generate, then persist and debit when signed in.

        Collaborator failures are reported in the outcome, not raised.

        Raises:
            InvalidSubmission: No template selected
        """
        template = state.template
        if template is None:
            raise InvalidSubmission()
        identity = state.identity
        user_id = identity.user_id if identity else None

        start = self._clock()
        try:
            text = (await self._generator.generate(template.type, inputs)).strip()
        except GenerationRateLimited as e:
            return self._failed(state, template, inputs, start, "rate_limited", e.message)
        except GenerationError:
            return self._failed(state, template, inputs, start, "generation_error")
        except Exception as e:
            logger.error(f"Unexpected generator failure: {e}")
            return self._failed(state, template, inputs, start, "unexpected")

        if not text:
            return self._failed(state, template, inputs, start, "empty")

        doc = GeneratedDoc(
            id=new_transient_id(),
            document_type=template.type,
            generated_text=text,
            input_data=dict(inputs),
        )
        profile = state.profile

        if identity is not None:
            doc, profile = await self._persist_and_debit(identity, profile, doc)

        elapsed_ms = (self._clock() - start) * 1000
        self._metrics.record_generation(template.id, "success", elapsed_ms)
        self._log.log_generation(
            template.id, "success", elapsed_ms, user_id=user_id, doc_id=doc.id
        )

        return GenerationOutcome(
            view_token=state.view_token,
            user_id=user_id,
            inputs=inputs,
            doc=doc,
            profile=profile,
        )

    async def _persist_and_debit(
        self, identity: Identity, profile: UserProfile | None, doc: GeneratedDoc
    ) -> tuple[GeneratedDoc, UserProfile | None]:
        """Save the document and take one credit; failures are logged only."""
        try:
            saved = await self._documents.insert(
                identity.user_id,
                document_type=doc.document_type,
                input_data=doc.input_data,
                generated_text=doc.generated_text,
            )
        except Exception as e:
            logger.error(f"Failed to save generated document for {identity.user_id}: {e}")
            return doc, profile

        doc = doc.promoted(saved.id)

        # TODO: replace read-modify-write with a server-side decrement-if-positive
        # once the profile API exposes one; concurrent sessions can race here.
        try:
            if profile is None:
                profile = await self._profiles.get(identity.user_id)
            current = profile.credits_remaining if profile else 0
            profile = await self._profiles.update_credits(identity.user_id, max(0, current - 1))
            self._metrics.inc_credits_debited("generation")
        except Exception as e:
            logger.error(f"Failed to debit credit for {identity.user_id}: {e}")

        return doc, profile

    def _failed(
        self,
        state: SessionState,
        template: DocConfig,
        inputs: dict[str, str],
        start: float,
        reason: str,
        message: str | None = None,
    ) -> GenerationOutcome:
        elapsed_ms = (self._clock() - start) * 1000
        self._metrics.record_generation(template.id, "failed", elapsed_ms)
        self._metrics.inc_generation_error(reason)
        self._log.log_generation(
            template.id,
            "failed",
            elapsed_ms,
            user_id=state.identity.user_id if state.identity else None,
            error_reason=reason,
        )
        return GenerationOutcome(
            view_token=state.view_token,
            user_id=state.identity.user_id if state.identity else None,
            inputs=inputs,
            error=GenerationFailure(message),
        )
