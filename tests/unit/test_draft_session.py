"""Workflow tests for the DraftSession facade over in-memory collaborators."""

import asyncio
from typing import Any

import pytest

from backend.app.accounts.client import LocalAuthClient
from backend.app.accounts.service import AccountService
from backend.app.db.inmemory import (
    InMemoryDocumentStore,
    InMemoryProfileStore,
    InMemoryUsageLogStore,
)
from backend.app.models.auth import AuthEvent
from backend.app.models.common import DocType, OperationStatus, Page
from backend.app.workflow.errors import (
    AuthFailure,
    DuplicateSubmission,
    GenerationFailure,
    QuotaExhausted,
)
from backend.app.workflow.session import SIGNUP_NOTICE, DraftSession

ASHA_LEAVE = {
    "name": "Asha",
    "type": "Sick",
    "startDate": "2025-01-01",
    "endDate": "2025-01-02",
    "reason": "fever",
}


async def _user_id(account_service: AccountService, credentials: tuple[str, str]) -> str:
    session = await account_service.sign_in(*credentials)
    return session.user.user_id


@pytest.mark.asyncio
async def test_guest_generation_then_sign_in_claims_document(
    draft_session: DraftSession,
    generator: Any,
    documents: InMemoryDocumentStore,
    usage_logs: InMemoryUsageLogStore,
    registered_user: tuple[str, str],
) -> None:
    """Test the guest leave-letter scenario end to end."""
    draft_session.select_template("leave")
    state = await draft_session.submit_generation(ASHA_LEAVE)

    guest_doc = state.active_doc
    assert guest_doc is not None
    assert guest_doc.is_transient
    assert guest_doc.document_type == DocType.LEAVE_LETTER
    assert guest_doc.generated_text == generator.text
    assert state.profile is None
    assert state.history == ()

    state = await draft_session.sign_in(*registered_user)

    assert state.identity is not None
    assert len(state.history) == 1
    claimed = state.history[0]
    assert not claimed.is_transient
    assert claimed.generated_text == generator.text
    assert claimed.input_data == ASHA_LEAVE
    assert state.active_doc == claimed
    assert state.claim == OperationStatus.SUCCEEDED
    # Sign-up grants 3; the claim takes exactly one
    assert state.profile is not None
    assert state.profile.credits_remaining == 2
    assert documents.count_for_owner(state.identity.user_id) == 1
    assert len(usage_logs.entries) == 1
    assert state.page == Page.FORM


class GatedGenerator:
    """Generator that holds its result until `release` is set."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def generate(self, document_type: DocType, field_values: dict[str, str]) -> str:
        self.started.set()
        await self.release.wait()
        return self.text


@pytest.mark.asyncio
async def test_sign_in_during_guest_generation_claims_result(
    generator: Any,
    documents: InMemoryDocumentStore,
    profiles: InMemoryProfileStore,
    usage_logs: InMemoryUsageLogStore,
    auth_client: LocalAuthClient,
    registered_user: tuple[str, str],
) -> None:
    """Test a guest draft that lands after sign-in is still claimed once."""
    gated = GatedGenerator(generator.text)
    session = DraftSession(gated, documents, profiles, usage_logs, auth_client)
    await session.start()
    session.select_template("leave")

    pending = asyncio.create_task(session.submit_generation(ASHA_LEAVE))
    await gated.started.wait()
    await session.sign_in(*registered_user)

    assert session.state.identity is not None
    assert session.state.active_doc is None
    assert session.state.generation == OperationStatus.PENDING

    gated.release.set()
    state = await pending
    session.close()

    assert state.active_doc is not None
    assert not state.active_doc.is_transient
    assert state.active_doc.generated_text == generator.text
    assert state.claim == OperationStatus.SUCCEEDED
    assert state.history == (state.active_doc,)
    assert state.profile is not None
    assert state.profile.credits_remaining == 2
    assert documents.count_for_owner(state.identity.user_id) == 1
    assert len(usage_logs.entries) == 1


@pytest.mark.asyncio
async def test_repeated_auth_events_claim_at_most_once(
    draft_session: DraftSession,
    auth_client: LocalAuthClient,
    account_service: AccountService,
    documents: InMemoryDocumentStore,
    usage_logs: InMemoryUsageLogStore,
    registered_user: tuple[str, str],
) -> None:
    """Test duplicate SIGNED_IN and TOKEN_REFRESHED events never re-claim."""
    draft_session.select_template("leave")
    await draft_session.submit_generation(ASHA_LEAVE)
    session = await account_service.sign_in(*registered_user)

    await asyncio.gather(
        draft_session.auth_transition(AuthEvent.SIGNED_IN, session.user),
        draft_session.auth_transition(AuthEvent.SIGNED_IN, session.user),
    )
    await draft_session.auth_transition(AuthEvent.SIGNED_IN, session.user)
    await draft_session.claim_document()

    assert documents.count_for_owner(session.user.user_id) == 1
    assert len(usage_logs.entries) == 1
    assert draft_session.state.profile is not None
    assert draft_session.state.profile.credits_remaining == 2


@pytest.mark.asyncio
async def test_token_refresh_does_not_reclaim(
    draft_session: DraftSession,
    auth_client: LocalAuthClient,
    documents: InMemoryDocumentStore,
    usage_logs: InMemoryUsageLogStore,
    registered_user: tuple[str, str],
) -> None:
    """Test a TOKEN_REFRESHED event after the claim changes nothing."""
    draft_session.select_template("leave")
    await draft_session.submit_generation(ASHA_LEAVE)
    await draft_session.sign_in(*registered_user)

    await auth_client.refresh_session()

    state = draft_session.state
    assert state.identity is not None
    assert documents.count_for_owner(state.identity.user_id) == 1
    assert len(usage_logs.entries) == 1
    assert len(state.history) == 1


@pytest.mark.asyncio
async def test_sign_out_resets_to_guest(
    draft_session: DraftSession, registered_user: tuple[str, str]
) -> None:
    """Test sign-out clears profile, history, result and selection."""
    await draft_session.sign_in(*registered_user)
    draft_session.select_template("leave")
    await draft_session.submit_generation(ASHA_LEAVE)
    assert draft_session.state.history

    state = await draft_session.sign_out()

    assert state.identity is None
    assert state.profile is None
    assert state.history == ()
    assert state.active_doc is None
    assert state.template_id is None
    assert state.guard.armed


@pytest.mark.asyncio
async def test_history_is_fetched_fresh_after_sign_in_again(
    draft_session: DraftSession, registered_user: tuple[str, str]
) -> None:
    """Test signing back in reloads history from storage."""
    await draft_session.sign_in(*registered_user)
    draft_session.select_template("leave")
    await draft_session.submit_generation(ASHA_LEAVE)
    await draft_session.sign_out()

    state = await draft_session.sign_in(*registered_user)

    assert len(state.history) == 1
    assert state.profile is not None
    assert state.profile.credits_remaining == 2


@pytest.mark.asyncio
async def test_signed_in_generation_debits_one_credit(
    draft_session: DraftSession, registered_user: tuple[str, str]
) -> None:
    """Test each persisted generation takes exactly one credit."""
    await draft_session.sign_in(*registered_user)
    draft_session.select_template("leave")

    await draft_session.submit_generation(ASHA_LEAVE)
    state = await draft_session.submit_generation({**ASHA_LEAVE, "reason": "flu"})

    assert state.profile is not None
    assert state.profile.credits_remaining == 1
    assert len(state.history) == 2
    assert state.history[0].input_data is not None
    assert state.history[0].input_data["reason"] == "flu"


@pytest.mark.asyncio
async def test_quota_exhausted_makes_no_generation_call(
    draft_session: DraftSession,
    generator: Any,
    profiles: InMemoryProfileStore,
    account_service: AccountService,
    registered_user: tuple[str, str],
) -> None:
    """Test a user with no credits is stopped before the generator is called."""
    await profiles.update_credits(await _user_id(account_service, registered_user), 0)
    await draft_session.sign_in(*registered_user)
    draft_session.select_template("leave")

    state = await draft_session.submit_generation(ASHA_LEAVE)

    assert state.error == QuotaExhausted()
    assert generator.calls == []
    assert state.active_doc is None


@pytest.mark.asyncio
async def test_duplicate_submission_skips_generator(
    draft_session: DraftSession, generator: Any
) -> None:
    """Test identical input is rejected and changed input accepted."""
    draft_session.select_template("leave")
    await draft_session.submit_generation({**ASHA_LEAVE, "name": "A"})

    state = await draft_session.submit_generation({**ASHA_LEAVE, "name": "A"})
    assert state.error == DuplicateSubmission()
    assert len(generator.calls) == 1

    state = await draft_session.submit_generation({**ASHA_LEAVE, "name": "B"})
    assert state.error is None
    assert len(generator.calls) == 2


@pytest.mark.asyncio
async def test_switching_template_rearms_duplicate_guard(
    draft_session: DraftSession, generator: Any
) -> None:
    """Test the same input is accepted again after re-selecting the template."""
    draft_session.select_template("leave")
    await draft_session.submit_generation(ASHA_LEAVE)
    draft_session.select_template("bank")
    draft_session.select_template("leave")

    state = await draft_session.submit_generation(ASHA_LEAVE)

    assert state.error is None
    assert len(generator.calls) == 2


@pytest.mark.asyncio
async def test_generation_failure_is_shown(
    documents: InMemoryDocumentStore,
    profiles: InMemoryProfileStore,
    usage_logs: InMemoryUsageLogStore,
    auth_client: LocalAuthClient,
    make_generator: Any,
) -> None:
    """Test a failed generation surfaces the no-charge message."""
    session = DraftSession(
        make_generator(text=""), documents, profiles, usage_logs, auth_client
    )
    await session.start()
    session.select_template("leave")

    state = await session.submit_generation(ASHA_LEAVE)

    assert state.error == GenerationFailure()
    assert state.generation == OperationStatus.FAILED
    assert state.active_doc is None


@pytest.mark.asyncio
async def test_open_document_from_history(
    draft_session: DraftSession, registered_user: tuple[str, str]
) -> None:
    """Test reopening a record restores it and guards its inputs."""
    await draft_session.sign_in(*registered_user)
    draft_session.select_template("leave")
    await draft_session.submit_generation(ASHA_LEAVE)
    draft_session.navigate(Page.RECORDS)
    saved = draft_session.state.history[0]

    state = draft_session.open_document(saved.id)

    assert state.page == Page.FORM
    assert state.active_doc == saved
    assert state.active_inputs == ASHA_LEAVE
    state = await draft_session.submit_generation(ASHA_LEAVE)
    assert state.error == DuplicateSubmission()


@pytest.mark.asyncio
async def test_export_requires_sign_in(
    draft_session: DraftSession, generator: Any, registered_user: tuple[str, str]
) -> None:
    """Test guests get the login prompt and signed-in users get the text."""
    draft_session.select_template("leave")
    await draft_session.submit_generation(ASHA_LEAVE)

    assert draft_session.request_export() is None
    assert draft_session.state.show_login_prompt

    draft_session.dismiss_login_prompt()
    await draft_session.sign_in(*registered_user)

    assert draft_session.request_export() == generator.text
    assert not draft_session.state.show_login_prompt


@pytest.mark.asyncio
async def test_sign_in_failure_surfaces_message(
    draft_session: DraftSession, registered_user: tuple[str, str]
) -> None:
    """Test rejected credentials are shown and leave the user a guest."""
    email, _ = registered_user

    state = await draft_session.sign_in(email, "wrong-password")

    assert state.identity is None
    assert state.auth == OperationStatus.FAILED
    assert state.error == AuthFailure("Invalid login credentials")


@pytest.mark.asyncio
async def test_sign_up_shows_notice_without_signing_in(draft_session: DraftSession) -> None:
    """Test sign-up asks the user to sign in next."""
    draft_session.navigate(Page.AUTH)

    state = await draft_session.sign_up("new@example.com", "secret123")

    assert state.notice == SIGNUP_NOTICE
    assert state.identity is None
    assert state.auth == OperationStatus.SUCCEEDED


@pytest.mark.asyncio
async def test_start_restores_existing_session(
    generator: Any,
    documents: InMemoryDocumentStore,
    profiles: InMemoryProfileStore,
    usage_logs: InMemoryUsageLogStore,
    auth_client: LocalAuthClient,
    registered_user: tuple[str, str],
) -> None:
    """Test the initial session is resolved with profile and history."""
    await auth_client.sign_in(*registered_user)
    session = DraftSession(generator, documents, profiles, usage_logs, auth_client)

    state = await session.start()

    assert state.identity is not None
    assert state.profile is not None
    assert state.profile.credits_remaining == 3
    session.close()
