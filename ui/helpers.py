"""Helper functions for the UI - session wiring and pure view formatting."""

import asyncio
import re
from collections.abc import Coroutine
from typing import Any, TypeVar

from backend.app.models.documents import GeneratedDoc, UserProfile
from backend.app.models.templates import FormField
from backend.app.workflow.session import DraftSession
from backend.app.workflow.state import SessionState
from ui.clients import (
    ApiTransport,
    HttpAuthClient,
    HttpDocumentGenerator,
    HttpDocumentStore,
    HttpProfileStore,
    HttpUsageLogStore,
)

T = TypeVar("T")

PREVIEW_CHARS = 120


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a workflow coroutine from Streamlit's synchronous script."""
    return asyncio.run(coro)


def make_session(backend_url: str, timeout: float = 60.0) -> DraftSession:
    """Wire a DraftSession to the REST API.

    Args:
        backend_url: Backend base URL (e.g. http://localhost:8000)
        timeout: Per-request timeout in seconds

    Returns:
        An unstarted DraftSession; call `start()` once
    """
    api = ApiTransport(backend_url, timeout=timeout)
    auth = HttpAuthClient(api)
    return DraftSession(
        generator=HttpDocumentGenerator(api, auth),
        documents=HttpDocumentStore(api, auth),
        profiles=HttpProfileStore(api, auth),
        usage_logs=HttpUsageLogStore(api, auth),
        auth=auth,
    )


def credit_badge(profile: UserProfile | None) -> str:
    """Header credit display for signed-in users."""
    if profile is None:
        return "Credits: ..."
    noun = "credit" if profile.credits_remaining == 1 else "credits"
    return f"{profile.credits_remaining} {noun} left"


def preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    """First `limit` characters of a draft on one line."""
    flat = " ".join(text.split())
    if len(flat) <= limit:
        return flat
    return flat[: limit - 1].rstrip() + "…"


def history_rows(history: tuple[GeneratedDoc, ...]) -> list[dict[str, str]]:
    """Build the records list, newest first as stored.

    Returns:
        List of dicts with id, title, created and preview
    """
    return [
        {
            "id": doc.id,
            "title": doc.document_type.value,
            "created": doc.created_at.strftime("%d %b %Y, %H:%M"),
            "preview": preview(doc.generated_text),
        }
        for doc in history
    ]


def export_filename(doc: GeneratedDoc) -> str:
    """Plain-text download name, e.g. `leave-letter-2025-01-01.txt`."""
    slug = re.sub(r"[^a-z0-9]+", "-", doc.document_type.value.lower()).strip("-")
    return f"{slug}-{doc.created_at.strftime('%Y-%m-%d')}.txt"


def widget_kind(form_field: FormField) -> str:
    """Streamlit widget used for a field: text_input, text_area or date_input."""
    return {"textarea": "text_area", "date": "date_input"}.get(form_field.type, "text_input")


def field_label(form_field: FormField) -> str:
    return f"{form_field.label} *" if form_field.required else form_field.label


def status_banner(state: SessionState) -> tuple[str, str] | None:
    """(kind, message) for the banner above the form, None when quiet."""
    if state.error is not None:
        return ("error", state.error.message)
    if state.notice:
        return ("success", state.notice)
    return None
