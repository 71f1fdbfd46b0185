"""Streamlit UI for DraftIt - pick a template, fill the form, get a draft.

Run with: streamlit run ui/app.py
"""

# Add project root to sys.path for imports to work when run via streamlit
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from datetime import date  # noqa: E402

import streamlit as st  # noqa: E402

from backend.app.catalog import list_templates  # noqa: E402
from backend.app.config import get_settings  # noqa: E402
from backend.app.models.common import OperationStatus, Page  # noqa: E402
from backend.app.models.templates import DocConfig  # noqa: E402
from backend.app.workflow.session import DraftSession  # noqa: E402
from ui.helpers import (  # noqa: E402
    credit_badge,
    export_filename,
    field_label,
    history_rows,
    make_session,
    run_async,
    status_banner,
    widget_kind,
)

settings = get_settings()

# Page config
st.set_page_config(page_title="DraftIt", page_icon="📝", layout="wide")

# One workflow session per browser session
if "draft" not in st.session_state:
    draft = make_session(settings.backend_url, settings.http_timeout_seconds)
    run_async(draft.start())
    st.session_state.draft = draft

draft: DraftSession = st.session_state.draft
state = draft.state


def _rerun_after(result: object) -> None:
    st.rerun()


# =============================================================================
# HEADER
# =============================================================================
col_title, col_nav, col_user = st.columns([2, 2, 1.5])

with col_title:
    st.title("📝 DraftIt")
    st.caption("Formal letters in seconds")

with col_nav:
    nav_home, nav_records = st.columns(2)
    if nav_home.button("Templates", use_container_width=True):
        _rerun_after(draft.navigate(Page.HOME))
    if state.is_authenticated and nav_records.button("My Records", use_container_width=True):
        _rerun_after(draft.navigate(Page.RECORDS))

with col_user:
    if state.identity is not None:
        st.markdown(f"**{state.identity.email}**")
        st.caption(credit_badge(state.profile))
        if st.button("Sign Out", use_container_width=True):
            _rerun_after(run_async(draft.sign_out()))
    elif state.page != Page.AUTH:
        if st.button("Sign In", type="primary", use_container_width=True):
            _rerun_after(draft.navigate(Page.AUTH))

st.divider()

banner = status_banner(state)
if banner is not None:
    kind, message = banner
    if kind == "error":
        st.error(message)
    else:
        st.success(message)


# =============================================================================
# PAGES
# =============================================================================
def render_home() -> None:
    st.subheader("What would you like to write today?")
    templates = list_templates()
    columns = st.columns(3)
    for i, config in enumerate(templates):
        with columns[i % 3]:
            with st.container(border=True):
                st.markdown(f"### {config.icon} {config.title}")
                st.caption(config.description)
                if st.button("Start", key=f"start-{config.id}", use_container_width=True):
                    _rerun_after(draft.select_template(config.id))


def _render_fields(config: DocConfig, values: dict[str, str] | None) -> dict[str, object]:
    """Render the template's fields and return the raw values."""
    raw: dict[str, object] = {}
    for form_field in config.fields:
        key = f"{config.id}-{form_field.name}-{state.view_token}"
        prefill = (values or {}).get(form_field.name, "")
        label = field_label(form_field)
        kind = widget_kind(form_field)

        if kind == "date_input":
            try:
                initial = date.fromisoformat(prefill) if prefill else None
            except ValueError:
                initial = None
            picked = st.date_input(label, value=initial, key=key)
            raw[form_field.name] = picked.isoformat() if isinstance(picked, date) else ""
        elif kind == "text_area":
            raw[form_field.name] = st.text_area(
                label, value=prefill, placeholder=form_field.placeholder or "", key=key
            )
        else:
            raw[form_field.name] = st.text_input(
                label, value=prefill, placeholder=form_field.placeholder or "", key=key
            )
    return raw


def render_form() -> None:
    config = state.template
    if config is None:
        render_home()
        return

    col_form, col_result = st.columns([1, 1.3])

    with col_form:
        st.subheader(f"{config.icon} {config.title}")
        with st.form("draft_form"):
            raw = _render_fields(config, state.active_inputs)
            submitted = st.form_submit_button(
                "✨ Generate Draft",
                type="primary",
                use_container_width=True,
                disabled=not state.can_submit,
            )
        if submitted:
            with st.spinner("Drafting your letter..."):
                run_async(draft.submit_generation(raw))
            st.rerun()

    with col_result:
        st.subheader("Your Draft")
        doc = state.active_doc
        if doc is None:
            st.info("Fill in the details and press Generate.")
            return

        st.text_area("Draft", value=doc.generated_text, height=420, disabled=True)

        if state.is_authenticated:
            text = draft.request_export()
            st.download_button(
                "⬇️ Download (.txt)",
                data=text or "",
                file_name=export_filename(doc),
                mime="text/plain",
                use_container_width=True,
            )
        elif st.button("📋 Copy / Download", use_container_width=True):
            draft.request_export()
            st.rerun()

        if state.claim == OperationStatus.PENDING:
            st.caption("Saving your draft to your account...")

        if st.button("Start Over", use_container_width=True):
            _rerun_after(draft.clear_result())


def render_login_prompt() -> None:
    with st.container(border=True):
        st.markdown("### Save and export your draft")
        st.write("Create a free account to copy, download and keep your drafts.")
        create, stay = st.columns(2)
        if create.button("Create Free Account", type="primary", use_container_width=True):
            _rerun_after(draft.navigate(Page.AUTH))
        if stay.button("Stay Guest", use_container_width=True):
            _rerun_after(draft.dismiss_login_prompt())


def render_records() -> None:
    st.subheader("My Records")
    if st.button("🔄 Refresh List"):
        _rerun_after(run_async(draft.refresh_history()))

    rows = history_rows(state.history)
    if not rows:
        st.info("No drafts yet. Generate one from the templates page.")
        return

    for row in rows:
        with st.container(border=True):
            st.markdown(f"**{row['title']}** · {row['created']}")
            st.caption(row["preview"])
            if st.button("Open Draft", key=f"open-{row['id']}"):
                _rerun_after(draft.open_document(row["id"]))


def render_auth() -> None:
    mode = st.radio("Account", ["Sign In", "Sign Up"], horizontal=True, label_visibility="collapsed")
    pending = state.auth == OperationStatus.PENDING

    with st.form("auth_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button(mode, type="primary", disabled=pending)

    if submitted:
        if mode == "Sign In":
            run_async(draft.sign_in(email, password))
        else:
            run_async(draft.sign_up(email, password))
        st.rerun()


if state.show_login_prompt:
    render_login_prompt()

if state.page == Page.FORM:
    render_form()
elif state.page == Page.RECORDS:
    render_records()
elif state.page == Page.AUTH:
    render_auth()
else:
    render_home()
