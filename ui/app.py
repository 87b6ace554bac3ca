"""Streamlit UI for the PDF manager.

Run with: streamlit run ui/app.py
"""

# Add project root to sys.path for imports to work when run via streamlit
import atexit
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st  # noqa: E402

from client.app.config import get_settings  # noqa: E402
from client.app.sync.filters import FilterMode  # noqa: E402
from client.app.utils.logging import configure_logging  # noqa: E402
from client.app.workspace import PdfWorkspace, create_workspace  # noqa: E402
from ui.helpers import (  # noqa: E402
    FILTER_LABELS,
    BackgroundLoop,
    build_answer_view,
    build_document_rows,
    build_qa_options,
    build_status_message,
    build_upload_blob,
    close_session,
)

settings = get_settings()
configure_logging(settings.log_level)

# Page config
st.set_page_config(page_title="PDF Manager", page_icon="📄", layout="wide")


async def _create_workspace() -> PdfWorkspace:
    # httpx client must be created on the loop that will use it
    workspace = create_workspace(settings)
    await workspace.store.load()
    return workspace


# Initialize session state
if "loop" not in st.session_state:
    st.session_state.loop = BackgroundLoop()
if "workspace" not in st.session_state:
    st.session_state.workspace = st.session_state.loop.run(_create_workspace())
    # Streamlit has no session-end hook; release the loop and httpx client at exit
    atexit.register(close_session, st.session_state.loop, st.session_state.workspace)

runner: BackgroundLoop = st.session_state.loop
workspace: PdfWorkspace = st.session_state.workspace
store = workspace.store


def _show_status(operation: str) -> None:
    banner = build_status_message(store.lifecycle(operation))
    if banner is None:
        return
    if banner["level"] == "error":
        st.error(f"❌ {banner['text']}")
    else:
        st.info(f"⏳ {banner['text']}")


async def _edit(doc_id: object, field: str, value: object) -> bool:
    # update_field schedules its timer on the running loop
    return store.update_field(doc_id, field, value)


st.title("📄 PDF Manager")
st.divider()

col_left, col_right = st.columns([2, 1.5])

# =============================================================================
# LEFT COLUMN - UPLOAD, LIST, FILTERS
# =============================================================================
with col_left:
    st.subheader("Upload PDF")
    with st.form("upload_form", clear_on_submit=True):
        uploaded = st.file_uploader("PDF file", type=["pdf"])
        submitted = st.form_submit_button("Upload")
        if submitted:
            # Pending upload mirrors the widget at submit time only
            store.set_pending_upload(build_upload_blob(uploaded))
            runner.run(store.create())
    _show_status("upload")

    st.subheader("PDF List")
    _show_status("list")
    _show_status("delete")

    rows = build_document_rows(store.documents)
    if not rows:
        st.caption("No PDFs")
    for row in rows:
        c_sel, c_name, c_open, c_del = st.columns([0.5, 4, 1, 1])
        with c_sel:
            checked = st.checkbox(
                "Selected",
                value=row["selected"],
                key=f"sel-{row['id']}",
                label_visibility="collapsed",
            )
            if checked != row["selected"]:
                runner.run(_edit(row["id"], "selected", checked))
        with c_name:
            name = st.text_input(
                "Name", value=row["name"], key=f"name-{row['id']}", label_visibility="collapsed"
            )
            if name != row["name"]:
                runner.run(_edit(row["id"], "name", name))
        with c_open:
            if row["open_enabled"]:
                st.link_button("Open", row["open_href"])
            else:
                st.button("Open", key=f"open-{row['id']}", disabled=True)
        with c_del:
            if st.button("Delete", key=f"del-{row['id']}"):
                runner.run(store.remove(row["id"]))
                st.rerun()

    st.subheader("Filters")
    filter_cols = st.columns(len(FILTER_LABELS))
    for col, (mode, label) in zip(filter_cols, FILTER_LABELS.items()):
        with col:
            is_active = store.filter_mode == mode
            button_type = "primary" if is_active else "secondary"
            if st.button(label, type=button_type, key=f"filter-{mode.value}"):
                runner.run(store.select_filter(FilterMode(mode)))
                st.rerun()

# =============================================================================
# RIGHT COLUMN - ASK YOUR PDF
# =============================================================================
with col_right:
    st.subheader("Ask Your PDF (RAG)")

    options = build_qa_options(store.documents)
    if not options:
        st.caption("Upload a PDF first.")
    else:
        ids = [doc_id for doc_id, _ in options]
        labels = dict(options)
        current = ids.index(store.selected_id) if store.selected_id in ids else 0
        view = build_answer_view(workspace.qa)

        with st.form("qa_form"):
            picked = st.selectbox(
                "Document", ids, index=current, format_func=lambda doc_id: labels[doc_id]
            )
            question = st.text_input("Question", placeholder="Ask a question about this PDF...")
            asked = st.form_submit_button(view["button_label"], disabled=view["button_disabled"])
            if asked:
                if picked != store.selected_id:
                    store.select_for_qa(picked)
                runner.run(workspace.qa.ask(question))

    view = build_answer_view(workspace.qa)
    if view["error"]:
        st.error(view["error"])
    if view["answer"]:
        st.markdown("### Answer")
        st.markdown(view["answer"])
        if view["sources"]:
            st.markdown("### Sources")
            for line in view["sources"]:
                st.caption(line)
