"""Helper functions for UI - view builders and the background event loop."""

import asyncio
import threading
from collections.abc import Coroutine
from typing import Any, TypeVar

from client.app.models.answer import SourceCitation
from client.app.models.documents import Document, UploadBlob
from client.app.sync.filters import FilterMode
from client.app.sync.lifecycle import LifecyclePhase, LifecycleSnapshot
from client.app.sync.qa import QaSession
from client.app.workspace import PdfWorkspace

T = TypeVar("T")

FILTER_LABELS: dict[FilterMode, str] = {
    FilterMode.ALL: "All",
    FilterMode.SELECTED: "Selected",
    FilterMode.UNSELECTED: "Not selected",
}

# Progress text while an operation is pending
PENDING_MESSAGES = {
    "list": "Loading PDFs...",
    "upload": "Uploading PDF...",
    "delete": "Deleting PDF...",
    "ask": "Asking...",
}


class BackgroundLoop:
    """Event loop on a daemon thread that outlives Streamlit reruns.

    Debounce timers and in-flight calls live on this loop, so a script rerun
    does not cancel them. One loop is created per browser session and lives
    until close_session runs for it (registered at process exit by the app).
    """

    def __init__(self) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._loop.run_forever, daemon=True)
        self._thread.start()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def run(self, coro: Coroutine[Any, Any, T], timeout: float | None = None) -> T:
        """Run a coroutine on the loop and block until it completes."""
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result(timeout=timeout)

    @property
    def is_running(self) -> bool:
        return not self._loop.is_closed()

    def stop(self) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5.0)
        self._loop.close()


def close_session(runner: BackgroundLoop, workspace: PdfWorkspace, timeout: float = 5.0) -> None:
    """Send pending edits, close the workspace and stop its loop.

    Safe to call more than once.
    """
    if not runner.is_running:
        return
    try:
        runner.run(workspace.aclose(flush=True), timeout=timeout)
    finally:
        runner.stop()


def build_upload_blob(uploaded: Any) -> UploadBlob | None:
    """Turn a Streamlit UploadedFile (or None) into an UploadBlob."""
    if uploaded is None:
        return None
    return UploadBlob(
        filename=uploaded.name,
        content=uploaded.getvalue(),
        content_type=uploaded.type or "application/pdf",
    )


def build_document_rows(documents: tuple[Document, ...] | list[Document]) -> list[dict[str, Any]]:
    """Build one row per document for the list view.

    Args:
        documents: Documents in store order

    Returns:
        List of row dicts; ``open_href`` is None when no file is stored
    """
    rows = []
    for doc in documents:
        rows.append(
            {
                "id": doc.id,
                "name": doc.name,
                "selected": doc.selected,
                "open_href": doc.file if doc.has_file else None,
                "open_enabled": doc.has_file,
            }
        )
    return rows


def build_qa_options(documents: tuple[Document, ...] | list[Document]) -> list[tuple[Any, str]]:
    """(id, label) pairs for the Q&A document picker."""
    return [(doc.id, doc.name or f"PDF {doc.id}") for doc in documents]


def format_source(source: SourceCitation) -> str:
    """Format a citation as "Page N: snippet" (page omitted when unknown)."""
    if source.page:
        return f"Page {source.page}: {source.snippet}"
    return source.snippet


def build_status_message(snapshot: LifecycleSnapshot) -> dict[str, str] | None:
    """Map a lifecycle snapshot to a status banner.

    Returns:
        Dict with ``level`` ("info" or "error") and ``text``, or None when idle
        or successful
    """
    if snapshot.phase == LifecyclePhase.PENDING:
        return {"level": "info", "text": PENDING_MESSAGES.get(snapshot.operation, "Working...")}
    if snapshot.phase == LifecyclePhase.ERROR and snapshot.error:
        return {"level": "error", "text": snapshot.error}
    return None


def build_answer_view(qa: QaSession) -> dict[str, Any]:
    """Build the Q&A panel view.

    Returns:
        Dict with status, button label, error, answer text and formatted sources
    """
    snapshot = qa.lifecycle()
    answer = qa.answer

    return {
        "status": snapshot.phase.value,
        "button_label": "Asking..." if snapshot.is_pending else "Ask",
        "button_disabled": snapshot.is_pending,
        "error": qa.error,
        "answer": answer.answer if answer else None,
        "sources": [format_source(s) for s in answer.sources] if answer else [],
    }
