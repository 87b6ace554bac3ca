"""Wiring of API client, record store and Q&A session from settings."""

import logging

import httpx

from client.app.api.documents import DocumentsApi
from client.app.config import Settings, get_settings
from client.app.sync.qa import QaSession
from client.app.sync.store import DocumentStore
from client.app.utils.logging import StructuredCallLogger
from client.app.utils.metrics import PrometheusSyncMetrics

logger = logging.getLogger(__name__)


class PdfWorkspace:
    """Everything one UI session needs: store, Q&A session and API client."""

    def __init__(self, api: DocumentsApi, store: DocumentStore, qa: QaSession) -> None:
        self.api = api
        self.store = store
        self.qa = qa

    async def aclose(self, flush: bool = False) -> None:
        """Shut down; optionally send pending field edits first."""
        if flush:
            await self.store.channel.flush()
        await self.store.aclose()
        await self.api.aclose()


def create_workspace(
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> PdfWorkspace:
    """Build a workspace with Prometheus metrics and structured logging.

    Args:
        settings: Settings override (default: cached environment settings)
        client: Optional httpx client (for testing with mocks)
    """
    settings = settings or get_settings()
    metrics = PrometheusSyncMetrics()
    call_logger = StructuredCallLogger()

    api = DocumentsApi(base_url=settings.pdf_api_url, client=client)
    store = DocumentStore(
        api,
        debounce_ms=settings.update_debounce_ms,
        metrics=metrics,
        call_logger=call_logger,
    )
    qa = QaSession(store, api, metrics=metrics, call_logger=call_logger)

    logger.info(f"PDF workspace ready for {api.base_url}")
    return PdfWorkspace(api=api, store=store, qa=qa)
