"""Ask-a-question flow for the document selected in the store."""

import logging

from client.app.api.documents import DocumentsBackend
from client.app.models.answer import AskResponse, PendingAnswer
from client.app.sync.lifecycle import LifecycleSnapshot, RequestLifecycle, Settlement
from client.app.sync.store import DocumentStore
from client.app.utils.logging import CallLogger
from client.app.utils.metrics import SyncMetrics

logger = logging.getLogger(__name__)


class QaSession:
    """Question-answer lifecycle bound to the store's Q&A selection.

    At most one of (answer, error) is set at any time; a new ask clears both
    before the call is issued.
    """

    def __init__(
        self,
        store: DocumentStore,
        api: DocumentsBackend,
        metrics: SyncMetrics | None = None,
        call_logger: CallLogger | None = None,
    ) -> None:
        self._store = store
        self._api = api
        self._lifecycle = RequestLifecycle("ask", metrics=metrics, call_logger=call_logger)
        self._answer: PendingAnswer | None = None

    @property
    def answer(self) -> PendingAnswer | None:
        return self._answer

    @property
    def error(self) -> str | None:
        return self._lifecycle.error

    @property
    def is_pending(self) -> bool:
        return self._lifecycle.snapshot().is_pending

    def lifecycle(self) -> LifecycleSnapshot:
        return self._lifecycle.snapshot()

    async def ask(self, question: str) -> Settlement[AskResponse] | None:
        """Ask about the selected document.

        Returns None without calling the server when nothing is selected or
        the question is blank.
        """
        doc_id = self._store.selected_id
        if doc_id is None or not question.strip():
            logger.debug("Ask skipped: no document selected or empty question")
            return None

        self._answer = None
        settlement = await self._lifecycle.run(lambda: self._api.ask_document(doc_id, question))

        if not settlement.current:
            return settlement

        if settlement.ok and settlement.value is not None:
            self._answer = PendingAnswer(
                question=question,
                document_id=doc_id,
                answer=settlement.value.answer,
                sources=list(settlement.value.sources),
            )
        else:
            self._answer = None
        return settlement
