"""Record store: the local, optimistic view of the remote PDF collection.

All mutation goes through load / create / update_field / remove (plus the
selection and pending-upload setters). Each local mutation is a single
synchronous step between awaits, so no locking is needed on the event loop.

- load replaces the whole collection with the server's list (remote order).
- create appends the uploaded document without refetching.
- update_field is optimistic: local state changes first, the remote write is
  debounced and never rolled back.
- remove is pessimistic: the document leaves the store only after the server
  confirms the delete.
"""

import logging
from typing import Any

from client.app.api.documents import DocumentsBackend
from client.app.models.documents import Document, DocumentId, UploadBlob, validate_field_edit
from client.app.sync.debounce import ChannelClosedError, DebouncedMutationChannel
from client.app.sync.filters import FilterMode, FilterSelector
from client.app.sync.lifecycle import LifecycleSnapshot, RequestLifecycle, Settlement
from client.app.utils.logging import CallLogger
from client.app.utils.metrics import SyncMetrics

logger = logging.getLogger(__name__)

STORE_OPERATIONS = ("list", "upload", "delete")


class DocumentStore:
    """Owned container for the document collection and Q&A selection."""

    def __init__(
        self,
        api: DocumentsBackend,
        *,
        channel: DebouncedMutationChannel | None = None,
        debounce_ms: int | None = None,
        metrics: SyncMetrics | None = None,
        call_logger: CallLogger | None = None,
    ) -> None:
        """Initialize store.

        Args:
            api: Boundary implementation (DocumentsApi or a test fake)
            channel: Write-behind channel (default: one writing through api)
            debounce_ms: Quiet period for the default channel
            metrics: Metrics recorder (optional, defaults to no-op)
            call_logger: Structured logger (optional, defaults to no-op)
        """
        self._api = api
        self._documents: list[Document] = []
        self._selected_id: DocumentId | None = None
        self._pending_upload: UploadBlob | None = None
        self._filters = FilterSelector()
        self._channel = channel or DebouncedMutationChannel(
            api.update_document_field, delay_ms=debounce_ms, metrics=metrics
        )
        self._lifecycles = {
            op: RequestLifecycle(op, metrics=metrics, call_logger=call_logger)
            for op in STORE_OPERATIONS
        }

    # --- read-only accessors ---

    @property
    def documents(self) -> tuple[Document, ...]:
        return tuple(self._documents)

    def get(self, doc_id: DocumentId) -> Document | None:
        for doc in self._documents:
            if doc.id == doc_id:
                return doc
        return None

    def __contains__(self, doc_id: object) -> bool:
        return any(doc.id == doc_id for doc in self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    @property
    def selected_id(self) -> DocumentId | None:
        """Document selected for Q&A, if any."""
        return self._selected_id

    @property
    def pending_upload(self) -> UploadBlob | None:
        return self._pending_upload

    @property
    def filter_mode(self) -> FilterMode:
        return self._filters.mode

    @property
    def channel(self) -> DebouncedMutationChannel:
        return self._channel

    def lifecycle(self, operation: str) -> LifecycleSnapshot:
        """Snapshot of the "list", "upload" or "delete" lifecycle."""
        return self._lifecycles[operation].snapshot()

    # --- selection and pending upload ---

    def select_for_qa(self, doc_id: DocumentId) -> None:
        """Select a document for questions.

        Raises:
            KeyError: If the document is not in the store
        """
        if doc_id not in self:
            raise KeyError(doc_id)
        self._selected_id = doc_id

    def set_pending_upload(self, blob: UploadBlob | None) -> None:
        self._pending_upload = blob

    def _repair_selection(self) -> None:
        if self._selected_id is not None and self._selected_id in self:
            return
        previous = self._selected_id
        self._selected_id = self._documents[0].id if self._documents else None
        if previous is not None:
            logger.debug(f"Q&A selection {previous} no longer present, now {self._selected_id}")

    # --- operations ---

    async def load(self, selected: bool | None = None) -> Settlement[list[Document]]:
        """Fetch the list and replace the local collection on success.

        A failed or stale fetch leaves the collection untouched.
        """
        settlement = await self._lifecycles["list"].run(
            lambda: self._api.list_documents(selected)
        )
        if settlement.ok and settlement.current and settlement.value is not None:
            self._documents = list(settlement.value)
            self._repair_selection()
            logger.info(f"Loaded {len(self._documents)} document(s) (selected={selected})")
        return settlement

    async def select_filter(self, mode: FilterMode | str) -> Settlement[list[Document]]:
        """Activate a filter mode and reload with its constraint."""
        constraint = self._filters.select(mode)
        return await self.load(constraint)

    async def create(self, blob: UploadBlob | None = None) -> Settlement[Document] | None:
        """Upload a file and append the created document.

        Uses the pending upload when no blob is given; returns None without a
        call when there is nothing to upload. The pending upload is cleared
        only when its upload succeeds.
        """
        blob = blob or self._pending_upload
        if blob is None:
            logger.debug("Upload requested with no file selected")
            return None

        settlement = await self._lifecycles["upload"].run(lambda: self._api.upload_document(blob))
        if not settlement.ok or settlement.value is None:
            return settlement

        # Every successful upload is a distinct remote record, stale or not
        doc = settlement.value
        existing = next((i for i, d in enumerate(self._documents) if d.id == doc.id), None)
        if existing is None:
            self._documents.append(doc)
        else:
            self._documents[existing] = doc
        if self._selected_id is None:
            self._selected_id = doc.id
        if self._pending_upload is blob:
            self._pending_upload = None
        logger.info(f"Uploaded '{blob.filename}' as document {doc.id}")
        return settlement

    def update_field(self, doc_id: DocumentId, field: str, value: Any) -> bool:
        """Apply an edit locally now and schedule its debounced remote write.

        Returns:
            False if no document has this id (nothing changed, nothing sent)

        Raises:
            ValueError: If the field is not editable or the value has the wrong type
            ChannelClosedError: If the store has been closed
        """
        validate_field_edit(field, value)
        if self._channel.closed:
            raise ChannelClosedError("document store is closed")

        index = next((i for i, d in enumerate(self._documents) if d.id == doc_id), None)
        if index is None:
            logger.debug(f"Ignoring edit of '{field}' for unknown document {doc_id}")
            return False

        self._documents[index] = self._documents[index].model_copy(update={field: value})
        self._channel.enqueue((doc_id, field), value)
        return True

    async def remove(self, doc_id: DocumentId) -> Settlement[None]:
        """Delete on the server, then drop the document locally."""
        settlement = await self._lifecycles["delete"].run(
            lambda: self._api.delete_document(doc_id)
        )
        if settlement.ok:
            self._documents = [d for d in self._documents if d.id != doc_id]
            self._channel.discard(doc_id)
            self._repair_selection()
            logger.info(f"Deleted document {doc_id}")
        return settlement

    async def aclose(self) -> None:
        """Tear down the write-behind channel; unsent edits are dropped."""
        await self._channel.aclose()
