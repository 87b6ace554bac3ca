"""Shared pytest fixtures for all test suites."""

import asyncio
from typing import Any

import pytest

from client.app.api.errors import SyncError
from client.app.models.answer import AskResponse, SourceCitation
from client.app.models.documents import Document, DocumentId, UploadBlob


class FakeDocumentsBackend:
    """In-memory DocumentsBackend double.

    ``failures`` maps an operation name to the error its next calls raise;
    ``gates`` maps an operation name to an event every call waits on.
    """

    def __init__(self, documents: list[Document] | None = None) -> None:
        self.documents: list[Document] = list(documents or [])
        self.calls: list[tuple[str, Any]] = []
        self.writes: list[tuple[DocumentId, str, Any]] = []
        self.failures: dict[str, SyncError] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.answer = AskResponse(answer="stub answer", sources=[])
        self._next_id = 100

    async def _enter(self, operation: str, args: Any) -> None:
        self.calls.append((operation, args))
        gate = self.gates.get(operation)
        if gate is not None:
            await gate.wait()
        error = self.failures.get(operation)
        if error is not None:
            raise error

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)

    async def list_documents(self, selected: bool | None = None) -> list[Document]:
        await self._enter("list", selected)
        if selected is None:
            return list(self.documents)
        return [d for d in self.documents if d.selected is selected]

    async def upload_document(self, blob: UploadBlob) -> Document:
        await self._enter("upload", blob.filename)
        self._next_id += 1
        doc = Document(
            id=self._next_id, name=blob.filename, selected=False, file=f"/files/{blob.filename}"
        )
        self.documents.append(doc)
        return doc

    async def update_document_field(self, doc_id: DocumentId, field: str, value: Any) -> None:
        await self._enter("update", (doc_id, field, value))
        self.writes.append((doc_id, field, value))

    async def delete_document(self, doc_id: DocumentId) -> None:
        await self._enter("delete", doc_id)
        self.documents = [d for d in self.documents if d.id != doc_id]

    async def ask_document(self, doc_id: DocumentId, question: str) -> AskResponse:
        await self._enter("ask", (doc_id, question))
        return self.answer


@pytest.fixture
def sample_documents() -> list[Document]:
    """Three documents in server order."""
    return [
        Document(id=1, name="A", selected=False, file="/files/a.pdf"),
        Document(id=2, name="B", selected=True, file="/files/b.pdf"),
        Document(id=3, name="C", selected=False, file=None),
    ]


@pytest.fixture
def fake_backend(sample_documents: list[Document]) -> FakeDocumentsBackend:
    """Fake backend seeded with the sample documents."""
    return FakeDocumentsBackend(sample_documents)


@pytest.fixture
def sample_answer() -> AskResponse:
    return AskResponse(
        answer="X is Y",
        sources=[SourceCitation(page=3, snippet="Y defined here")],
    )


@pytest.fixture
def backend_factory() -> type[FakeDocumentsBackend]:
    """Factory for fakes with custom seed data."""
    return FakeDocumentsBackend
