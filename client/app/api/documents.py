"""HTTP client for the remote PDF API (list, upload, update, delete, ask).

Every call is prefixed by the configured base URL. Failures are classified
into TransportError (no response) and RemoteError (non-success status or an
unparseable success body).
"""

import logging
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from client.app.api.errors import RemoteError, TransportError
from client.app.config import get_settings
from client.app.models.answer import AskResponse
from client.app.models.documents import Document, DocumentId, UploadBlob

logger = logging.getLogger(__name__)

# Default messages when the error body carries no usable message
DEFAULT_MESSAGES = {
    "list": "Error fetching PDFs",
    "upload": "Error uploading PDF",
    "update": "Error updating PDF",
    "delete": "Error deleting PDF",
    "ask": "Error asking PDF",
}

# Body fields checked, in order, for a structured error message
_MESSAGE_FIELDS = ("detail", "error", "message")


def extract_error_message(response: httpx.Response, default: str) -> str:
    """Pull a human-readable message out of an error response body.

    Args:
        response: Non-success HTTP response
        default: Fallback when no string message field is present

    Returns:
        Message from the first string ``detail``/``error``/``message`` field,
        otherwise the default
    """
    try:
        body = response.json()
    except ValueError:
        return default

    if isinstance(body, dict):
        for key in _MESSAGE_FIELDS:
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return default


class DocumentsBackend(Protocol):
    """Protocol for the PDF API boundary calls."""

    async def list_documents(self, selected: bool | None = None) -> list[Document]: ...

    async def upload_document(self, blob: UploadBlob) -> Document: ...

    async def update_document_field(self, doc_id: DocumentId, field: str, value: Any) -> None: ...

    async def delete_document(self, doc_id: DocumentId) -> None: ...

    async def ask_document(self, doc_id: DocumentId, question: str) -> AskResponse: ...


class DocumentsApi:
    """Async client implementing the PDF API boundary calls."""

    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize API client.

        Args:
            base_url: API base URL (defaults to settings.pdf_api_url)
            client: Optional httpx client (for testing with mocks)
        """
        settings = get_settings()
        self.base_url = (base_url or settings.pdf_api_url).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.request_timeout_s)

    async def aclose(self) -> None:
        """Close the underlying httpx client if we created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _request(
        self, operation: str, method: str, path: str, **kwargs: Any
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            logger.warning(f"{method} {url} failed at transport level: {e}")
            raise TransportError() from e

        if response.is_error:
            message = extract_error_message(response, DEFAULT_MESSAGES[operation])
            logger.warning(f"{method} {url} returned {response.status_code}: {message}")
            raise RemoteError(message, status_code=response.status_code)

        return response

    @staticmethod
    def _parse_json(response: httpx.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(DEFAULT_MESSAGES[operation], status_code=response.status_code) from e

    async def list_documents(self, selected: bool | None = None) -> list[Document]:
        """Fetch the authoritative document list.

        Args:
            selected: Optional constraint on the ``selected`` flag

        Returns:
            Documents in the order returned by the server

        Raises:
            TransportError: On connectivity failure
            RemoteError: On non-success status or malformed body
        """
        params = {} if selected is None else {"selected": "true" if selected else "false"}
        response = await self._request("list", "GET", "/pdfs", params=params)
        data = self._parse_json(response, "list")

        if not isinstance(data, list):
            raise RemoteError(DEFAULT_MESSAGES["list"], status_code=response.status_code)
        try:
            return [Document.model_validate(item) for item in data]
        except ValidationError as e:
            raise RemoteError(DEFAULT_MESSAGES["list"], status_code=response.status_code) from e

    async def upload_document(self, blob: UploadBlob) -> Document:
        """Upload a PDF as multipart form field ``file``.

        Returns:
            The created Document (always carries an ``id``)
        """
        files = {"file": (blob.filename, blob.content, blob.content_type)}
        response = await self._request("upload", "POST", "/pdfs/upload", files=files)
        data = self._parse_json(response, "upload")
        try:
            return Document.model_validate(data)
        except ValidationError as e:
            raise RemoteError(DEFAULT_MESSAGES["upload"], status_code=response.status_code) from e

    async def update_document_field(self, doc_id: DocumentId, field: str, value: Any) -> None:
        """Persist a single field of a document."""
        await self._request("update", "PUT", f"/pdfs/{doc_id}", json={field: value})

    async def delete_document(self, doc_id: DocumentId) -> None:
        """Delete a document on the server."""
        await self._request("delete", "DELETE", f"/pdfs/{doc_id}")

    async def ask_document(self, doc_id: DocumentId, question: str) -> AskResponse:
        """Ask a question about one document.

        Returns:
            Answer text with source citations (empty list when none)
        """
        response = await self._request(
            "ask", "POST", f"/pdfs/{doc_id}/ask", json={"question": question}
        )
        data = self._parse_json(response, "ask")
        if isinstance(data, dict) and data.get("sources") is None:
            data = {**data, "sources": []}
        try:
            return AskResponse.model_validate(data)
        except ValidationError as e:
            raise RemoteError(DEFAULT_MESSAGES["ask"], status_code=response.status_code) from e
