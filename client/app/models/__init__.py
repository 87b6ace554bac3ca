"""Models package - re-exports for convenience."""

from client.app.models.answer import AskResponse, PendingAnswer, SourceCitation
from client.app.models.documents import (
    EDITABLE_FIELDS,
    Document,
    DocumentId,
    UploadBlob,
    validate_field_edit,
)

__all__ = [
    # Documents
    "Document",
    "DocumentId",
    "UploadBlob",
    "EDITABLE_FIELDS",
    "validate_field_edit",
    # Q&A
    "AskResponse",
    "SourceCitation",
    "PendingAnswer",
]
