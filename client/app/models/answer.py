"""Question-answer response models."""

from pydantic import BaseModel, Field


class SourceCitation(BaseModel):
    """A passage of the PDF the answer was grounded on."""

    page: int | None = Field(None, description="1-based page number, when known")
    snippet: str


class AskResponse(BaseModel):
    """Response body of the ask endpoint."""

    answer: str
    sources: list[SourceCitation] = Field(default_factory=list)


class PendingAnswer(BaseModel):
    """Last successful answer shown for the selected document.

    Replaced wholesale on every ask, never merged.
    """

    question: str
    document_id: int | str
    answer: str
    sources: list[SourceCitation] = Field(default_factory=list)
