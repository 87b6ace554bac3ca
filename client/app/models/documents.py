"""Document domain models for the PDF list."""

from dataclasses import dataclass

from pydantic import BaseModel, Field

DocumentId = int | str

# Fields the user may edit after upload; ``id`` and ``file`` are fixed.
EDITABLE_FIELDS: dict[str, type] = {"name": str, "selected": bool}


class Document(BaseModel):
    """A stored PDF record as returned by the remote list endpoint."""

    id: DocumentId
    name: str = ""
    selected: bool = False
    file: str | None = Field(None, description="URL or path of the stored binary")

    @property
    def has_file(self) -> bool:
        """Whether the binary has been stored yet."""
        return bool(self.file)


@dataclass(frozen=True)
class UploadBlob:
    """Raw file payload picked by the user, pending upload."""

    filename: str
    content: bytes
    content_type: str = "application/pdf"


def validate_field_edit(field: str, value: object) -> None:
    """Reject edits to non-editable fields or values of the wrong type.

    Raises:
        ValueError: If the field is not editable or the value type mismatches
    """
    expected = EDITABLE_FIELDS.get(field)
    if expected is None:
        raise ValueError(f"Field '{field}' is not editable")
    # bool is a subclass of int, so check exact type for flags
    if expected is bool and type(value) is not bool:
        raise ValueError(f"Field '{field}' expects a boolean, got {type(value).__name__}")
    if expected is str and not isinstance(value, str):
        raise ValueError(f"Field '{field}' expects a string, got {type(value).__name__}")
