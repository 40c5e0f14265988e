# This project was developed with assistance from AI tools.
"""Document request/response schemas."""

from datetime import datetime

from db.enums import DocumentType
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class DocumentTypeResponse(BaseModel):
    """A document slot the onboarding form offers."""

    model_config = ConfigDict(from_attributes=True)

    key: str
    label: str
    required: bool
    field_name: str = Field(description="Multipart field carrying the file.")
    note_field_name: str = Field(description="Multipart field carrying the optional note.")


class DocumentResponse(BaseModel):
    """A committed verification document."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    document_type: DocumentType
    label: str | None = None
    storage_path: str
    download_url: str | None = None
    metadata: dict = Field(
        default_factory=dict,
        validation_alias=AliasChoices("document_metadata", "metadata"),
    )
    created_at: datetime


class DocumentListResponse(BaseModel):
    """The caller's live document set."""

    data: list[DocumentResponse]
    count: int
