# This project was developed with assistance from AI tools.
"""Verification document slots offered during professional onboarding.

The catalog is immutable and built once at import time. Required specs are
always listed before optional ones; extraction and validation both walk the
slots in that order.
"""

from dataclasses import dataclass

from db.enums import DocumentType

MAX_DOCUMENT_SIZE_BYTES = 5 * 1024 * 1024

ALLOWED_DOCUMENT_MIME_TYPES = frozenset(
    {
        "application/pdf",
        "image/jpeg",
        "image/png",
        "image/jpg",
    }
)


@dataclass(frozen=True)
class DocumentTypeSpec:
    """One document slot: stable key, display label, and whether it must be sent."""

    key: str
    label: str
    required: bool

    @property
    def field_name(self) -> str:
        return f"document_{self.key}"

    @property
    def note_field_name(self) -> str:
        return f"document_{self.key}_note"


@dataclass(frozen=True)
class DocumentCatalog:
    required: tuple[DocumentTypeSpec, ...]
    optional: tuple[DocumentTypeSpec, ...]

    @property
    def all_specs(self) -> tuple[DocumentTypeSpec, ...]:
        """Every slot, required first."""
        return self.required + self.optional

    def label_for(self, key: str) -> str:
        """Display label for a document key, falling back to the key itself."""
        for spec in self.all_specs:
            if spec.key == key:
                return spec.label
        return key


REQUIRED_DOCUMENTS: tuple[DocumentTypeSpec, ...] = (
    DocumentTypeSpec(DocumentType.GOVERNMENT_ID.value, "Government ID", required=True),
    DocumentTypeSpec(DocumentType.PROOF_OF_ADDRESS.value, "Proof of address", required=True),
)

OPTIONAL_DOCUMENTS: tuple[DocumentTypeSpec, ...] = (
    DocumentTypeSpec(
        DocumentType.CERTIFICATION.value,
        "Professional certification (optional)",
        required=False,
    ),
)

DOCUMENT_CATALOG = DocumentCatalog(required=REQUIRED_DOCUMENTS, optional=OPTIONAL_DOCUMENTS)
