# This project was developed with assistance from AI tools.
"""Candidate extraction and validation for onboarding document submissions.

Pure functions: nothing here touches the object store or the database, so a
submission that fails validation never reaches either system.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .document_types import (
    ALLOWED_DOCUMENT_MIME_TYPES,
    MAX_DOCUMENT_SIZE_BYTES,
    DocumentTypeSpec,
)

SIZE_ERROR = "File must be 5MB or smaller."
TYPE_ERROR = "Only PDF, JPG, or PNG files are supported."


@dataclass(frozen=True)
class SubmittedFile:
    """An uploaded file as read off the multipart body."""

    filename: str | None
    content_type: str | None
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class DocumentCandidate:
    """An unvalidated file submitted for one document slot."""

    document_type: str
    content: SubmittedFile
    note: str | None
    original_filename: str

    @property
    def size(self) -> int:
        return self.content.size

    @property
    def content_type(self) -> str:
        return self.content.content_type or ""


def string_or_none(value: object) -> str | None:
    """Trim a text field; blank or missing becomes None."""
    if value is None or isinstance(value, SubmittedFile):
        return None
    trimmed = str(value).strip()
    return trimmed or None


def extract_candidates(
    fields: Mapping[str, object],
    specs: Iterable[DocumentTypeSpec],
) -> dict[str, DocumentCandidate]:
    """Read at most one candidate per document slot from a submitted field set.

    A slot with no file, or an empty file, yields no candidate. Whether
    that is an error is decided by ``validate_candidates``.
    """
    candidates: dict[str, DocumentCandidate] = {}
    for spec in specs:
        content = fields.get(spec.field_name)
        if not isinstance(content, SubmittedFile) or content.size == 0:
            continue
        candidates[spec.key] = DocumentCandidate(
            document_type=spec.key,
            content=content,
            note=string_or_none(fields.get(spec.note_field_name)),
            original_filename=content.filename or f"{spec.key}.dat",
        )
    return candidates


def validate_candidates(
    candidates: Mapping[str, DocumentCandidate],
    specs: Iterable[DocumentTypeSpec],
) -> tuple[dict[str, str], list[DocumentCandidate]]:
    """Apply the per-slot rules and split candidates into errors and accepted.

    Size and type are checked independently; when both fail the type
    message overwrites the size message so each field carries one error.
    A candidate with any error is never accepted.
    """
    field_errors: dict[str, str] = {}
    accepted: list[DocumentCandidate] = []

    for spec in specs:
        candidate = candidates.get(spec.key)
        if candidate is None:
            if spec.required:
                field_errors[spec.field_name] = f"{spec.label} is required."
            continue

        failed = False
        if candidate.size > MAX_DOCUMENT_SIZE_BYTES:
            field_errors[spec.field_name] = SIZE_ERROR
            failed = True
        if candidate.content_type not in ALLOWED_DOCUMENT_MIME_TYPES:
            field_errors[spec.field_name] = TYPE_ERROR
            failed = True

        if not failed:
            accepted.append(candidate)

    return field_errors, accepted
