# This project was developed with assistance from AI tools.
"""Document submission saga for professional onboarding.

A submission runs, in order:

1. extraction + validation (pure; any field error aborts before I/O)
2. retirement of the profile's previous documents (object store, then rows)
3. sequential upload of every accepted file
4. one batched insert of the document rows
5. onboarding_status -> approved

A failure aborts the remaining stages. Upload and insert failures delete
the objects written by this run; nothing else is rolled back. Between a
successful retirement and a successful insert the profile has no
documents on record; a failed run leaves it that way and the professional
must submit the full set again.
"""

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import partial

from db.enums import OnboardingStatus
from sqlalchemy.exc import SQLAlchemyError

from .document_intake import DocumentCandidate, extract_candidates, validate_candidates
from .document_types import DOCUMENT_CATALOG, DocumentCatalog
from .onboarding import can_submit_documents
from .records import DocumentDraft, DocumentRecordStore
from .saga import SagaStep, run_saga
from .storage import StorageError, StorageService

logger = logging.getLogger(__name__)

VALIDATION_MESSAGE = "Please fix the highlighted files before continuing."
STATUS_UNAVAILABLE_MESSAGE = "Unable to load your onboarding status right now. Please try again."
WRONG_STEP_MESSAGE = "Documents can only be submitted once your application is in review."
REPLACE_MESSAGE = "Unable to replace existing documents right now. Please try again."
UPLOAD_MESSAGE = "We couldn't upload your files. Please try again."
SUCCESS_MESSAGE = (
    "Documents uploaded successfully. We'll review and confirm within 3-5 business days."
)


class DocumentSubmissionError(Exception):
    """Base class for every way a submission can fail."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DocumentValidationError(DocumentSubmissionError):
    """One or more fields failed validation. No I/O has been performed."""

    def __init__(self, field_errors: dict[str, str]):
        super().__init__(VALIDATION_MESSAGE)
        self.field_errors = field_errors


class OnboardingStateError(DocumentSubmissionError):
    """The profile is not at a step that accepts documents."""


class RetirementError(DocumentSubmissionError):
    """The previous document set could not be deleted."""


class UploadError(DocumentSubmissionError):
    """A file could not be written to the object store."""


class PersistenceError(DocumentSubmissionError):
    """Document rows could not be inserted after a successful upload."""


class StatusTransitionError(DocumentSubmissionError):
    """Documents are committed but the onboarding status was not advanced."""


def _unix_millis() -> int:
    return time.time_ns() // 1_000_000


def _db_error_message(exc: SQLAlchemyError) -> str:
    return str(getattr(exc, "orig", None) or exc)


@dataclass
class UploadResult:
    """Paths written by the upload stage and the rows that reference them."""

    storage_paths: list[str] = field(default_factory=list)
    records: list[DocumentDraft] = field(default_factory=list)


class DocumentSubmissionService:
    """Coordinates the object store and the record store for one submission."""

    def __init__(
        self,
        storage: StorageService,
        records: DocumentRecordStore,
        catalog: DocumentCatalog = DOCUMENT_CATALOG,
        clock: Callable[[], int] = _unix_millis,
    ):
        self._storage = storage
        self._records = records
        self._catalog = catalog
        self._clock = clock

    def prepare(self, fields: Mapping[str, object]) -> list[DocumentCandidate]:
        """Extract and validate candidates, raising on any field error."""
        specs = self._catalog.all_specs
        candidates = extract_candidates(fields, specs)
        field_errors, accepted = validate_candidates(candidates, specs)
        if field_errors:
            raise DocumentValidationError(field_errors)
        return accepted

    async def submit(self, profile_id: str, fields: Mapping[str, object]) -> str:
        """Run the whole submission and return the success message."""
        accepted = self.prepare(fields)
        logger.info(
            "Document submission started (profile=%s, files=%d)", profile_id, len(accepted)
        )

        uploaded = UploadResult()
        # Stages wrap their own database errors, so anything caught here
        # comes from taking or releasing the profile lock.
        try:
            async with self._records.profile_lock(profile_id):
                await self._check_status(profile_id)
                await run_saga(
                    [
                        SagaStep("retire", partial(self.retire, profile_id)),
                        SagaStep(
                            "upload",
                            partial(self.upload_all, profile_id, accepted, uploaded),
                            compensation=partial(self.discard_uploads, uploaded.storage_paths),
                        ),
                        SagaStep(
                            "persist", partial(self.persist, uploaded.records), commits=True
                        ),
                        SagaStep("advance", partial(self.advance, profile_id)),
                    ]
                )
        except SQLAlchemyError as exc:
            logger.error("Submission lock failed (profile=%s)", profile_id, exc_info=True)
            raise DocumentSubmissionError(STATUS_UNAVAILABLE_MESSAGE) from exc

        logger.info(
            "Document submission committed (profile=%s, documents=%d)",
            profile_id,
            len(uploaded.records),
        )
        return SUCCESS_MESSAGE

    async def _check_status(self, profile_id: str) -> None:
        try:
            status = await self._records.get_onboarding_status(profile_id)
        except SQLAlchemyError as exc:
            logger.error("Could not load onboarding status (profile=%s)", profile_id, exc_info=True)
            raise DocumentSubmissionError(STATUS_UNAVAILABLE_MESSAGE) from exc
        if not can_submit_documents(status):
            logger.warning(
                "Document submission rejected (profile=%s, status=%s)", profile_id, status
            )
            raise OnboardingStateError(WRONG_STEP_MESSAGE)

    async def retire(self, profile_id: str) -> None:
        """Delete the profile's current objects, then its document rows."""
        try:
            existing_paths = await self._records.list_storage_paths(profile_id)
        except SQLAlchemyError as exc:
            raise RetirementError(_db_error_message(exc)) from exc

        if existing_paths:
            try:
                await self._storage.delete_files(existing_paths)
            except StorageError as exc:
                logger.error(
                    "Failed to delete %d existing objects (profile=%s): %s",
                    len(existing_paths),
                    profile_id,
                    exc,
                )
                raise RetirementError(REPLACE_MESSAGE) from exc

        try:
            await self._records.delete_for_profile(profile_id)
        except SQLAlchemyError as exc:
            # Objects are already gone; rows still point at them.
            logger.error(
                "Deleted objects but not rows (profile=%s, paths=%s)", profile_id, existing_paths
            )
            raise RetirementError(_db_error_message(exc)) from exc

        logger.info("Retired %d documents (profile=%s)", len(existing_paths), profile_id)

    async def upload_all(
        self,
        profile_id: str,
        accepted: list[DocumentCandidate],
        result: UploadResult | None = None,
    ) -> UploadResult:
        """Write each candidate in turn, recording paths as they succeed.

        ``result`` is filled in place so a compensation holding the same
        list sees exactly the paths written before a failure.
        """
        if result is None:
            result = UploadResult()

        for candidate in accepted:
            storage_path = self._storage.build_object_key(
                profile_id, candidate.document_type, candidate.original_filename, self._clock()
            )
            try:
                await self._storage.upload_file(
                    candidate.content.data,
                    storage_path,
                    candidate.content_type,
                    overwrite=False,
                )
            except StorageError as exc:
                logger.error("Upload failed (path=%s): %s", storage_path, exc)
                raise UploadError(UPLOAD_MESSAGE) from exc

            result.storage_paths.append(storage_path)
            result.records.append(
                DocumentDraft(
                    profile_id=profile_id,
                    document_type=candidate.document_type,
                    storage_path=storage_path,
                    metadata={
                        "originalName": candidate.original_filename,
                        "size": candidate.size,
                        "mimeType": candidate.content_type,
                        "note": candidate.note,
                    },
                )
            )

        return result

    async def discard_uploads(self, storage_paths: list[str]) -> None:
        """Delete the objects written by this run. Nothing to do when none were."""
        if not storage_paths:
            return
        logger.warning("Removing %d uploaded objects: %s", len(storage_paths), storage_paths)
        await self._storage.delete_files(list(storage_paths))

    async def persist(self, records: list[DocumentDraft]) -> None:
        """Insert every drafted row in one batch."""
        if not records:
            return
        try:
            await self._records.insert_documents(records)
        except SQLAlchemyError as exc:
            logger.error("Document insert failed (rows=%d)", len(records), exc_info=True)
            raise PersistenceError(_db_error_message(exc)) from exc

    async def advance(self, profile_id: str) -> None:
        """Mark documents as accepted. Documents stay committed if this fails."""
        try:
            await self._records.set_onboarding_status(profile_id, OnboardingStatus.APPROVED)
        except SQLAlchemyError as exc:
            logger.error("Status update failed (profile=%s)", profile_id, exc_info=True)
            raise StatusTransitionError(_db_error_message(exc)) from exc
