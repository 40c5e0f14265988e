# This project was developed with assistance from AI tools.
"""Professional onboarding routes: document submission and progress."""

import logging

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from ..core.config import settings
from ..middleware.auth import CurrentUser, require_roles
from ..schemas.document import DocumentListResponse, DocumentResponse, DocumentTypeResponse
from ..schemas.onboarding import OnboardingStatusResponse
from ..schemas.submission import SubmissionResponse
from ..services.document_intake import SubmittedFile
from ..services.document_types import DOCUMENT_CATALOG, MAX_DOCUMENT_SIZE_BYTES
from ..services.onboarding import build_onboarding_status
from ..services.records import DocumentRecordStore
from ..services.storage import StorageError, get_storage_service
from ..services.submission import (
    DocumentSubmissionError,
    DocumentSubmissionService,
    DocumentValidationError,
    OnboardingStateError,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_ONBOARDING_ROLES = (
    UserRole.PROFESSIONAL,
    UserRole.ADMIN,
)


def get_record_store(session: AsyncSession = Depends(get_db)) -> DocumentRecordStore:
    return DocumentRecordStore(
        session,
        lock_enabled=settings.SUBMISSION_LOCK_ENABLED,
        lock_timeout_ms=settings.SUBMISSION_LOCK_TIMEOUT_MS,
    )


def get_submission_service(
    records: DocumentRecordStore = Depends(get_record_store),
) -> DocumentSubmissionService:
    return DocumentSubmissionService(get_storage_service(), records, DOCUMENT_CATALOG)


async def _read_submission(request: Request) -> dict[str, object]:
    """Turn the multipart body into a plain field map, first value per key wins.

    Files are read up to one byte past the size limit; that is enough for
    the validator to reject them without buffering the whole body.
    """
    form = await request.form()
    fields: dict[str, object] = {}
    for key, value in form.multi_items():
        if key in fields:
            continue
        if isinstance(value, UploadFile):
            fields[key] = SubmittedFile(
                filename=value.filename,
                content_type=value.content_type,
                data=await value.read(MAX_DOCUMENT_SIZE_BYTES + 1),
            )
        else:
            fields[key] = value
    return fields


def _error_response(
    status_code: int, message: str, field_errors: dict[str, str] | None = None
) -> JSONResponse:
    body = SubmissionResponse(status="error", message=message, field_errors=field_errors or {})
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post(
    "/documents",
    response_model=SubmissionResponse,
    dependencies=[Depends(require_roles(*_ONBOARDING_ROLES))],
)
async def submit_documents(
    request: Request,
    user: CurrentUser,
    service: DocumentSubmissionService = Depends(get_submission_service),
) -> SubmissionResponse | JSONResponse:
    """Replace the caller's verification documents with a new set."""
    fields = await _read_submission(request)

    try:
        message = await service.submit(user.user_id, fields)
    except DocumentValidationError as exc:
        return _error_response(422, exc.message, exc.field_errors)
    except OnboardingStateError as exc:
        return _error_response(status.HTTP_409_CONFLICT, exc.message)
    except DocumentSubmissionError as exc:
        logger.warning(
            "Document submission failed (profile=%s, error=%s): %s",
            user.user_id,
            type(exc).__name__,
            exc.message,
        )
        return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc.message)

    return SubmissionResponse(status="success", message=message)


@router.get(
    "/status",
    response_model=OnboardingStatusResponse,
    dependencies=[Depends(require_roles(*_ONBOARDING_ROLES))],
)
async def get_onboarding_status(
    user: CurrentUser,
    records: DocumentRecordStore = Depends(get_record_store),
) -> OnboardingStatusResponse:
    """Which onboarding step to show and which required documents are missing."""
    onboarding_status = await records.get_onboarding_status(user.user_id)
    if onboarding_status is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )
    documents = await records.list_documents(user.user_id)
    return build_onboarding_status(onboarding_status, [doc.document_type for doc in documents])


@router.get(
    "/documents",
    response_model=DocumentListResponse,
    dependencies=[Depends(require_roles(*_ONBOARDING_ROLES))],
)
async def list_documents(
    user: CurrentUser,
    records: DocumentRecordStore = Depends(get_record_store),
) -> DocumentListResponse:
    """The caller's live document set, with short-lived download links."""
    documents = await records.list_documents(user.user_id)
    storage = get_storage_service()

    items = []
    for doc in documents:
        try:
            download_url = await storage.get_download_url(doc.storage_path)
        except StorageError:
            logger.warning("Could not presign %s", doc.storage_path, exc_info=True)
            download_url = None
        item = DocumentResponse.model_validate(doc)
        items.append(
            item.model_copy(
                update={
                    "label": DOCUMENT_CATALOG.label_for(item.document_type.value),
                    "download_url": download_url,
                }
            )
        )
    return DocumentListResponse(data=items, count=len(items))


@router.get("/document-types", response_model=list[DocumentTypeResponse])
async def list_document_types() -> list[DocumentTypeResponse]:
    """Document slots in form order, required first."""
    return [
        DocumentTypeResponse(
            key=spec.key,
            label=spec.label,
            required=spec.required,
            field_name=spec.field_name,
            note_field_name=spec.note_field_name,
        )
        for spec in DOCUMENT_CATALOG.all_specs
    ]
