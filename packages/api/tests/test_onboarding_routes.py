# This project was developed with assistance from AI tools.
"""Tests for the onboarding HTTP routes."""

from unittest.mock import patch

import pytest
from db.enums import OnboardingStatus, UserRole
from fastapi.testclient import TestClient

from onboarding_api.main import app
from onboarding_api.middleware.auth import get_current_user
from onboarding_api.routes.onboarding import get_record_store, get_submission_service
from onboarding_api.schemas.auth import UserContext
from onboarding_api.services.records import DocumentDraft
from onboarding_api.services.submission import (
    STATUS_UNAVAILABLE_MESSAGE,
    SUCCESS_MESSAGE,
    UPLOAD_MESSAGE,
    VALIDATION_MESSAGE,
    WRONG_STEP_MESSAGE,
    DocumentSubmissionService,
)

from .fakes import PROFILE_ID, Clock, FakeRecordStore, FakeStorage

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_user(role: UserRole = UserRole.PROFESSIONAL) -> UserContext:
    return UserContext(
        user_id=PROFILE_ID,
        role=role,
        email="pro@casaora.test",
        name="Test Professional",
    )


def _files(**overrides) -> dict:
    files = {
        "document_government_id": ("passport.pdf", b"%PDF-1.7 id", "application/pdf"),
        "document_proof_of_address": ("bill.png", b"\x89PNG bill", "image/png"),
    }
    files.update(overrides)
    return {key: value for key, value in files.items() if value is not None}


@pytest.fixture
def client_for():
    """Wire the app to fake stores for a given user; overrides are cleared afterwards."""

    def _build(
        records: FakeRecordStore,
        storage: FakeStorage | None = None,
        user: UserContext | None = None,
    ) -> TestClient:
        storage = storage or FakeStorage()
        service = DocumentSubmissionService(storage, records, clock=Clock())
        app.dependency_overrides[get_current_user] = lambda: user or _make_user()
        app.dependency_overrides[get_record_store] = lambda: records
        app.dependency_overrides[get_submission_service] = lambda: service
        return TestClient(app)

    yield _build
    app.dependency_overrides.clear()


def _in_review() -> FakeRecordStore:
    return FakeRecordStore({PROFILE_ID: OnboardingStatus.APPLICATION_IN_REVIEW})


# ---------------------------------------------------------------------------
# POST /api/onboarding/documents
# ---------------------------------------------------------------------------


def test_submit_success(client_for):
    records = _in_review()
    client = client_for(records)

    resp = client.post(
        "/api/onboarding/documents",
        files=_files(),
        data={"document_government_id_note": "  front and back  "},
    )

    assert resp.status_code == 200
    assert resp.json() == {"status": "success", "message": SUCCESS_MESSAGE, "field_errors": {}}
    rows = records.rows_for(PROFILE_ID)
    assert [row.document_type for row in rows] == ["government_id", "proof_of_address"]
    assert rows[0].metadata["note"] == "front and back"
    assert rows[0].metadata["size"] == len(b"%PDF-1.7 id")
    assert records.statuses[PROFILE_ID] == OnboardingStatus.APPROVED


def test_submit_validation_errors_return_422(client_for):
    records = _in_review()
    storage = FakeStorage()
    client = client_for(records, storage)

    resp = client.post(
        "/api/onboarding/documents",
        files=_files(
            document_government_id=None,
            document_certification=("notes.txt", b"hello", "text/plain"),
        ),
    )

    assert resp.status_code == 422
    body = resp.json()
    assert body["status"] == "error"
    assert body["message"] == VALIDATION_MESSAGE
    assert body["field_errors"] == {
        "document_government_id": "Government ID is required.",
        "document_certification": "Only PDF, JPG, or PNG files are supported.",
    }
    assert storage.call_count == 0
    assert records.call_count == 0


def test_oversized_file_is_rejected(client_for):
    client = client_for(_in_review())

    resp = client.post(
        "/api/onboarding/documents",
        files=_files(document_proof_of_address=("bill.pdf", b"x" * 5_242_881, "application/pdf")),
    )

    assert resp.status_code == 422
    assert list(resp.json()["field_errors"]) == ["document_proof_of_address"]


def test_submit_at_wrong_step_returns_409(client_for):
    records = FakeRecordStore({PROFILE_ID: OnboardingStatus.APPLICATION_PENDING})
    client = client_for(records)

    resp = client.post("/api/onboarding/documents", files=_files())

    assert resp.status_code == 409
    assert resp.json()["message"] == WRONG_STEP_MESSAGE


def test_submit_upload_failure_returns_503(client_for):
    records = _in_review()
    storage = FakeStorage(fail_on_put={2})
    client = client_for(records, storage)

    resp = client.post("/api/onboarding/documents", files=_files())

    assert resp.status_code == 503
    assert resp.json() == {"status": "error", "message": UPLOAD_MESSAGE, "field_errors": {}}
    assert storage.objects == {}


def test_submit_lock_failure_returns_503(client_for):
    records = _in_review()
    records.fail.add("profile_lock")
    storage = FakeStorage()
    client = client_for(records, storage)

    resp = client.post("/api/onboarding/documents", files=_files())

    assert resp.status_code == 503
    assert resp.json() == {
        "status": "error",
        "message": STATUS_UNAVAILABLE_MESSAGE,
        "field_errors": {},
    }
    assert storage.call_count == 0


def test_customer_cannot_submit(client_for):
    client = client_for(_in_review(), user=_make_user(UserRole.CUSTOMER))

    resp = client.post("/api/onboarding/documents", files=_files())

    assert resp.status_code == 403
    assert resp.json()["detail"] == "Insufficient permissions"


# ---------------------------------------------------------------------------
# GET /api/onboarding/status
# ---------------------------------------------------------------------------


def test_status_reports_step_and_missing_documents(client_for):
    records = FakeRecordStore({PROFILE_ID: OnboardingStatus.APPROVED})
    records.rows.append(DocumentDraft(PROFILE_ID, "government_id", "p/government_id/1-a.pdf"))
    client = client_for(records)

    resp = client.get("/api/onboarding/status")

    assert resp.status_code == 200
    body = resp.json()
    assert body["onboarding_status"] == "approved"
    assert body["step_index"] == 1
    assert body["current_step"] == "documents"
    assert body["missing_documents"] == ["proof_of_address"]


def test_status_without_profile_returns_404(client_for):
    client = client_for(FakeRecordStore())

    resp = client.get("/api/onboarding/status")

    assert resp.status_code == 404
    assert resp.json()["title"] == "Not Found"


# ---------------------------------------------------------------------------
# GET /api/onboarding/documents
# ---------------------------------------------------------------------------


def test_list_documents_includes_labels_and_urls(client_for):
    records = _in_review()
    records.rows.append(
        DocumentDraft(
            PROFILE_ID,
            "proof_of_address",
            f"{PROFILE_ID}/proof_of_address/1-bill.pdf",
            {"originalName": "bill.pdf"},
        )
    )
    storage = FakeStorage()
    client = client_for(records, storage)

    with patch("onboarding_api.routes.onboarding.get_storage_service", return_value=storage):
        resp = client.get("/api/onboarding/documents")

    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 1
    doc = body["data"][0]
    assert doc["document_type"] == "proof_of_address"
    assert doc["label"] == "Proof of address"
    assert doc["metadata"] == {"originalName": "bill.pdf"}
    assert doc["download_url"].startswith("https://minio.test/professional-documents/")


# ---------------------------------------------------------------------------
# GET /api/onboarding/document-types
# ---------------------------------------------------------------------------


def test_document_types_in_form_order(client_for):
    client = client_for(_in_review())

    resp = client.get("/api/onboarding/document-types")

    assert resp.status_code == 200
    assert [(t["key"], t["required"]) for t in resp.json()] == [
        ("government_id", True),
        ("proof_of_address", True),
        ("certification", False),
    ]
    assert resp.json()[0]["field_name"] == "document_government_id"
