# This project was developed with assistance from AI tools.
"""Shared fixtures: fake stores and a submission service wired to them."""

import pytest
from db.enums import OnboardingStatus

from onboarding_api.services.document_intake import SubmittedFile
from onboarding_api.services.submission import DocumentSubmissionService

from .fakes import PROFILE_ID, Clock, FakeRecordStore, FakeStorage


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def records() -> FakeRecordStore:
    return FakeRecordStore({PROFILE_ID: OnboardingStatus.APPLICATION_IN_REVIEW})


@pytest.fixture
def service(storage, records) -> DocumentSubmissionService:
    return DocumentSubmissionService(storage, records, clock=Clock())


@pytest.fixture
def make_file():
    """Factory for uploaded files; ``size`` pads the payload to an exact length."""

    def _make(
        filename: str = "scan.pdf",
        content_type: str = "application/pdf",
        size: int = 1024,
    ) -> SubmittedFile:
        return SubmittedFile(filename=filename, content_type=content_type, data=b"x" * size)

    return _make


@pytest.fixture
def full_submission(make_file):
    """Both required documents plus the optional certification."""
    return {
        "document_government_id": make_file("passport.pdf"),
        "document_government_id_note": "  Passport, expires 2030  ",
        "document_proof_of_address": make_file("utility bill.png", "image/png"),
        "document_certification": make_file("first-aid.jpg", "image/jpeg"),
    }
