# This project was developed with assistance from AI tools.
"""Pydantic request/response schemas for the onboarding API."""

from .auth import TokenPayload, UserContext
from .document import DocumentListResponse, DocumentResponse, DocumentTypeResponse
from .error import ErrorResponse
from .onboarding import OnboardingStatusResponse, OnboardingStep
from .submission import SubmissionResponse

__all__ = [
    "DocumentListResponse",
    "DocumentResponse",
    "DocumentTypeResponse",
    "ErrorResponse",
    "OnboardingStatusResponse",
    "OnboardingStep",
    "SubmissionResponse",
    "TokenPayload",
    "UserContext",
]
