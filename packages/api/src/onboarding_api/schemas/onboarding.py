# This project was developed with assistance from AI tools.
"""Onboarding progress schemas."""

from db.enums import OnboardingStatus
from pydantic import BaseModel


class OnboardingStep(BaseModel):
    """One of the three onboarding steps shown to a professional."""

    id: str
    title: str
    description: str
    is_completed: bool
    is_current: bool


class OnboardingStatusResponse(BaseModel):
    """Where a professional is in onboarding and what is still missing."""

    onboarding_status: OnboardingStatus
    step_index: int
    current_step: str | None
    is_complete: bool
    steps: list[OnboardingStep]
    missing_documents: list[str]
