# This project was developed with assistance from AI tools.
"""Onboarding state machine.

Decides which of the three onboarding steps (application, documents,
profile) a professional should see. Nothing here writes: the application
and profile steps advance the status elsewhere, and the document step
advances it through the submission saga.
"""

from collections.abc import Iterable

from db.enums import OnboardingStatus

from ..schemas.onboarding import OnboardingStatusResponse, OnboardingStep
from .document_types import DOCUMENT_CATALOG, DocumentCatalog

STEPS: tuple[dict[str, str], ...] = (
    {
        "id": "application",
        "title": "Submit application",
        "description": "Tell us about your experience, services, and references.",
    },
    {
        "id": "documents",
        "title": "Upload documents",
        "description": "Provide required identification and proof of address.",
    },
    {
        "id": "profile",
        "title": "Build your profile",
        "description": "Create a compelling bio, select services, and set rates.",
    },
)

_STEP_INDEX: dict[OnboardingStatus, int] = {
    OnboardingStatus.APPLICATION_IN_REVIEW: 0,
    OnboardingStatus.APPROVED: 1,
    OnboardingStatus.ACTIVE: 2,
}

_TRANSITIONS = OnboardingStatus.valid_transitions()

# Statuses from which the document step may run (APPROVED allows resubmission)
_DOCUMENT_SUBMISSION_STATUSES = frozenset(
    {OnboardingStatus.APPLICATION_IN_REVIEW, OnboardingStatus.APPROVED}
)


def _coerce(status: OnboardingStatus | str | None) -> OnboardingStatus | None:
    if status is None or isinstance(status, OnboardingStatus):
        return status
    try:
        return OnboardingStatus(status)
    except ValueError:
        return None


def step_index(status: OnboardingStatus | str | None) -> int:
    """Map a status onto the step index; unknown statuses start at 0."""
    coerced = _coerce(status)
    if coerced is None:
        return 0
    return _STEP_INDEX.get(coerced, 0)


def current_step(status: OnboardingStatus | str | None) -> str:
    """Id of the step to present for this status."""
    return STEPS[step_index(status)]["id"]


def can_transition(
    current: OnboardingStatus | str | None, target: OnboardingStatus | str | None
) -> bool:
    """True only for the single forward edge out of ``current``."""
    current_status = _coerce(current)
    target_status = _coerce(target)
    if current_status is None or target_status is None:
        return False
    return target_status in _TRANSITIONS[current_status]


def can_submit_documents(status: OnboardingStatus | str | None) -> bool:
    return _coerce(status) in _DOCUMENT_SUBMISSION_STATUSES


def has_reached_status(
    current: OnboardingStatus | str | None, target: OnboardingStatus | str | None
) -> bool:
    """Whether ``current`` is at or past ``target`` in the onboarding order."""
    order = OnboardingStatus.progression()
    current_status = _coerce(current)
    target_status = _coerce(target)
    if current_status not in order or target_status not in order:
        return False
    return order.index(current_status) >= order.index(target_status)


def missing_documents(
    document_types: Iterable[str], catalog: DocumentCatalog = DOCUMENT_CATALOG
) -> list[str]:
    """Required document keys with no live record, in catalog order."""
    present = {getattr(doc_type, "value", doc_type) for doc_type in document_types}
    return [spec.key for spec in catalog.required if spec.key not in present]


def build_onboarding_status(
    status: OnboardingStatus | str | None,
    document_types: Iterable[str],
    catalog: DocumentCatalog = DOCUMENT_CATALOG,
) -> OnboardingStatusResponse:
    """Summarise progress for the onboarding page."""
    onboarding_status = _coerce(status) or OnboardingStatus.NONE
    index = step_index(onboarding_status)
    is_complete = onboarding_status == OnboardingStatus.ACTIVE

    steps = [
        OnboardingStep(
            **step,
            is_completed=position < index or is_complete,
            is_current=position == index and not is_complete,
        )
        for position, step in enumerate(STEPS)
    ]

    return OnboardingStatusResponse(
        onboarding_status=onboarding_status,
        step_index=index,
        current_step=None if is_complete else STEPS[index]["id"],
        is_complete=is_complete,
        steps=steps,
        missing_documents=missing_documents(document_types, catalog),
    )
