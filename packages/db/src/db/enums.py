# This project was developed with assistance from AI tools.
"""
Domain enums for professional onboarding.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class OnboardingStatus(str, enum.Enum):
    NONE = "none"
    APPLICATION_PENDING = "application_pending"
    APPLICATION_IN_REVIEW = "application_in_review"
    APPROVED = "approved"
    ACTIVE = "active"

    @classmethod
    def progression(cls) -> tuple["OnboardingStatus", ...]:
        """Forward order used by the dashboard to compare progress."""
        return (
            cls.APPLICATION_PENDING,
            cls.APPLICATION_IN_REVIEW,
            cls.APPROVED,
            cls.ACTIVE,
        )

    @classmethod
    def valid_transitions(cls) -> dict["OnboardingStatus", frozenset["OnboardingStatus"]]:
        """Allowed status transitions. Onboarding only ever moves forward."""
        return {
            cls.NONE: frozenset({cls.APPLICATION_IN_REVIEW}),
            cls.APPLICATION_PENDING: frozenset({cls.APPLICATION_IN_REVIEW}),
            cls.APPLICATION_IN_REVIEW: frozenset({cls.APPROVED}),
            cls.APPROVED: frozenset({cls.ACTIVE}),
            cls.ACTIVE: frozenset(),
        }


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"
    PROFESSIONAL = "professional"


class DocumentType(str, enum.Enum):
    GOVERNMENT_ID = "government_id"
    PROOF_OF_ADDRESS = "proof_of_address"
    CERTIFICATION = "certification"
