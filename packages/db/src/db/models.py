# This project was developed with assistance from AI tools.
"""
Casaora professional onboarding -- domain models

Account profiles (owned by the identity subsystem, only the onboarding
status is written here) and the verification documents a professional
submits during onboarding.
"""

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import DocumentType, OnboardingStatus, UserRole


class Profile(Base):
    """Account profile linked to a Keycloak identity."""

    __tablename__ = "profiles"

    id = Column(String(255), primary_key=True)
    email = Column(String(255), nullable=False, index=True)
    full_name = Column(String(200), nullable=True)
    role = Column(
        Enum(UserRole, name="user_role", native_enum=False),
        nullable=False,
        default=UserRole.CUSTOMER,
    )
    onboarding_status = Column(
        Enum(OnboardingStatus, name="onboarding_status", native_enum=False),
        nullable=False,
        default=OnboardingStatus.NONE,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    documents = relationship(
        "ProfessionalDocument", back_populates="profile", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Profile(id={self.id}, onboarding_status='{self.onboarding_status}')>"


class ProfessionalDocument(Base):
    """Verification document committed by a successful submission.

    ``storage_path`` locates the object in the documents bucket. The whole
    set for a profile is replaced on every successful submission.
    """

    __tablename__ = "professional_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    profile_id = Column(
        String(255), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    document_type = Column(
        Enum(DocumentType, name="document_type", native_enum=False),
        nullable=False,
    )
    storage_path = Column(String(500), nullable=False, unique=True)
    # "metadata" is reserved on declarative classes
    document_metadata = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    profile = relationship("Profile", back_populates="documents")

    def __repr__(self):
        return f"<ProfessionalDocument(id={self.id}, type='{self.document_type}')>"
