# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, get_db, get_db_service
from .enums import DocumentType, OnboardingStatus, UserRole
from .models import ProfessionalDocument, Profile

__all__ = [
    "Base",
    "DatabaseService",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "DocumentType",
    "OnboardingStatus",
    "UserRole",
    # Models
    "Profile",
    "ProfessionalDocument",
]
