# This project was developed with assistance from AI tools.
"""Record-store access for professional documents and onboarding status.

Every mutating call commits on its own so each one is an independent
failure domain for the submission saga. On a database error the session
is rolled back and the ``SQLAlchemyError`` propagates.
"""

import hashlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from db import ProfessionalDocument, Profile
from db.enums import DocumentType, OnboardingStatus
from sqlalchemy import delete, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@dataclass
class DocumentDraft:
    """A document row built by the upload stage, not yet inserted."""

    profile_id: str
    document_type: str
    storage_path: str
    metadata: dict = field(default_factory=dict)

    def to_model(self) -> ProfessionalDocument:
        return ProfessionalDocument(
            profile_id=self.profile_id,
            document_type=DocumentType(self.document_type),
            storage_path=self.storage_path,
            document_metadata=self.metadata,
        )


def advisory_lock_key(profile_id: str) -> int:
    """Map a profile id onto the signed 64-bit key space of pg advisory locks."""
    digest = hashlib.sha256(profile_id.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big", signed=True)


class DocumentRecordStore:
    """SQLAlchemy-backed record store used by the submission saga."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        lock_enabled: bool = True,
        lock_timeout_ms: int = 10_000,
    ):
        self._session = session
        self._lock_enabled = lock_enabled
        self._lock_timeout_ms = lock_timeout_ms

    async def _commit(self) -> None:
        try:
            await self._session.commit()
        except SQLAlchemyError:
            await self._session.rollback()
            raise

    async def get_onboarding_status(self, profile_id: str) -> OnboardingStatus | None:
        """Return the profile's onboarding status, or None if there is no profile."""
        result = await self._session.execute(
            select(Profile.onboarding_status).where(Profile.id == profile_id)
        )
        return result.scalar_one_or_none()

    async def set_onboarding_status(self, profile_id: str, status: OnboardingStatus) -> None:
        try:
            await self._session.execute(
                update(Profile).where(Profile.id == profile_id).values(onboarding_status=status)
            )
        except SQLAlchemyError:
            await self._session.rollback()
            raise
        await self._commit()

    async def list_storage_paths(self, profile_id: str) -> list[str]:
        result = await self._session.execute(
            select(ProfessionalDocument.storage_path).where(
                ProfessionalDocument.profile_id == profile_id
            )
        )
        return list(result.scalars().all())

    async def list_documents(self, profile_id: str) -> list[ProfessionalDocument]:
        result = await self._session.execute(
            select(ProfessionalDocument)
            .where(ProfessionalDocument.profile_id == profile_id)
            .order_by(ProfessionalDocument.created_at, ProfessionalDocument.id)
        )
        return list(result.scalars().all())

    async def delete_for_profile(self, profile_id: str) -> None:
        """Delete every document row owned by the profile."""
        try:
            await self._session.execute(
                delete(ProfessionalDocument).where(ProfessionalDocument.profile_id == profile_id)
            )
        except SQLAlchemyError:
            await self._session.rollback()
            raise
        await self._commit()

    async def insert_documents(self, drafts: list[DocumentDraft]) -> None:
        """Insert all drafts in one transaction."""
        self._session.add_all([draft.to_model() for draft in drafts])
        try:
            await self._session.flush()
        except SQLAlchemyError:
            await self._session.rollback()
            raise
        await self._commit()

    @asynccontextmanager
    async def profile_lock(self, profile_id: str) -> AsyncIterator[None]:
        """Hold a transaction-scoped advisory lock keyed on the profile.

        The lock lives on its own connection so the per-stage commits of
        the saga don't release it early. The holder and every waiter each
        keep one pooled connection; a waiter gives up after
        ``lock_timeout_ms`` with a ``DBAPIError`` (lock_not_available).
        """
        if not self._lock_enabled:
            yield
            return

        key = advisory_lock_key(profile_id)
        async with self._session.bind.connect() as conn:
            async with conn.begin():
                await conn.execute(
                    text("SELECT set_config('lock_timeout', :timeout, true)"),
                    {"timeout": f"{self._lock_timeout_ms}ms"},
                )
                logger.debug("Waiting for submission lock (profile=%s)", profile_id)
                await conn.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": key})
                yield
