# This project was developed with assistance from AI tools.
"""Tests for the SQLAlchemy record store, against a mocked session."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from db import ProfessionalDocument
from db.enums import OnboardingStatus
from sqlalchemy.exc import IntegrityError, OperationalError

from onboarding_api.services.records import DocumentDraft, DocumentRecordStore, advisory_lock_key


def _session(result: MagicMock | None = None) -> AsyncMock:
    session = AsyncMock()
    session.execute = AsyncMock(return_value=result or MagicMock())
    # add_all() is synchronous in SQLAlchemy
    session.add_all = MagicMock()
    return session


def _lockable_session() -> tuple[AsyncMock, AsyncMock]:
    session = _session()
    conn = AsyncMock()
    conn.begin = MagicMock()
    session.bind = MagicMock()
    session.bind.connect.return_value.__aenter__.return_value = conn
    return session, conn


def _drafts() -> list[DocumentDraft]:
    return [
        DocumentDraft("pro-1", "government_id", "pro-1/government_id/1-id.pdf", {"size": 10}),
        DocumentDraft("pro-1", "proof_of_address", "pro-1/proof_of_address/2-bill.pdf"),
    ]


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def test_get_onboarding_status():
    result = MagicMock()
    result.scalar_one_or_none.return_value = OnboardingStatus.APPROVED
    store = DocumentRecordStore(_session(result))

    assert await store.get_onboarding_status("pro-1") == OnboardingStatus.APPROVED


async def test_list_storage_paths():
    result = MagicMock()
    result.scalars.return_value.all.return_value = ["a", "b"]
    store = DocumentRecordStore(_session(result))

    assert await store.list_storage_paths("pro-1") == ["a", "b"]


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def test_insert_documents_adds_all_then_commits():
    session = _session()
    store = DocumentRecordStore(session)

    await store.insert_documents(_drafts())

    models = session.add_all.call_args.args[0]
    assert [type(m) for m in models] == [ProfessionalDocument, ProfessionalDocument]
    assert models[0].storage_path == "pro-1/government_id/1-id.pdf"
    assert models[0].document_metadata == {"size": 10}
    assert models[1].document_metadata == {}
    session.flush.assert_awaited_once()
    session.commit.assert_awaited_once()
    session.rollback.assert_not_awaited()


async def test_insert_failure_rolls_back_and_raises():
    session = _session()
    session.flush.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))
    store = DocumentRecordStore(session)

    with pytest.raises(IntegrityError):
        await store.insert_documents(_drafts())

    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()


async def test_delete_for_profile_commits():
    session = _session()
    store = DocumentRecordStore(session)

    await store.delete_for_profile("pro-1")

    session.execute.assert_awaited_once()
    session.commit.assert_awaited_once()


async def test_commit_failure_rolls_back():
    session = _session()
    session.commit.side_effect = OperationalError("COMMIT", {}, Exception("connection lost"))
    store = DocumentRecordStore(session)

    with pytest.raises(OperationalError):
        await store.set_onboarding_status("pro-1", OnboardingStatus.APPROVED)

    session.rollback.assert_awaited_once()


async def test_update_failure_rolls_back():
    session = _session()
    session.execute.side_effect = OperationalError("UPDATE", {}, Exception("timeout"))
    store = DocumentRecordStore(session)

    with pytest.raises(OperationalError):
        await store.set_onboarding_status("pro-1", OnboardingStatus.APPROVED)

    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()


# ---------------------------------------------------------------------------
# Per-profile lock
# ---------------------------------------------------------------------------


def test_advisory_lock_key_is_stable_signed_64_bit():
    key = advisory_lock_key("pro-1")
    assert key == advisory_lock_key("pro-1")
    assert key != advisory_lock_key("pro-2")
    assert -(2**63) <= key < 2**63


async def test_profile_lock_takes_advisory_lock_on_own_connection():
    session, conn = _lockable_session()
    store = DocumentRecordStore(session)

    async with store.profile_lock("pro-1"):
        pass

    (timeout_stmt, timeout_params), (lock_stmt, lock_params) = [
        call.args for call in conn.execute.await_args_list
    ]
    assert "lock_timeout" in str(timeout_stmt)
    assert timeout_params == {"timeout": "10000ms"}
    assert "pg_advisory_xact_lock" in str(lock_stmt)
    assert lock_params == {"key": advisory_lock_key("pro-1")}
    session.execute.assert_not_awaited()


async def test_profile_lock_wait_is_bounded():
    session, conn = _lockable_session()
    store = DocumentRecordStore(session, lock_timeout_ms=250)

    async with store.profile_lock("pro-1"):
        pass

    assert conn.execute.await_args_list[0].args[1] == {"timeout": "250ms"}


async def test_profile_lock_timeout_propagates():
    session, conn = _lockable_session()
    conn.execute.side_effect = [
        MagicMock(),
        OperationalError("SELECT pg_advisory_xact_lock", {}, Exception("lock timeout")),
    ]
    store = DocumentRecordStore(session)
    entered = False

    with pytest.raises(OperationalError):
        async with store.profile_lock("pro-1"):
            entered = True

    assert entered is False


async def test_profile_lock_disabled_touches_nothing():
    session, conn = _lockable_session()
    store = DocumentRecordStore(session, lock_enabled=False)

    async with store.profile_lock("pro-1"):
        pass

    session.bind.connect.assert_not_called()
    conn.execute.assert_not_awaited()
