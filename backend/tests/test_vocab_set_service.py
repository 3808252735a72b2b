"""
Hebrew Study Backend - Vocab Set Service Unit Tests
====================================================

What:  Listing, exclusive activation and toggling of vocab sets.

What we test:
    ✅ activate leaves exactly one active set (the target)
    ✅ activate on a missing set changes nothing
    ✅ toggle flips one set and leaves the others alone
    ✅ toggle twice restores the original flag
    ✅ updated_at moves only on rows whose flag changed
    ✅ activate locks every set row in id order
    ✅ storage failures map to the per-operation message
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from hebrewstudy.exceptions import NotFoundError, StorageError, ValidationError
from hebrewstudy.models.vocab_set import VocabSet
from hebrewstudy.services.vocab_set_service import VocabSetService


async def _active_flags(session_factory):
    async with session_factory() as session:
        result = await session.execute(select(VocabSet.id, VocabSet.is_active).order_by(VocabSet.id))
        return {row.id: bool(row.is_active) for row in result}


async def _updated_at(session_factory):
    async with session_factory() as session:
        result = await session.execute(select(VocabSet.id, VocabSet.updated_at))
        return {row.id: row.updated_at.replace(tzinfo=None) for row in result}


def _naive_utcnow() -> datetime:
    # SQLite returns naive UTC datetimes
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TestListSets:

    @pytest.mark.asyncio
    async def test_newest_first(self, seeded_db):
        sets = await VocabSetService().list_sets(seeded_db)
        assert [s.id for s in sets] == ["C", "B", "A"]
        assert [s.is_active for s in sets] == [False, True, False]
        assert sets[0].description == "Cardinal numbers"

    @pytest.mark.asyncio
    async def test_empty_table(self, db_session):
        assert await VocabSetService().list_sets(db_session) == []

    @pytest.mark.asyncio
    async def test_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
        with pytest.raises(StorageError) as exc_info:
            await VocabSetService().list_sets(mock_db_session)
        assert exc_info.value.message == "Failed to fetch vocab sets"


class TestActivate:

    @pytest.mark.asyncio
    async def test_target_becomes_the_only_active_set(self, seeded_db, session_factory):
        result = await VocabSetService().activate(seeded_db, "A")
        await seeded_db.commit()

        assert result.active_set_id == "A"
        assert await _active_flags(session_factory) == {"A": True, "B": False, "C": False}

    @pytest.mark.asyncio
    async def test_activating_the_active_set_keeps_it_active(self, seeded_db, session_factory):
        await VocabSetService().activate(seeded_db, "B")
        await seeded_db.commit()
        assert await _active_flags(session_factory) == {"A": False, "B": True, "C": False}

    @pytest.mark.asyncio
    async def test_collapses_several_active_sets(self, seeded_db, session_factory):
        service = VocabSetService()
        await service.toggle(seeded_db, "A")
        await service.toggle(seeded_db, "C")
        await seeded_db.commit()

        await service.activate(seeded_db, "C")
        await seeded_db.commit()
        assert await _active_flags(session_factory) == {"A": False, "B": False, "C": True}

    @pytest.mark.asyncio
    async def test_missing_set_changes_nothing(self, seeded_db, session_factory):
        with pytest.raises(NotFoundError) as exc_info:
            await VocabSetService().activate(seeded_db, "nonexistent")
        await seeded_db.commit()

        assert exc_info.value.message == "Vocab set not found"
        assert await _active_flags(session_factory) == {"A": False, "B": True, "C": False}

    @pytest.mark.asyncio
    async def test_missing_set_issues_no_update(self, mock_db_session):
        lookup = MagicMock()
        lookup.scalars.return_value.all.return_value = ["A", "B"]
        mock_db_session.execute.return_value = lookup

        with pytest.raises(NotFoundError):
            await VocabSetService().activate(mock_db_session, "nonexistent")
        assert mock_db_session.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_locks_every_set_in_id_order(self, mock_db_session):
        lookup = MagicMock()
        lookup.scalars.return_value.all.return_value = ["A", "B", "C"]
        mock_db_session.execute.return_value = lookup

        await VocabSetService().activate(mock_db_session, "B")

        lock_stmt = mock_db_session.execute.await_args_list[0].args[0]
        sql = " ".join(str(lock_stmt.compile(dialect=postgresql.dialect())).split())
        assert "WHERE" not in sql
        assert sql.endswith("ORDER BY vocab_sets.id FOR UPDATE")
        assert mock_db_session.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_updated_at_moves_only_for_changed_sets(self, seeded_db, session_factory):
        await VocabSetService().activate(seeded_db, "A")
        await seeded_db.commit()

        stamps = await _updated_at(session_factory)
        recent = _naive_utcnow() - timedelta(minutes=1)
        assert stamps["A"] > recent
        assert stamps["B"] > recent
        assert stamps["C"] < recent

    @pytest.mark.asyncio
    async def test_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
        with pytest.raises(StorageError) as exc_info:
            await VocabSetService().activate(mock_db_session, "A")
        assert exc_info.value.message == "Failed to activate vocab set"


class TestToggle:

    @pytest.mark.asyncio
    async def test_flips_only_the_target(self, seeded_db, session_factory):
        result = await VocabSetService().toggle(seeded_db, "C")
        await seeded_db.commit()

        assert result.set_id == "C"
        assert result.is_active is True
        assert await _active_flags(session_factory) == {"A": False, "B": True, "C": True}

    @pytest.mark.asyncio
    async def test_toggle_twice_restores_flag(self, seeded_db):
        service = VocabSetService()
        first = await service.toggle(seeded_db, "C")
        second = await service.toggle(seeded_db, "C")
        assert first.is_active is True
        assert second.is_active is False

    @pytest.mark.asyncio
    async def test_updated_at_moves_for_target_only(self, seeded_db, session_factory):
        await VocabSetService().toggle(seeded_db, "C")
        await seeded_db.commit()

        stamps = await _updated_at(session_factory)
        recent = _naive_utcnow() - timedelta(minutes=1)
        assert stamps["C"] > recent
        assert stamps["A"] < recent
        assert stamps["B"] < recent

    @pytest.mark.asyncio
    async def test_missing_set_id(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await VocabSetService().toggle(mock_db_session, None)
        assert exc_info.value.message == "Missing setId"
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_set(self, seeded_db):
        with pytest.raises(NotFoundError) as exc_info:
            await VocabSetService().toggle(seeded_db, "nonexistent")
        assert exc_info.value.message == "Vocab set not found"

    @pytest.mark.asyncio
    async def test_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("UPDATE", {}, Exception("down"))
        with pytest.raises(StorageError) as exc_info:
            await VocabSetService().toggle(mock_db_session, "C")
        assert exc_info.value.message == "Failed to toggle set status"
