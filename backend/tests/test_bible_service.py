"""
Hebrew Study Backend - Bible Service Unit Tests
================================================
"""

import pytest
from sqlalchemy.exc import OperationalError

from hebrewstudy.exceptions import StorageError
from hebrewstudy.services.bible_service import BibleService


@pytest.mark.asyncio
async def test_books_are_in_canonical_order(seeded_db):
    books = await BibleService().list_books(seeded_db)

    assert [b.id for b in books] == ["genesis", "exodus", "leviticus"]
    assert [b.order_index for b in books] == [1, 2, 3]
    assert books[0].hebrew_name == "בראשית"
    assert books[0].chapter_count == 50


@pytest.mark.asyncio
async def test_serializes_camel_case(seeded_db):
    books = await BibleService().list_books(seeded_db)
    payload = books[0].model_dump(by_alias=True)
    assert set(payload) == {
        "id", "name", "hebrewName", "abbreviation", "chapterCount", "testament", "orderIndex",
    }


@pytest.mark.asyncio
async def test_empty_table(db_session):
    assert await BibleService().list_books(db_session) == []


@pytest.mark.asyncio
async def test_database_error(mock_db_session):
    mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
    with pytest.raises(StorageError) as exc_info:
        await BibleService().list_books(mock_db_session)
    assert exc_info.value.message == "Failed to fetch Bible books"


@pytest.mark.asyncio
async def test_repeated_reads_agree(seeded_db):
    service = BibleService()
    first = await service.list_books(seeded_db)
    second = await service.list_books(seeded_db)

    assert [b.model_dump() for b in first] == [b.model_dump() for b in second]
