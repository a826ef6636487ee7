"""Tests for the in-memory remote table used by unit tests."""

import pytest

from reflectodo.core.db_client import DatabaseError, RecordNotFoundError
from tests.unit.mocks import InMemoryDBClient


@pytest.fixture
def db() -> InMemoryDBClient:
    return InMemoryDBClient()


@pytest.mark.unit
class TestInMemoryDBClient:
    """Tests for InMemoryDBClient filtering and failure switches."""

    async def test_completed_filter_treats_null_as_empty(self, db):
        await db.create_record(collection="todos", data={"title": "a", "completed": True, "completed_at": None})
        await db.create_record(
            collection="todos", data={"title": "b", "completed": True, "completed_at": "2026-10-18T09:00:00Z"}
        )

        rows = await db.list_records(collection="todos", filter_query='completed = true && completed_at != ""')

        assert [row["title"] for row in rows] == ["b"]

    async def test_descending_sort(self, db):
        for stamp in ("2026-10-01", "2026-10-03", "2026-10-02"):
            await db.create_record(collection="todos", data={"created_at": stamp})

        rows = await db.list_records(collection="todos", sort="-created_at")

        assert [row["created_at"] for row in rows] == ["2026-10-03", "2026-10-02", "2026-10-01"]

    async def test_update_missing_record(self, db):
        with pytest.raises(RecordNotFoundError):
            await db.update_record(collection="todos", record_id="nope", data={"title": "x"})

    async def test_fail_writes(self, db):
        db.fail_writes = True

        with pytest.raises(DatabaseError, match="Failed to create record"):
            await db.create_record(collection="todos", data={"title": "x"})

    async def test_unknown_collection_lists_nothing(self, db):
        assert await db.list_records(collection="missing") == []
