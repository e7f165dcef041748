"""Tests for the skip list snapshot and its repository."""

import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from labreport.repositories.skip_range import SkipRangeRepository
from labreport.schemas.results import ExceptionEntry, ExceptionKind
from labreport.services.skip_list import SkipListStore


def _fetcher(entries):
    async def fetch():
        return entries

    return fetch


async def _failing_fetch():
    raise ConnectionError("database unreachable")


# =============================================================================
# SkipListStore
# =============================================================================


class TestSkipListStore:
    """Snapshot semantics."""

    @pytest.mark.asyncio
    async def test_load(self, skip_entries):
        store = await SkipListStore.load(_fetcher(skip_entries))
        assert store.names == frozenset({"Sérologie"})
        assert "Sérologie" in store
        assert store.contains("Biochimie") is False
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_fetch_failure_gives_empty_snapshot(self, caplog):
        with caplog.at_level(logging.WARNING):
            store = await SkipListStore.load(_failing_fetch)
        assert len(store) == 0
        assert store.names == frozenset()
        assert any("Skip list unavailable" in r.message for r in caplog.records)

    @pytest.mark.asyncio
    async def test_fetched_once(self, skip_entries):
        fetch = AsyncMock(return_value=skip_entries)
        store = await SkipListStore.load(fetch)
        for _ in range(3):
            store.contains("Sérologie")
        fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_later_changes_need_refresh(self, skip_entries):
        source = list(skip_entries)
        store = await SkipListStore.load(_fetcher(source))
        source.append(ExceptionEntry(value="NFS", type="test_type"))
        # Snapshot is unaffected by changes to the source
        assert "NFS" not in store
        await store.refresh(_fetcher(source))
        assert "NFS" in store

    @pytest.mark.asyncio
    async def test_failed_refresh_empties_snapshot(self, skip_entries):
        store = await SkipListStore.load(_fetcher(skip_entries))
        await store.refresh(_failing_fetch)
        assert len(store) == 0

    def test_names_of_kind(self):
        store = SkipListStore([
            ExceptionEntry(value="Sérologie", type="category"),
            ExceptionEntry(value="NFS", type="test_type"),
        ])
        assert store.names_of_kind(ExceptionKind.TEST_TYPE) == frozenset({"NFS"})
        assert store.names_of_kind(ExceptionKind.CATEGORY) == frozenset({"Sérologie"})

    def test_entries_keep_order(self):
        entries = [
            ExceptionEntry(value="B", type="category"),
            ExceptionEntry(value="A", type="category"),
        ]
        assert [e.value for e in SkipListStore(entries).entries] == ["B", "A"]

    def test_non_string_membership(self):
        assert 42 not in SkipListStore([ExceptionEntry(value="42", type="category")])


# =============================================================================
# SkipRangeRepository
# =============================================================================


def _mock_result(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


class TestSkipRangeRepository:
    """Reads the skip_range_check table through an AsyncSession."""

    @pytest.mark.asyncio
    async def test_list_entries(self):
        db = AsyncMock()
        db.execute.return_value = _mock_result([
            SimpleNamespace(id=1, value="Sérologie", type="category"),
            SimpleNamespace(id=2, value="NFS", type="test_type"),
        ])
        entries = await SkipRangeRepository(db).list_entries()
        assert entries == [
            ExceptionEntry(value="Sérologie", type="category"),
            ExceptionEntry(value="NFS", type="test_type"),
        ]
        db.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_type_skipped(self, caplog):
        db = AsyncMock()
        db.execute.return_value = _mock_result([
            SimpleNamespace(id=1, value="Sérologie", type="category"),
            SimpleNamespace(id=7, value="Old", type="panel"),
        ])
        with caplog.at_level(logging.WARNING):
            entries = await SkipRangeRepository(db).list_entries()
        assert [e.value for e in entries] == ["Sérologie"]
        assert any("Ignoring skip list row 7" in r.message for r in caplog.records)

    @pytest.mark.asyncio
    async def test_feeds_store(self):
        db = AsyncMock()
        db.execute.return_value = _mock_result([
            SimpleNamespace(id=1, value="Sérologie", type="category"),
        ])
        store = await SkipListStore.load(SkipRangeRepository(db).list_entries)
        assert "Sérologie" in store

    @pytest.mark.asyncio
    async def test_database_error_feeds_empty_store(self):
        db = AsyncMock()
        db.execute.side_effect = OSError("connection refused")
        store = await SkipListStore.load(SkipRangeRepository(db).list_entries)
        assert len(store) == 0
