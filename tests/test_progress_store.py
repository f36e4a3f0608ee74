"""Tests for the upload checkpoint store."""

import sqlite3
from contextlib import contextmanager

import pytest

from transfer.database import get_db_connection
from transfer.progress_store import UploadProgressStore


def test_begin_creates_and_persists_record(progress_store):
    progress = progress_store.begin('proj-1', 'abc-00000001', 4)

    stored = progress_store.peek('proj-1')
    assert stored is not None
    assert stored.chunk_set_id == progress.chunk_set_id
    assert stored.total_chunks == 4
    assert stored.uploaded_chunks == []


def test_begin_resumes_matching_record(progress_store):
    first = progress_store.begin('proj-1', 'abc-00000001', 4)
    first.record(0, 'tx-a')
    progress_store.save(first)

    resumed = progress_store.begin('proj-1', 'abc-00000001', 4)

    assert resumed.chunk_set_id == first.chunk_set_id
    assert resumed.completed() == {0: 'tx-a'}


def test_hash_mismatch_discards_record(progress_store):
    progress_store.begin('proj-1', 'abc-00000001', 4)

    assert progress_store.load('proj-1', 'abc-ffffffff', 4) is None
    assert progress_store.peek('proj-1') is None


def test_chunk_count_mismatch_discards_record(progress_store):
    progress_store.begin('proj-1', 'abc-00000001', 4)

    assert progress_store.load('proj-1', 'abc-00000001', 5) is None
    assert progress_store.peek('proj-1') is None


def test_new_content_gets_new_chunk_set_id(progress_store):
    first = progress_store.begin('proj-1', 'abc-00000001', 4)
    second = progress_store.begin('proj-1', 'abc-00000002', 4)

    assert first.chunk_set_id != second.chunk_set_id


def test_records_are_per_project(progress_store):
    progress_store.begin('proj-1', 'h1', 2)
    progress_store.begin('proj-2', 'h2', 3)

    progress_store.clear('proj-1')

    assert progress_store.peek('proj-1') is None
    assert progress_store.peek('proj-2').total_chunks == 3


def test_records_survive_reopening(tmp_path):
    db_path = str(tmp_path / 'progress.db')
    progress = UploadProgressStore(db_path).begin('proj-1', 'h1', 2)
    progress.record(1, 'tx-b')
    UploadProgressStore(db_path).save(progress)

    reopened = UploadProgressStore(db_path).peek('proj-1')

    assert reopened.completed() == {1: 'tx-b'}


def test_record_key_has_prefix(progress_store):
    progress_store.begin('proj-1', 'h1', 2)

    with get_db_connection(progress_store.db_path) as conn:
        keys = [row['key'] for row in conn.execute("SELECT key FROM kv_records")]

    assert keys == ['upload-progress-proj-1']


def test_corrupt_record_is_treated_as_absent(progress_store):
    with get_db_connection(progress_store.db_path) as conn:
        conn.execute(
            "INSERT INTO kv_records (key, value, updated_at) VALUES (?, ?, ?)",
            ('upload-progress-proj-1', '{not json', '2026-01-01T00:00:00+00:00'),
        )
        conn.commit()

    assert progress_store.peek('proj-1') is None
    assert progress_store.load('proj-1', 'h1', 2) is None


def test_storage_failures_do_not_raise(progress_store, monkeypatch):
    progress = progress_store.begin('proj-1', 'h1', 2)

    @contextmanager
    def broken_connection(db_path):
        raise sqlite3.OperationalError("disk I/O error")
        yield

    monkeypatch.setattr('transfer.progress_store.get_db_connection', broken_connection)

    assert progress_store.save(progress) is False
    assert progress_store.peek('proj-1') is None
    progress_store.clear('proj-1')


def test_writer_lock_is_per_project(progress_store):
    assert progress_store.writer_lock('proj-1') is progress_store.writer_lock('proj-1')
    assert progress_store.writer_lock('proj-1') is not progress_store.writer_lock('proj-2')


def test_clear_drops_idle_writer_lock(progress_store):
    progress_store.writer_lock('proj-1')
    progress_store.writer_lock('proj-2')

    progress_store.clear('proj-1')

    assert set(progress_store._locks) == {'proj-2'}


@pytest.mark.asyncio
async def test_clear_keeps_lock_held_by_upload(progress_store):
    lock = progress_store.writer_lock('proj-1')

    async with lock:
        progress_store.clear('proj-1')
        assert progress_store.writer_lock('proj-1') is lock
