"""Shared pytest fixtures for all tests."""

import asyncio
from typing import Dict, List, Optional, Set, Tuple

import pytest

from cli.config import Config
from common.exceptions import BlobNotFoundError, TransientNetworkError
from common.protocol import ChunkEnvelope
from common.types import SearchResult, Tag
from gateway.blob_client import BlobStore
from transfer.progress_store import UploadProgressStore
from transfer.splitter import split
from transfer.tags import build_chunk_tags


class InMemoryBlobStore(BlobStore):
    """
    Blob store double that keeps everything in a dict.

    Attributes:
        fail_after_puts: When set, every put after this many successful ones
            raises TransientNetworkError
        hidden_ids: Blob ids that exist but are left out of search results,
            like an index that has not caught up yet
        events: ('start' | 'end', blob_id) pairs recorded around every get
    """

    def __init__(self):
        self.blobs: Dict[str, Tuple[bytes, List[Tag]]] = {}
        self.put_count = 0
        self.get_count = 0
        self.fail_after_puts: Optional[int] = None
        self.hidden_ids: Set[str] = set()
        self.events: List[Tuple[str, str]] = []

    async def put(self, data: bytes, tags: List[Tag]) -> str:
        if self.fail_after_puts is not None and self.put_count >= self.fail_after_puts:
            raise TransientNetworkError("simulated outage")
        self.put_count += 1
        blob_id = f"tx-{len(self.blobs) + 1:04d}"
        self.blobs[blob_id] = (bytes(data), list(tags))
        return blob_id

    async def get(self, blob_id: str) -> bytes:
        self.events.append(('start', blob_id))
        self.get_count += 1
        await asyncio.sleep(0)
        self.events.append(('end', blob_id))
        if blob_id not in self.blobs:
            raise BlobNotFoundError(f"Blob not found: {blob_id}")
        return self.blobs[blob_id][0]

    async def search(self, tags: List[Tag]) -> List[SearchResult]:
        wanted = {(t.name, t.value) for t in tags}
        results = []
        for blob_id, (_, blob_tags) in self.blobs.items():
            if blob_id in self.hidden_ids:
                continue
            if wanted <= {(t.name, t.value) for t in blob_tags}:
                results.append(SearchResult(id=blob_id, tags=list(blob_tags)))
        return results

    def tags_of(self, blob_id: str) -> Dict[str, str]:
        return {t.name: t.value for t in self.blobs[blob_id][1]}

    def fetch_batches(self) -> List[int]:
        """Sizes of the runs of gets that were in flight together."""
        batches = []
        run = 0
        for kind, _ in self.events:
            if kind == 'start':
                run += 1
            elif run:
                batches.append(run)
                run = 0
        if run:
            batches.append(run)
        return batches


def seed_chunk_set(
    store: InMemoryBlobStore,
    payload: str,
    chunk_set_id: str,
    chunk_size: int,
    project_id: str = 'proj-1',
) -> List[str]:
    """
    Store a payload's chunks directly, bypassing the uploader.

    Returns:
        Chunk blob ids in index order
    """
    segments = split(payload, chunk_size)
    return seed_segments(store, segments, chunk_set_id, project_id)


def seed_segments(
    store: InMemoryBlobStore,
    segments: List[str],
    chunk_set_id: str,
    project_id: str = 'proj-1',
) -> List[str]:
    ids = []
    total = len(segments)
    for index, segment in enumerate(segments):
        envelope = ChunkEnvelope(
            chunk=segment,
            chunk_index=index,
            total_chunks=total,
            chunk_set_id=chunk_set_id,
            project_id=project_id,
            project_name='Seeded',
        )
        tags = build_chunk_tags(
            project_id=project_id,
            project_name='Seeded',
            author='0xAbC',
            chunk_set_id=chunk_set_id,
            chunk_index=index,
            total_chunks=total,
        )
        ids.append(_put_sync(store, envelope.to_json(), tags))
    return ids


def _put_sync(store: InMemoryBlobStore, data: bytes, tags: List[Tag]) -> str:
    store.put_count += 1
    blob_id = f"tx-{len(store.blobs) + 1:04d}"
    store.blobs[blob_id] = (data, list(tags))
    return blob_id


def json_payload(length: int) -> str:
    """An ASCII JSON document of exactly ``length`` characters."""
    filler = length - len('{"data":""}')
    if filler < 0:
        raise ValueError(f"length must be at least 11, got {length}")
    return '{"data":"' + ('abcdefghij' * (filler // 10 + 1))[:filler] + '"}'


@pytest.fixture
def blob_store():
    """Empty in-memory blob store."""
    return InMemoryBlobStore()


@pytest.fixture
def progress_store(tmp_path):
    """
    Upload progress store on a temporary SQLite file.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        UploadProgressStore instance
    """
    return UploadProgressStore(str(tmp_path / 'progress.db'))


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .chunkweave directory
    """
    config_dir = tmp_path / '.chunkweave'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def seed_chunks(blob_store):
    """
    Store chunk envelopes in ``blob_store`` without going through the uploader.

    Returns:
        Function (payload, chunk_set_id, chunk_size) -> ids in index order
    """
    def seed(payload: str, chunk_set_id: str, chunk_size: int) -> List[str]:
        return seed_chunk_set(blob_store, payload, chunk_set_id, chunk_size)
    return seed


@pytest.fixture
def seed_raw_segments(blob_store):
    """
    Store pre-encoded segments (e.g. legacy chunks) as a chunk set.

    Returns:
        Function (segments, chunk_set_id) -> ids in index order
    """
    def seed(segments: List[str], chunk_set_id: str) -> List[str]:
        return seed_segments(blob_store, segments, chunk_set_id)
    return seed


@pytest.fixture
def make_payload():
    """Factory for ASCII JSON documents of an exact length."""
    return json_payload
