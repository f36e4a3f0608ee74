"""Batched download, completeness checking and reassembly of chunk sets."""

import asyncio
import json
import logging
from typing import Callable, Dict, List, Optional

from common.constants import DEFAULT_DATA_TYPE, DOWNLOAD_BATCH_SIZE, TAG_CHUNK_INDEX
from common.exceptions import DataIntegrityError, MissingChunksError, TransferCancelledError
from common.protocol import ChunkEnvelope
from common.types import TransferProgress
from gateway.blob_client import BlobStore
from transfer import config
from transfer.codec import decode_chunks, validate_json
from transfer.tags import chunk_search_tags

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[TransferProgress], None]


class ChunkDownloader:
    """
    Fetches a chunk set in fixed-width concurrent batches and reassembles it.

    Either the full id list comes from a manifest, or ids are discovered
    through the tag index. A document is only returned when every chunk in
    ``[0, total_chunks)`` was fetched and the decoded text parses as JSON.
    """

    def __init__(
        self,
        store: BlobStore,
        batch_size: int = DOWNLOAD_BATCH_SIZE,
        batch_pause: Optional[float] = None,
    ):
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.store = store
        self.batch_size = batch_size
        self.batch_pause = config.BATCH_PAUSE_SECONDS if batch_pause is None else batch_pause

    async def download(
        self,
        chunk_set_id: str,
        total_chunks: int,
        chunk_ids: Optional[List[str]] = None,
        on_progress: Optional[ProgressCallback] = None,
        *,
        data_type: str = DEFAULT_DATA_TYPE,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        """
        Download and reassemble chunks.

        Args:
            chunk_set_id: Chunk set to fetch
            total_chunks: Number of chunks the set declares
            chunk_ids: Chunk blob ids in index order, usually from a manifest
            on_progress: Called as each chunk lands, counting 1..total_chunks
            data_type: Base data type the chunks were tagged with
            cancel_event: When set, the download stops at the next batch boundary

        Returns:
            The reassembled, JSON-validated document text

        Raises:
            MissingChunksError: If the tag index does not return every chunk
            DataIntegrityError: If a chunk is empty or the result is corrupt
            TransferCancelledError: If cancel_event was set
        """
        if total_chunks <= 0:
            raise ValueError(f"total_chunks must be positive, got {total_chunks}")

        if chunk_ids and len(chunk_ids) == total_chunks:
            logger.info(f"Using {len(chunk_ids)} chunk IDs from manifest [chunk_set_id={chunk_set_id}]")
            ordered_ids = list(chunk_ids)
        else:
            if chunk_ids:
                logger.warning(
                    f"Manifest lists {len(chunk_ids)} chunk IDs but set declares {total_chunks}, "
                    f"falling back to tag search [chunk_set_id={chunk_set_id}]"
                )
            ordered_ids = await self._discover_chunk_ids(chunk_set_id, total_chunks, data_type)

        segments = await self._fetch_all(ordered_ids, on_progress, cancel_event)

        for i, segment in enumerate(segments):
            if not segment:
                logger.error(f"Chunk {i} is missing at reassembly [chunk_set_id={chunk_set_id}]")
                raise DataIntegrityError(f"Chunk {i} is missing")

        decoded = decode_chunks(segments)
        validate_json(decoded)
        logger.info(
            f"Reassembled chunk set {chunk_set_id}: {total_chunks} chunks, {len(decoded)} chars"
        )
        return decoded

    async def _discover_chunk_ids(self, chunk_set_id: str, total_chunks: int, data_type: str) -> List[str]:
        logger.info(f"Querying chunks for set {chunk_set_id}")
        results = await self.store.search(chunk_search_tags(chunk_set_id, data_type))
        logger.info(f"Found {len(results)} chunks for set {chunk_set_id}")

        by_index: Dict[int, str] = {}
        for result in results:
            raw_index = result.tag_value(TAG_CHUNK_INDEX)
            try:
                index = int(raw_index)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring blob {result.id} with unusable Chunk-Index {raw_index!r}")
                continue
            if not 0 <= index < total_chunks:
                logger.warning(f"Ignoring blob {result.id} with out-of-range Chunk-Index {index}")
                continue
            if index in by_index:
                logger.warning(f"Ignoring duplicate blob {result.id} for chunk {index}, keeping {by_index[index]}")
                continue
            by_index[index] = result.id

        if len(by_index) != total_chunks:
            raise MissingChunksError(len(by_index), total_chunks, chunk_set_id)

        return [by_index[i] for i in range(total_chunks)]

    async def _fetch_all(
        self,
        ordered_ids: List[str],
        on_progress: Optional[ProgressCallback],
        cancel_event: Optional[asyncio.Event],
    ) -> List[Optional[str]]:
        total = len(ordered_ids)
        segments: List[Optional[str]] = [None] * total
        fetched = 0

        async def fetch(index: int) -> None:
            nonlocal fetched
            segments[index] = await self._fetch_segment(index, ordered_ids[index])
            fetched += 1
            if on_progress:
                on_progress(TransferProgress.of(fetched, total))

        for start in range(0, total, self.batch_size):
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Download cancelled after {fetched}/{total} chunks")
                raise TransferCancelledError(f"Download cancelled after {fetched} of {total} chunks")

            if start > 0 and self.batch_pause > 0:
                await asyncio.sleep(self.batch_pause)

            batch = range(start, min(start + self.batch_size, total))
            logger.debug(f"Fetching batch of {len(batch)} chunks starting at {start}")
            results = await asyncio.gather(*(fetch(i) for i in batch), return_exceptions=True)

            failures = [(i, r) for i, r in zip(batch, results) if isinstance(r, BaseException)]
            for index, error in failures:
                logger.error(f"Failed to fetch chunk {index} ({ordered_ids[index]}): {error}")
            if failures:
                raise failures[0][1]

        return segments

    async def _fetch_segment(self, index: int, blob_id: str) -> str:
        data = await self.store.get(blob_id)
        try:
            envelope = ChunkEnvelope.from_json(data)
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
            raise DataIntegrityError(f"Chunk {index} ({blob_id}) is not a chunk envelope: {e}") from e

        if not isinstance(envelope.chunk, str) or not envelope.chunk:
            raise DataIntegrityError(f"Chunk {index} data is missing or not text ({blob_id})")

        logger.debug(f"Downloaded chunk {index + 1} - Length: {len(envelope.chunk)}")
        return envelope.chunk
