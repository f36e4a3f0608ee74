"""Resumable, sequential upload of a payload's chunks."""

import asyncio
import logging
from typing import Callable, List, Optional

from common.checksum import compute_data_hash
from common.constants import CHUNK_SIZE_CHARS, DEFAULT_DATA_TYPE
from common.exceptions import TransferCancelledError
from common.protocol import ChunkEnvelope
from common.types import ChunkMetadata, TransferProgress, UploadResult
from gateway.blob_client import BlobStore
from transfer.progress_store import UploadProgressStore
from transfer.splitter import encode_payload, slice_segments
from transfer.tags import build_chunk_tags

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[TransferProgress], None]


class ChunkUploader:
    """
    Uploads chunk sets one chunk at a time, checkpointing after every chunk.

    A failed call can simply be repeated: chunks recorded in the checkpoint are
    not uploaded again, and their ids are reused in the result.
    """

    def __init__(
        self,
        store: BlobStore,
        progress_store: UploadProgressStore,
        chunk_size: int = CHUNK_SIZE_CHARS,
    ):
        self.store = store
        self.progress_store = progress_store
        self.chunk_size = chunk_size

    async def upload(
        self,
        payload: str,
        project_id: str,
        project_name: str,
        author: str,
        folder: str = '',
        root_tx_id: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        *,
        data_type: str = DEFAULT_DATA_TYPE,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> UploadResult:
        """
        Upload a payload in chunks.

        Args:
            payload: Serialized document (must not be empty)
            project_id: Document id, also the checkpoint key
            project_name: Human-readable document name
            author: Uploader address, stored lower-cased
            folder: Optional folder path tag
            root_tx_id: Id of the first version when this is an update
            on_progress: Called once per chunk, including skipped ones
            data_type: Base data type; chunks are tagged ``<data_type>-chunk``
            cancel_event: When set, the upload stops before the next chunk

        Returns:
            UploadResult with ids and metadata in chunk order

        Raises:
            ValueError: If the payload is empty
            TransferCancelledError: If cancel_event was set
            TransferException: Any storage error, unmodified
        """
        if not payload:
            raise ValueError("Cannot upload an empty payload in chunks")

        base64_data = encode_payload(payload)
        segments = slice_segments(base64_data, self.chunk_size)
        total_chunks = len(segments)
        data_hash = compute_data_hash(base64_data)

        async with self.progress_store.writer_lock(project_id):
            progress = self.progress_store.begin(project_id, data_hash, total_chunks)
            chunk_set_id = progress.chunk_set_id
            completed = progress.completed()

            logger.info(
                f"Uploading {total_chunks} chunks for project {project_id} "
                f"[chunk_set_id={chunk_set_id}, already_stored={len(completed)}]"
            )

            transaction_ids: List[str] = []
            chunk_metadata: List[ChunkMetadata] = []

            for index, segment in enumerate(segments):
                if cancel_event is not None and cancel_event.is_set():
                    logger.info(f"Upload cancelled before chunk {index + 1}/{total_chunks} for project {project_id}")
                    raise TransferCancelledError(
                        f"Upload of project {project_id} cancelled at chunk {index} of {total_chunks}"
                    )

                tx_id = completed.get(index)
                if tx_id is not None:
                    logger.debug(f"Skipping chunk {index + 1}/{total_chunks}, already stored as {tx_id}")
                else:
                    tx_id = await self._upload_chunk(
                        segment=segment,
                        index=index,
                        total_chunks=total_chunks,
                        chunk_set_id=chunk_set_id,
                        project_id=project_id,
                        project_name=project_name,
                        author=author,
                        folder=folder,
                        root_tx_id=root_tx_id,
                        data_type=data_type,
                    )
                    progress.record(index, tx_id)
                    self.progress_store.save(progress)

                transaction_ids.append(tx_id)
                chunk_metadata.append(ChunkMetadata(
                    chunk_id=tx_id,
                    chunk_index=index,
                    total_chunks=total_chunks,
                    chunk_set_id=chunk_set_id,
                    project_id=project_id,
                    root_tx_id=root_tx_id,
                ))

                if on_progress:
                    on_progress(TransferProgress.of(index + 1, total_chunks))

        return UploadResult(
            transaction_ids=transaction_ids,
            chunk_metadata=chunk_metadata,
            chunk_set_id=chunk_set_id,
        )

    async def _upload_chunk(
        self,
        segment: str,
        index: int,
        total_chunks: int,
        chunk_set_id: str,
        project_id: str,
        project_name: str,
        author: str,
        folder: str,
        root_tx_id: Optional[str],
        data_type: str,
    ) -> str:
        envelope = ChunkEnvelope(
            chunk=segment,
            chunk_index=index,
            total_chunks=total_chunks,
            chunk_set_id=chunk_set_id,
            project_id=project_id,
            project_name=project_name,
        )
        data = envelope.to_json()
        tags = build_chunk_tags(
            project_id=project_id,
            project_name=project_name,
            author=author,
            chunk_set_id=chunk_set_id,
            chunk_index=index,
            total_chunks=total_chunks,
            folder=folder,
            root_tx_id=root_tx_id,
            data_type=data_type,
        )

        logger.debug(f"Chunk {index + 1}/{total_chunks} size: {len(data) / 1024:.2f} KB")
        tx_id = await self.store.put(data, tags)
        logger.info(f"Uploaded chunk {index + 1}/{total_chunks}, TX: {tx_id}")
        return tx_id
