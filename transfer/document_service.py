"""Store and load whole JSON documents, chunking the ones that are too large."""

import json
import logging
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from common.constants import DEFAULT_DATA_TYPE, DIRECT_UPLOAD_LIMIT_BYTES
from common.exceptions import DataIntegrityError
from common.schemas import ManifestDocument
from common.types import OwnershipMetadata, StoreResult, TransferProgress
from gateway.blob_client import BlobStore
from transfer.downloader import ChunkDownloader
from transfer.manifest_builder import ManifestBuilder
from transfer.progress_store import UploadProgressStore
from transfer.tags import build_document_tags
from transfer.uploader import ChunkUploader

logger = logging.getLogger(__name__)


class DocumentService:
    def __init__(
        self,
        store: BlobStore,
        progress_store: UploadProgressStore,
        uploader: Optional[ChunkUploader] = None,
        manifest_builder: Optional[ManifestBuilder] = None,
        downloader: Optional[ChunkDownloader] = None,
        direct_upload_limit: int = DIRECT_UPLOAD_LIMIT_BYTES,
    ):
        self.store = store
        self.progress_store = progress_store
        self.uploader = uploader or ChunkUploader(store, progress_store)
        self.manifest_builder = manifest_builder or ManifestBuilder(store)
        self.downloader = downloader or ChunkDownloader(store)
        self.direct_upload_limit = direct_upload_limit

    async def store_document(
        self,
        document: Union[dict, str],
        project_id: str,
        project_name: str,
        author: str,
        folder: str = '',
        root_tx_id: Optional[str] = None,
        data_type: str = DEFAULT_DATA_TYPE,
        thumbnail_id: Optional[str] = None,
        ownership: Optional[OwnershipMetadata] = None,
        on_progress: Optional[Callable[[TransferProgress], None]] = None,
    ) -> StoreResult:
        payload = document if isinstance(document, str) else json.dumps(document, separators=(',', ':'))
        if not payload:
            raise ValueError("Cannot store an empty document")

        size = len(payload.encode('utf-8'))
        is_update = bool(root_tx_id)

        if size < self.direct_upload_limit:
            logger.info(f"Document {project_id} is {size / 1024:.2f} KB, storing as a single blob")
            tags = build_document_tags(
                project_id=project_id,
                project_name=project_name,
                author=author,
                folder=folder,
                root_tx_id=root_tx_id,
                data_type=data_type,
                thumbnail_id=thumbnail_id,
                ownership=ownership,
            )
            tx_id = await self.store.put(payload.encode('utf-8'), tags)
            return StoreResult(
                transaction_id=tx_id,
                root_tx_id=root_tx_id or tx_id,
                is_update=is_update,
                was_chunked=False,
            )

        logger.info(f"Document {project_id} is {size / 1024:.2f} KB, using chunked upload")
        upload = await self.uploader.upload(
            payload,
            project_id,
            project_name,
            author,
            folder,
            root_tx_id,
            on_progress,
            data_type=data_type,
        )
        manifest_id = await self.manifest_builder.build_manifest(
            project_id=project_id,
            project_name=project_name,
            chunk_set_id=upload.chunk_set_id,
            total_chunks=len(upload.transaction_ids),
            transaction_ids=upload.transaction_ids,
            author=author,
            folder=folder,
            root_tx_id=root_tx_id,
            data_type=data_type,
            thumbnail_id=thumbnail_id,
            ownership=ownership,
        )
        self.progress_store.clear(project_id)

        logger.info(
            f"Chunked upload successful for {project_id} "
            f"[manifest={manifest_id}, total_chunks={len(upload.transaction_ids)}]"
        )
        return StoreResult(
            transaction_id=manifest_id,
            root_tx_id=root_tx_id or manifest_id,
            is_update=is_update,
            was_chunked=True,
        )

    async def load_document(
        self,
        transaction_id: str,
        on_progress: Optional[Callable[[TransferProgress], None]] = None,
        data_type: str = DEFAULT_DATA_TYPE,
    ) -> Any:
        """
        Load a document stored directly or through a manifest.

        Args:
            transaction_id: Blob id of the document or its manifest
            on_progress: Chunk download progress callback
            data_type: Base data type chunks were tagged with

        Returns:
            Parsed JSON document

        Raises:
            DataIntegrityError: If the blob or reassembled document is not valid
        """
        raw = await self.store.get(transaction_id)
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DataIntegrityError(f"Blob {transaction_id} is not a JSON document: {e}") from e

        if not ManifestDocument.looks_like_manifest(data):
            return data

        try:
            manifest = ManifestDocument.model_validate(data)
        except ValidationError as e:
            raise DataIntegrityError(f"Invalid manifest {transaction_id}: {e}") from e

        logger.info(
            f"Detected chunk manifest {transaction_id} "
            f"[chunk_set_id={manifest.chunk_set_id}, total_chunks={manifest.total_chunks}]"
        )
        reassembled = await self.downloader.download(
            manifest.chunk_set_id,
            manifest.total_chunks,
            manifest.chunks,
            on_progress,
            data_type=data_type,
        )
        return json.loads(reassembled)
