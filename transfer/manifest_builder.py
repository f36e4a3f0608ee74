"""Upload the manifest that indexes a chunk set."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from common.constants import DEFAULT_DATA_TYPE
from common.schemas import ManifestDocument
from common.types import OwnershipMetadata
from gateway.blob_client import BlobStore
from transfer.tags import build_manifest_tags

logger = logging.getLogger(__name__)


class ManifestBuilder:
    """Builds and stores chunk-set manifests."""

    def __init__(self, store: BlobStore):
        self.store = store

    async def build_manifest(
        self,
        project_id: str,
        project_name: str,
        chunk_set_id: str,
        total_chunks: int,
        transaction_ids: List[str],
        author: str,
        folder: str = '',
        root_tx_id: Optional[str] = None,
        data_type: str = DEFAULT_DATA_TYPE,
        thumbnail_id: Optional[str] = None,
        ownership: Optional[OwnershipMetadata] = None,
    ) -> str:
        """
        Create a manifest for a chunked upload.

        Args:
            project_id: Document id
            project_name: Human-readable document name
            chunk_set_id: Chunk set the ids belong to
            total_chunks: Number of chunks in the set
            transaction_ids: Chunk blob ids in index order
            author: Uploader address
            folder: Optional folder path tag
            root_tx_id: Id of the first version when this is an update
            data_type: Base data type; the manifest is tagged ``<data_type>-manifest``
            thumbnail_id: Optional thumbnail blob id
            ownership: Optional ownership transfer fields

        Returns:
            Blob id of the stored manifest

        Raises:
            ValueError: If the id list does not cover every chunk
        """
        if len(transaction_ids) != total_chunks:
            raise ValueError(
                f"Manifest needs {total_chunks} chunk ids, got {len(transaction_ids)}"
            )

        manifest = ManifestDocument(
            project_id=project_id,
            project_name=project_name,
            chunk_set_id=chunk_set_id,
            total_chunks=total_chunks,
            chunks=list(transaction_ids),
            created_at=datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        )
        tags = build_manifest_tags(
            project_id=project_id,
            project_name=project_name,
            author=author,
            chunk_set_id=chunk_set_id,
            total_chunks=total_chunks,
            folder=folder,
            root_tx_id=root_tx_id,
            data_type=data_type,
            thumbnail_id=thumbnail_id,
            ownership=ownership,
        )

        manifest_id = await self.store.put(manifest.to_json(), tags)
        logger.info(
            f"Uploaded manifest {manifest_id} for project {project_id} "
            f"[chunk_set_id={chunk_set_id}, total_chunks={total_chunks}]"
        )
        return manifest_id
