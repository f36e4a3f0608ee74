"""Shared data type definitions (Tag, Chunk, ChunkMetadata, results)."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Tag:
    """
    A single name/value tag attached to a stored blob.
    """
    name: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {'name': self.name, 'value': self.value}


@dataclass(frozen=True)
class SearchResult:
    """
    A blob returned by a tag search, with the tags it was stored under.
    """
    id: str
    tags: List[Tag] = field(default_factory=list)

    def tag_value(self, name: str) -> Optional[str]:
        """
        Return the value of the first tag called ``name``.

        Args:
            name: Tag name to look up

        Returns:
            Tag value or None if the blob has no such tag
        """
        for tag in self.tags:
            if tag.name == name:
                return tag.value
        return None


@dataclass(frozen=True)
class Chunk:
    """
    One ordered slice of a base64-encoded payload.
    """
    index: int
    total_chunks: int
    chunk_set_id: str
    segment: str


@dataclass(frozen=True)
class ChunkMetadata:
    """
    Metadata for a chunk after it has been stored.
    """
    chunk_id: str
    chunk_index: int
    total_chunks: int
    chunk_set_id: str
    project_id: str
    root_tx_id: Optional[str] = None


@dataclass(frozen=True)
class TransferProgress:
    """
    Progress snapshot passed to upload and download callbacks.
    """
    current_chunk: int
    total_chunks: int
    percentage: float

    @classmethod
    def of(cls, current_chunk: int, total_chunks: int) -> 'TransferProgress':
        percentage = (current_chunk / total_chunks) * 100 if total_chunks else 100.0
        return cls(current_chunk=current_chunk, total_chunks=total_chunks, percentage=percentage)


@dataclass(frozen=True)
class UploadResult:
    """
    Outcome of a chunked upload, ordered by chunk index.
    """
    transaction_ids: List[str]
    chunk_metadata: List[ChunkMetadata]
    chunk_set_id: str


@dataclass(frozen=True)
class StoreResult:
    """
    Outcome of storing a whole document.

    ``transaction_id`` is the blob id of the document itself or of its manifest.
    """
    transaction_id: str
    root_tx_id: str
    is_update: bool
    was_chunked: bool


@dataclass(frozen=True)
class OwnershipMetadata:
    """
    Ownership transfer fields mirrored into tags.
    """
    original_creator: Optional[str] = None
    transferred_from: Optional[str] = None
    transferred_at: Optional[str] = None
    transfer_count: Optional[int] = None
