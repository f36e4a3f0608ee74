"""Wire and persistence formats (chunk envelope, upload progress record)."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
import json


@dataclass
class ChunkEnvelope:
    """One stored chunk: the base64 segment plus its structural metadata."""
    chunk: Optional[str]
    chunk_index: Optional[int] = None
    total_chunks: Optional[int] = None
    chunk_set_id: Optional[str] = None
    project_id: Optional[str] = None
    project_name: Optional[str] = None

    def to_json(self) -> bytes:
        """Serialize to JSON bytes."""
        return json.dumps({
            'chunk': self.chunk,
            'metadata': {
                'chunkIndex': self.chunk_index,
                'totalChunks': self.total_chunks,
                'chunkSetId': self.chunk_set_id,
                'projectId': self.project_id,
                'projectName': self.project_name,
            }
        }).encode('utf-8')

    @classmethod
    def from_json(cls, data: bytes) -> 'ChunkEnvelope':
        """
        Deserialize from JSON bytes.

        Envelopes written by older clients may lack the metadata block; only
        ``chunk`` is required for reassembly and is left as None when absent.
        """
        obj = json.loads(data)
        if not isinstance(obj, dict):
            raise ValueError(f"Chunk envelope must be a JSON object, got {type(obj).__name__}")
        metadata = obj.get('metadata') or {}
        return cls(
            chunk=obj.get('chunk'),
            chunk_index=metadata.get('chunkIndex'),
            total_chunks=metadata.get('totalChunks'),
            chunk_set_id=metadata.get('chunkSetId'),
            project_id=metadata.get('projectId'),
            project_name=metadata.get('projectName'),
        )


@dataclass
class UploadedChunk:
    """A chunk index that has been durably stored, with its blob id."""
    index: int
    tx_id: str


@dataclass
class UploadProgress:
    """
    Resumability checkpoint for one document upload.

    Attributes:
        project_id: Document the upload belongs to
        chunk_set_id: Chunk set the stored chunks were tagged with
        uploaded_chunks: Chunks already stored, in completion order
        total_chunks: Number of chunks the payload splits into
        started_at: ISO8601 UTC timestamp of the first attempt
        data_hash: Rolling hash of the base64 payload
    """
    project_id: str
    chunk_set_id: str
    total_chunks: int
    started_at: str
    data_hash: str
    uploaded_chunks: List[UploadedChunk] = field(default_factory=list)

    def completed(self) -> Dict[int, str]:
        """Map of chunk index to stored blob id."""
        return {entry.index: entry.tx_id for entry in self.uploaded_chunks}

    def record(self, index: int, tx_id: str) -> None:
        """
        Append a stored chunk.

        Raises:
            ValueError: If the index is out of range or already recorded
        """
        if not 0 <= index < self.total_chunks:
            raise ValueError(f"Chunk index {index} outside [0, {self.total_chunks})")
        if index in self.completed():
            raise ValueError(f"Chunk index {index} already recorded")
        self.uploaded_chunks.append(UploadedChunk(index=index, tx_id=tx_id))

    def to_json(self) -> str:
        """Serialize to a JSON string."""
        return json.dumps({
            'projectId': self.project_id,
            'chunkSetId': self.chunk_set_id,
            'uploadedChunks': [
                {'index': entry.index, 'txId': entry.tx_id}
                for entry in self.uploaded_chunks
            ],
            'totalChunks': self.total_chunks,
            'startedAt': self.started_at,
            'dataHash': self.data_hash,
        })

    @classmethod
    def from_json(cls, data: str) -> 'UploadProgress':
        """
        Deserialize from a JSON string.

        Entries with a missing, duplicate or out-of-range index are dropped.
        """
        obj = json.loads(data)
        progress = cls(
            project_id=obj['projectId'],
            chunk_set_id=obj['chunkSetId'],
            total_chunks=int(obj['totalChunks']),
            started_at=obj['startedAt'],
            data_hash=obj['dataHash'],
        )
        for entry in obj.get('uploadedChunks', []):
            try:
                progress.record(int(entry['index']), entry['txId'])
            except (KeyError, TypeError, ValueError):
                continue
        return progress
