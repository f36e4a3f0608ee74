"""Split a serialized document into ordered base64 chunk segments."""

import base64
import logging
from typing import List

from common.constants import CHUNK_SIZE_CHARS
from common.types import Chunk

logger = logging.getLogger(__name__)


def encode_payload(payload: str) -> str:
    """Transcode a whole payload to base64 in one pass."""
    return base64.b64encode(payload.encode('utf-8')).decode('ascii')


def slice_segments(base64_data: str, chunk_size: int = CHUNK_SIZE_CHARS) -> List[str]:
    """
    Slice an already-encoded payload into fixed-length segments.

    Raises:
        ValueError: If chunk_size is not positive
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return [base64_data[i:i + chunk_size] for i in range(0, len(base64_data), chunk_size)]


def split(payload: str, chunk_size: int = CHUNK_SIZE_CHARS) -> List[str]:
    """
    Split data into chunks for upload.

    The payload is base64-encoded once and the encoded string is sliced, so a
    multi-byte UTF-8 character is never cut in half. An empty payload yields no
    chunks, and a length that is an exact multiple of ``chunk_size`` ends with a
    full chunk.

    Args:
        payload: Serialized document
        chunk_size: Base64 characters per chunk

    Returns:
        Ordered list of base64 segments
    """
    base64_data = encode_payload(payload)
    segments = slice_segments(base64_data, chunk_size)
    logger.debug(
        f"Created {len(segments)} chunks from {len(payload)} chars ({len(base64_data)} base64 chars)"
    )
    return segments


def build_chunks(segments: List[str], chunk_set_id: str) -> List[Chunk]:
    """Wrap ordered segments in Chunk records for one chunk set."""
    total = len(segments)
    return [
        Chunk(index=i, total_chunks=total, chunk_set_id=chunk_set_id, segment=segment)
        for i, segment in enumerate(segments)
    ]
