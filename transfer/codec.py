"""
Chunk encodings and reassembly.

Two on-wire encodings exist for chunk segments:

- current: the whole payload is base64-encoded once, then sliced. Decoding
  joins the segments and base64-decodes once.
- legacy: the payload's UTF-8 bytes were sliced into 50 KiB pieces and each
  piece was base64-encoded on its own, so every segment carries its own
  padding. Decoding base64-decodes each segment separately.

Stored chunks carry no format marker. A full legacy chunk is always exactly
``LEGACY_CHUNK_LENGTH`` characters while current chunks are at most
``CHUNK_SIZE_CHARS``, so the first chunk's length selects the decoder.
"""

import base64
import binascii
import json
import logging
from typing import List

from common.constants import LEGACY_CHUNK_LENGTH
from common.exceptions import DataIntegrityError, FormatAmbiguityError

logger = logging.getLogger(__name__)

LEGACY_SLICE_BYTES = 50 * 1024

IMAGE_DATA_PREFIXES = ('iVBORw0KGgo', 'data:image')


def is_legacy_format(chunks: List[str]) -> bool:
    """True when the first chunk has the fixed length of a full legacy chunk."""
    return bool(chunks) and len(chunks[0]) == LEGACY_CHUNK_LENGTH


def encode_legacy(payload: str, slice_bytes: int = LEGACY_SLICE_BYTES) -> List[str]:
    """
    Produce chunks in the legacy per-slice encoding.

    Only readers need this format; it is kept so tooling and tests can
    produce blobs identical to ones already in storage.
    """
    data = payload.encode('utf-8')
    return [
        base64.b64encode(data[i:i + slice_bytes]).decode('ascii')
        for i in range(0, len(data), slice_bytes)
    ]


def decode_current(chunks: List[str]) -> str:
    """
    Decode chunks sliced from one base64 string.

    Raises:
        DataIntegrityError: If the joined string is not valid base64 UTF-8
    """
    reassembled = ''.join(chunks)
    try:
        return base64.b64decode(reassembled, validate=True).decode('utf-8')
    except (binascii.Error, ValueError) as e:
        logger.error(f"Base64 decode error [base64_length={len(reassembled)}]: {e}")
        raise DataIntegrityError(f"Failed to decode chunks from base64: {e}") from e


def decode_legacy(chunks: List[str]) -> str:
    """
    Decode independently encoded chunks.

    Decoded bytes are joined before UTF-8 decoding because legacy slices
    were cut on byte boundaries and may split a multi-byte character.

    Raises:
        FormatAmbiguityError: If any chunk is not a self-contained base64 block
    """
    pieces = []
    for i, chunk in enumerate(chunks):
        try:
            pieces.append(base64.b64decode(chunk, validate=True))
        except (binascii.Error, ValueError) as e:
            raise FormatAmbiguityError(
                f"Chunk {i} did not decode under the legacy format: {e}"
            ) from e
    try:
        return b''.join(pieces).decode('utf-8')
    except UnicodeDecodeError as e:
        raise FormatAmbiguityError(f"Legacy chunks are not valid UTF-8: {e}") from e


def decode_chunks(chunks: List[str]) -> str:
    """
    Reassemble ordered chunk segments into the original payload.

    Args:
        chunks: Segments in index order

    Returns:
        Decoded payload text
    """
    logger.debug(f"Reassembling {len(chunks)} chunks [lengths={[len(c) for c in chunks]}]")
    if is_legacy_format(chunks):
        logger.info("Detected legacy chunk format, decoding each chunk individually")
        return decode_legacy(chunks)
    return decode_current(chunks)


def validate_json(decoded: str) -> None:
    """
    Check that reassembled text is a complete JSON document.

    Raises:
        DataIntegrityError: With the decoded length and the position of the
            last closing brace, to tell truncation from corruption
    """
    try:
        json.loads(decoded)
    except json.JSONDecodeError as e:
        last_brace = decoded.rfind('}')
        detail = f"decoded length {len(decoded)}, last '}}' at position {last_brace}"
        if decoded.startswith(IMAGE_DATA_PREFIXES):
            detail += " (content is image data, not a JSON document)"
        elif last_brace != len(decoded) - 1:
            detail += " (document appears truncated)"
        logger.error(f"Invalid JSON after decode: {e.msg} at position {e.pos}; {detail}")
        raise DataIntegrityError(
            f"Reassembled document is not valid JSON ({e.msg} at position {e.pos}); {detail}"
        ) from e
