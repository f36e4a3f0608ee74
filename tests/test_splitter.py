"""Tests for payload splitting."""

import base64

import pytest

from common.constants import CHUNK_SIZE_CHARS
from transfer.splitter import build_chunks, encode_payload, slice_segments, split


def test_split_empty_payload_yields_no_chunks():
    assert split('') == []


def test_split_small_payload_is_single_chunk():
    segments = split('{"a":1}')

    assert len(segments) == 1
    assert base64.b64decode(segments[0]).decode('utf-8') == '{"a":1}'


def test_split_130000_char_document_into_four_chunks(make_payload):
    """130,000 ASCII chars encode to 173,336 base64 chars, i.e. 4 chunks of 51,200."""
    payload = make_payload(130_000)

    segments = split(payload)

    assert len(encode_payload(payload)) == 173_336
    assert len(segments) == 4
    assert [len(s) for s in segments[:3]] == [CHUNK_SIZE_CHARS] * 3
    assert len(segments[3]) == 173_336 - 3 * CHUNK_SIZE_CHARS


def test_split_exact_multiple_ends_with_full_chunk():
    payload = 'abc' * 300  # 900 bytes -> 1200 base64 chars

    segments = split(payload, chunk_size=400)

    assert len(segments) == 3
    assert all(len(s) == 400 for s in segments)


def test_split_concatenation_is_single_base64_of_payload():
    payload = '{"name":"größe ✓ 雕刻","values":[1,2,3]}' * 50

    segments = split(payload, chunk_size=37)

    assert ''.join(segments) == base64.b64encode(payload.encode('utf-8')).decode('ascii')
    assert base64.b64decode(''.join(segments)).decode('utf-8') == payload


def test_only_last_segment_may_be_short():
    segments = split('x' * 1000, chunk_size=64)

    assert all(len(s) == 64 for s in segments[:-1])
    assert 0 < len(segments[-1]) <= 64


def test_slice_segments_rejects_non_positive_size():
    with pytest.raises(ValueError):
        slice_segments('QUJD', 0)


def test_build_chunks_numbers_segments():
    chunks = build_chunks(['aa', 'bb', 'cc'], 'set-1')

    assert [c.index for c in chunks] == [0, 1, 2]
    assert {c.total_chunks for c in chunks} == {3}
    assert {c.chunk_set_id for c in chunks} == {'set-1'}
    assert chunks[1].segment == 'bb'
