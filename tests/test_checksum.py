"""Tests for the resumability rolling hash."""

from common.checksum import compute_data_hash, rolling_hash, verify_data_hash


def test_rolling_hash_is_deterministic():
    assert rolling_hash('chunkweave') == rolling_hash('chunkweave')
    assert rolling_hash('') == 0


def test_rolling_hash_known_value():
    # 'ab' = 97 * 31 + 98
    assert rolling_hash('ab') == 97 * 31 + 98


def test_rolling_hash_stays_32_bit():
    assert 0 <= rolling_hash('z' * 10_000) <= 0xFFFFFFFF


def test_data_hash_includes_length():
    data_hash = compute_data_hash('QUJD')

    assert data_hash.startswith('4-')
    assert len(data_hash.split('-')[1]) == 8


def test_data_hash_changes_with_head_tail_or_length():
    base = 'A' * 50_000
    reference = compute_data_hash(base)

    assert compute_data_hash('B' + base[1:]) != reference
    assert compute_data_hash(base[:-1] + 'B') != reference
    assert compute_data_hash(base + 'A') != reference


def test_data_hash_detects_same_length_edit_in_middle():
    base = 'A' * 300_000
    edited = base[:150_000] + 'B' + base[150_001:]

    assert len(edited) == len(base)
    assert compute_data_hash(edited) != compute_data_hash(base)


def test_verify_data_hash():
    payload = 'eyJhIjoxfQ=='
    assert verify_data_hash(payload, compute_data_hash(payload))
    assert not verify_data_hash(payload, '0-00000000')
