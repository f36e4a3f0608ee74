"""Tests for log setup and masking."""

import io
import logging

from common.logging_config import SensitiveDataFilter, setup_logging


def _filtered(message, *args):
    record = logging.LogRecord('transfer', logging.INFO, __file__, 1, message, args, None)
    SensitiveDataFilter().filter(record)
    return record.getMessage()


def test_masks_credentials():
    assert 'hunter2' not in _filtered('api_key=hunter2')
    assert 'abc.def' not in _filtered('sending header Bearer abc.def')
    assert 'xyz' not in _filtered('{"private_key": "xyz"}')


def test_masks_raw_wallet_key():
    key = '0x' + 'ab' * 32
    assert key not in _filtered(f'signer {key}')


def test_shortens_base64_payloads():
    payload = 'QUJD' * 100

    message = _filtered('chunk body %s', payload)

    assert payload not in message
    assert '<base64 400 chars>' in message


def test_short_values_are_untouched():
    assert _filtered('Uploaded chunk 3/14, TX: tx-0003') == 'Uploaded chunk 3/14, TX: tx-0003'


def test_setup_logging_writes_through_filter():
    stream = io.StringIO()
    logger = setup_logging('chunkweave-test-component', log_level='DEBUG', correlation_id='set-1', stream=stream)

    logger.info('token=abc123')

    output = stream.getvalue()
    assert '[set-1]' in output
    assert 'abc123' not in output
    assert '***MASKED***' in output
