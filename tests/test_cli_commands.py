"""Tests for CLI command handlers."""

import json

import pytest

from cli.commands import (
    handle_author,
    handle_download,
    handle_inspect,
    handle_progress,
    handle_upload,
)
from cli.models import (
    AuthorCommand,
    DownloadCommand,
    InspectCommand,
    ProgressCommand,
    UploadCommand,
)
from transfer.document_service import DocumentService
from transfer.downloader import ChunkDownloader
from transfer.uploader import ChunkUploader


@pytest.fixture
def service(blob_store, progress_store):
    return DocumentService(
        blob_store,
        progress_store,
        uploader=ChunkUploader(blob_store, progress_store, chunk_size=100),
        downloader=ChunkDownloader(blob_store, batch_pause=0),
        direct_upload_limit=500,
    )


@pytest.fixture
def document_file(tmp_path):
    path = tmp_path / 'scene.json'
    path.write_text(json.dumps({'name': 'Scene', 'shapes': [{'id': i, 'r': i / 3} for i in range(100)]}))
    return path


def test_handle_author(temp_config):
    result = handle_author(AuthorCommand(address='0xABC'), config=temp_config)

    assert 'Author set' in result
    assert temp_config.get_author() == '0xABC'


def test_handle_upload_requires_author(temp_config, service, document_file):
    cmd = UploadCommand(file_path=str(document_file), project_id='proj-1', project_name='Scene')

    result = handle_upload(cmd, service=service, config=temp_config)

    assert 'No author address set' in result


def test_handle_upload_missing_file(temp_config, service, tmp_path):
    temp_config.set_author('0xabc')
    cmd = UploadCommand(file_path=str(tmp_path / 'nope.json'), project_id='proj-1', project_name='Scene')

    assert 'File not found' in handle_upload(cmd, service=service, config=temp_config)


def test_handle_upload_invalid_json(temp_config, service, tmp_path):
    temp_config.set_author('0xabc')
    path = tmp_path / 'broken.json'
    path.write_text('{"name":')
    cmd = UploadCommand(file_path=str(path), project_id='proj-1', project_name='Scene')

    assert 'not valid JSON' in handle_upload(cmd, service=service, config=temp_config)


def test_handle_upload_chunked(temp_config, service, blob_store, document_file, capsys):
    temp_config.set_author('0xabc')
    cmd = UploadCommand(file_path=str(document_file), project_id='proj-1', project_name='Scene')

    result = handle_upload(cmd, service=service, config=temp_config)

    assert 'chunked' in result
    assert 'Transaction ID:' in result
    assert 'chunk' in capsys.readouterr().out
    assert blob_store.put_count > 1


def test_handle_upload_failure_suggests_resume(temp_config, service, blob_store, document_file):
    temp_config.set_author('0xabc')
    blob_store.fail_after_puts = 2
    cmd = UploadCommand(file_path=str(document_file), project_id='proj-1', project_name='Scene')

    result = handle_upload(cmd, service=service, config=temp_config)

    assert 'Upload failed' in result
    assert 'resume' in result


def test_handle_download_writes_file(temp_config, service, document_file, tmp_path):
    temp_config.set_author('0xabc')
    upload = UploadCommand(file_path=str(document_file), project_id='proj-1', project_name='Scene')
    upload_result = handle_upload(upload, service=service, config=temp_config)
    tx_id = upload_result.split('Transaction ID: ')[1].splitlines()[0]

    output = tmp_path / 'out' / 'scene.json'
    result = handle_download(DownloadCommand(transaction_id=tx_id, output_path=str(output)), service=service)

    assert 'Downloaded' in result
    assert json.loads(output.read_text()) == json.loads(document_file.read_text())


def test_handle_download_unknown_id(service):
    result = handle_download(DownloadCommand(transaction_id='tx-missing'), service=service)

    assert 'Download failed' in result


def test_handle_inspect(seed_chunks, blob_store, make_payload):
    seed_chunks(make_payload(400), 'set-1', 100)

    result = handle_inspect(InspectCommand(chunk_set_id='set-1'), store=blob_store)

    assert 'Found 6 of 6 chunk(s)' in result
    assert '[0]' in result and '[5]' in result


def test_handle_inspect_no_chunks(blob_store):
    result = handle_inspect(InspectCommand(chunk_set_id='set-unknown'), store=blob_store)

    assert 'No chunks found' in result


def test_handle_progress(progress_store):
    assert 'No upload in progress' in handle_progress(ProgressCommand(project_id='proj-1'), progress_store=progress_store)

    progress = progress_store.begin('proj-1', 'h1', 4)
    progress.record(0, 'tx-a')
    progress_store.save(progress)

    result = handle_progress(ProgressCommand(project_id='proj-1'), progress_store=progress_store)

    assert '1 of 4 chunk(s) stored' in result
    assert progress.chunk_set_id in result
