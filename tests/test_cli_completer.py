"""Tests for ChunkweaveCompleter."""

import pytest

from prompt_toolkit.document import Document

from cli.completer import ChunkweaveCompleter
from cli.constants import COMMANDS


@pytest.fixture
def completer():
    """Create a ChunkweaveCompleter instance."""
    return ChunkweaveCompleter()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Working directory with a mix of JSON and other files."""
    (tmp_path / 'scene.json').write_text('{}')
    (tmp_path / 'sculpt.JSON').write_text('{}')
    (tmp_path / 'notes.txt').write_text('notes')
    (tmp_path / 'scenes').mkdir()
    (tmp_path / 'scenes' / 'bust.json').write_text('{}')
    monkeypatch.chdir(tmp_path)
    return tmp_path


def get_completions_list(completer, text):
    """Helper to get list of completion texts from completer."""
    doc = Document(text, len(text))
    return [c.text for c in completer.get_completions(doc, None)]


def test_empty_input_shows_all_commands(completer):
    completions = get_completions_list(completer, "")
    for cmd in COMMANDS:
        assert cmd in completions


def test_partial_command_filters(completer):
    assert get_completions_list(completer, "up") == ["upload"]
    assert get_completions_list(completer, "x") == []


def test_upload_completes_json_files(completer, workdir):
    completions = get_completions_list(completer, "upload ")

    assert 'scene.json' in completions
    assert 'sculpt.JSON' in completions
    assert 'scenes/' in completions
    assert 'notes.txt' not in completions


def test_upload_completes_partial_name(completer, workdir):
    assert get_completions_list(completer, "upload scu") == ['sculpt.JSON']


def test_upload_completes_inside_directory(completer, workdir):
    assert get_completions_list(completer, "upload scenes/") == ['scenes/bust.json']


def test_only_first_upload_argument_is_a_file(completer, workdir):
    assert get_completions_list(completer, "upload scene.json ") == []


def test_other_commands_have_no_argument_completion(completer, workdir):
    assert get_completions_list(completer, "download ") == []
