"""Tests for REPL command dispatch."""

from unittest.mock import patch

from cli.models import AuthorCommand, DownloadCommand, InspectCommand, ProgressCommand, UploadCommand
from cli.repl import HANDLERS, dispatch_command


def test_every_command_type_has_a_handler():
    assert set(HANDLERS) == {UploadCommand, DownloadCommand, InspectCommand, ProgressCommand, AuthorCommand}


def test_dispatch_routes_by_type():
    cmd = ProgressCommand(project_id='proj-1')

    with patch.dict(HANDLERS, {ProgressCommand: lambda c: f"progress for {c.project_id}"}):
        assert dispatch_command(cmd) == "progress for proj-1"


def test_dispatch_unknown_type():
    assert 'Unknown command type' in dispatch_command(object())
