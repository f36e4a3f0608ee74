"""Command parser for CLI input."""

import shlex

from cli.constants import SUPPORTED_FILE_EXTENSIONS
from cli.models import (
    AuthorCommand,
    CommandRequest,
    DownloadCommand,
    InspectCommand,
    ProgressCommand,
    UploadCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of Upload/Download/Inspect/Progress/Author)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "upload":
        return _parse_upload(tokens[1:])
    elif command_name == "download":
        return _parse_download(tokens[1:])
    elif command_name == "inspect":
        return _parse_single("inspect", "<chunk-set-id>", tokens[1:], InspectCommand)
    elif command_name == "progress":
        return _parse_single("progress", "<project-id>", tokens[1:], ProgressCommand)
    elif command_name == "author":
        return _parse_single("author", "<address>", tokens[1:], AuthorCommand)
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <file.json> <project-id> <project-name> [folder] [root-tx]' command."""
    if not 3 <= len(args) <= 5:
        raise ParseError(
            "upload requires <file.json> <project-id> <project-name> [folder] [root-tx]"
        )

    file_path, project_id, project_name = args[:3]
    if not file_path.lower().endswith(SUPPORTED_FILE_EXTENSIONS):
        raise ParseError(f"upload expects a JSON file, got: {file_path}")

    folder = args[3] if len(args) > 3 else ""
    root_tx_id = args[4] if len(args) > 4 else None

    return UploadCommand(
        file_path=file_path,
        project_id=project_id,
        project_name=project_name,
        folder=folder,
        root_tx_id=root_tx_id,
    )


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <tx-id> [output_path]' command."""
    if not 1 <= len(args) <= 2:
        raise ParseError("download requires 1 or 2 arguments: <tx-id> [output_path]")

    transaction_id = args[0]
    output_path = args[1] if len(args) > 1 else None

    return DownloadCommand(transaction_id=transaction_id, output_path=output_path)


def _parse_single(name: str, placeholder: str, args: list[str], command_cls):
    if len(args) != 1:
        raise ParseError(f"{name} requires exactly 1 argument: {placeholder}")
    return command_cls(args[0])
