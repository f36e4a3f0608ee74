"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class UploadCommand:
    """Store a JSON document file."""

    file_path: str
    project_id: str
    project_name: str
    folder: str = ""
    root_tx_id: str | None = None
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class DownloadCommand:
    """Load a document by transaction id."""

    transaction_id: str
    output_path: str | None = None
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class InspectCommand:
    """List chunks of a chunk set from the tag index."""

    chunk_set_id: str
    command: Literal["inspect"] = "inspect"


@dataclass(frozen=True)
class ProgressCommand:
    """Show the local upload checkpoint of a project."""

    project_id: str
    command: Literal["progress"] = "progress"


@dataclass(frozen=True)
class AuthorCommand:
    """Set the author address."""

    address: str
    command: Literal["author"] = "author"


CommandRequest = (
    UploadCommand
    | DownloadCommand
    | InspectCommand
    | ProgressCommand
    | AuthorCommand
)
