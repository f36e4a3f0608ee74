"""Command handler functions for CLI operations."""

import asyncio
import json
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

from common.constants import DEFAULT_DATA_TYPE, TAG_CHUNK_INDEX, TAG_TOTAL_CHUNKS
from common.exceptions import TransferException
from common.logging_config import get_logger
from cli.config import Config
from cli.models import (
    AuthorCommand,
    DownloadCommand,
    InspectCommand,
    ProgressCommand,
    UploadCommand,
)
from cli.utils import format_file_size, make_progress_printer
from gateway.blob_client import BlobStore, GatewayBlobStore
from transfer.document_service import DocumentService
from transfer.progress_store import UploadProgressStore
from transfer.tags import chunk_search_tags

logger = get_logger(__name__)

T = TypeVar('T')

CONFIG_PATH = Path.home() / '.chunkweave' / 'config.json'

_config: Optional[Config] = None
_progress_store: Optional[UploadProgressStore] = None


def get_config() -> Config:
    """
    Get or create global Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        logger.debug(f"Loading CLI config [path={CONFIG_PATH}]")
        _config = Config(CONFIG_PATH)
    return _config


def get_progress_store() -> UploadProgressStore:
    """
    Get or create global UploadProgressStore instance.

    Returns:
        UploadProgressStore backed by the configured database path
    """
    global _progress_store
    if _progress_store is None:
        _progress_store = UploadProgressStore(get_config().get_progress_db_path())
    return _progress_store


def _run_with_store(action: Callable[[BlobStore], Awaitable[T]], store: Optional[BlobStore]) -> T:
    """Run ``action`` on the given store, or on a gateway store opened for this call."""
    async def runner() -> T:
        if store is not None:
            return await action(store)
        async with GatewayBlobStore(**get_config().get_gateway_settings()) as gateway:
            return await action(gateway)

    return asyncio.run(runner())


def _run_with_service(
    action: Callable[[DocumentService], Awaitable[T]],
    service: Optional[DocumentService],
) -> T:
    if service is not None:
        return _run_with_store(lambda _: action(service), service.store)
    return _run_with_store(
        lambda store: action(DocumentService(store, get_progress_store())),
        None,
    )


def handle_upload(
    cmd: UploadCommand,
    service: Optional[DocumentService] = None,
    config: Optional[Config] = None,
) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with file path and project fields
        service: Optional DocumentService for dependency injection (testing)
        config: Optional Config for dependency injection (testing)

    Returns:
        Success or error message with the stored transaction id
    """
    logger.info(f"Executing upload command: file={cmd.file_path} project_id={cmd.project_id}")
    if config is None:
        config = get_config()

    author = config.get_author()
    if not author:
        return "Error: No author address set. Use 'author <address>' first."

    path = Path(cmd.file_path)
    if not path.is_file():
        return f"Error: File not found: {cmd.file_path}"

    try:
        document = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, UnicodeDecodeError) as e:
        return f"Error: Could not read {cmd.file_path}: {e}"
    except json.JSONDecodeError as e:
        return f"Error: {cmd.file_path} is not valid JSON: {e}"

    size = path.stat().st_size
    printer = make_progress_printer(f"Uploading {path.name}")

    try:
        result = _run_with_service(
            lambda svc: svc.store_document(
                document,
                project_id=cmd.project_id,
                project_name=cmd.project_name,
                author=author,
                folder=cmd.folder,
                root_tx_id=cmd.root_tx_id,
                data_type=DEFAULT_DATA_TYPE,
                on_progress=printer,
            ),
            service,
        )
    except TransferException as e:
        logger.error(f"Upload failed for {cmd.project_id}: {e}")
        return f"Upload failed: {e}\nRun the same command again to resume."
    except ValueError as e:
        return f"Error: {e}"

    mode = "chunked" if result.was_chunked else "direct"
    lines = [
        f"Stored {path.name} ({format_file_size(size)}, {mode})",
        f"Transaction ID: {result.transaction_id}",
        f"Root TX: {result.root_tx_id}",
    ]
    if result.is_update:
        lines.append("Stored as an update of the root document.")
    return "\n".join(lines)


def handle_download(cmd: DownloadCommand, service: Optional[DocumentService] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with transaction id and optional output_path
        service: Optional DocumentService for dependency injection (testing)

    Returns:
        Success or error message with the written path
    """
    logger.info(f"Executing download command: tx={cmd.transaction_id} output_path={cmd.output_path}")
    printer = make_progress_printer(f"Downloading {cmd.transaction_id}")

    try:
        document = _run_with_service(
            lambda svc: svc.load_document(cmd.transaction_id, on_progress=printer),
            service,
        )
    except TransferException as e:
        logger.error(f"Download failed for {cmd.transaction_id}: {e}")
        return f"Download failed: {e}"

    output = Path(cmd.output_path) if cmd.output_path else Path.cwd() / f"{cmd.transaction_id}.json"
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(document, indent=2), encoding='utf-8')
    except OSError as e:
        return f"Error: Could not write {output}: {e}"

    return f"Downloaded {cmd.transaction_id} to {output} ({format_file_size(output.stat().st_size)})"


def handle_inspect(cmd: InspectCommand, store: Optional[BlobStore] = None) -> str:
    """
    Handle 'inspect' command.

    Args:
        cmd: InspectCommand with chunk_set_id
        store: Optional BlobStore for dependency injection (testing)

    Returns:
        Table of chunk indices and blob ids known to the tag index
    """
    try:
        results = _run_with_store(
            lambda s: s.search(chunk_search_tags(cmd.chunk_set_id, DEFAULT_DATA_TYPE)),
            store,
        )
    except TransferException as e:
        return f"Error: {e}"

    if not results:
        return f"No chunks found for chunk set {cmd.chunk_set_id}"

    def sort_key(result):
        raw = result.tag_value(TAG_CHUNK_INDEX)
        return int(raw) if raw is not None and raw.isdigit() else -1

    ordered = sorted(results, key=sort_key)
    declared = ordered[0].tag_value(TAG_TOTAL_CHUNKS) or "?"
    lines = [f"Found {len(ordered)} of {declared} chunk(s) for set {cmd.chunk_set_id}:"]
    for result in ordered:
        lines.append(f"  [{result.tag_value(TAG_CHUNK_INDEX)}] {result.id}")
    return "\n".join(lines)


def handle_progress(cmd: ProgressCommand, progress_store: Optional[UploadProgressStore] = None) -> str:
    """
    Handle 'progress' command.

    Args:
        cmd: ProgressCommand with project_id
        progress_store: Optional UploadProgressStore for dependency injection (testing)

    Returns:
        Summary of the saved checkpoint
    """
    if progress_store is None:
        progress_store = get_progress_store()

    progress = progress_store.peek(cmd.project_id)
    if progress is None:
        return f"No upload in progress for {cmd.project_id}"

    done = sorted(progress.completed())
    return (
        f"Upload of {cmd.project_id}: {len(done)} of {progress.total_chunks} chunk(s) stored\n"
        f"Chunk set: {progress.chunk_set_id}\n"
        f"Started: {progress.started_at}\n"
        f"Data hash: {progress.data_hash}"
    )


def handle_author(cmd: AuthorCommand, config: Optional[Config] = None) -> str:
    """
    Handle 'author' command.

    Args:
        cmd: AuthorCommand with address
        config: Optional Config for dependency injection (testing)

    Returns:
        Confirmation message
    """
    if config is None:
        config = get_config()
    config.set_author(cmd.address)
    return f"Author set to {cmd.address}"
