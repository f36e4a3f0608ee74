"""Utility functions for CLI operations."""

import sys
from typing import Callable

from cli.constants import GREEN, RESET
from common.types import TransferProgress


def make_progress_printer(label: str) -> Callable[[TransferProgress], None]:
    """
    Build a progress callback that redraws one status line on stdout.

    Args:
        label: Text shown before the chunk counter

    Returns:
        Callback accepting TransferProgress snapshots
    """
    def on_progress(progress: TransferProgress) -> None:
        sys.stdout.write(
            f"\r{label}: chunk {progress.current_chunk}/{progress.total_chunks} "
            f"({GREEN}{progress.percentage:.1f}%{RESET})"
        )
        if progress.current_chunk >= progress.total_chunks:
            sys.stdout.write('\n')
        sys.stdout.flush()

    return on_progress


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"
