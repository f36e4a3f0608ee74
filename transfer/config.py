"""Configuration settings for the transfer core."""

import os
from pathlib import Path

from common.constants import APP_NAME as DEFAULT_APP_NAME, DOWNLOAD_BATCH_PAUSE_SECONDS


PROGRESS_DATABASE_PATH = os.environ.get(
    "CHUNKWEAVE_PROGRESS_DB",
    str(Path.home() / ".chunkweave" / "progress.db"),
)

BATCH_PAUSE_SECONDS = float(os.environ.get("CHUNKWEAVE_BATCH_PAUSE_SECONDS", str(DOWNLOAD_BATCH_PAUSE_SECONDS)))

APP_NAME = os.environ.get("CHUNKWEAVE_APP_NAME", DEFAULT_APP_NAME)
