"""Persistent per-document upload checkpoints for resumable chunked uploads."""

import asyncio
import json
import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

from common.constants import PROGRESS_KEY_PREFIX
from common.protocol import UploadProgress
from transfer import config
from transfer.database import get_db_connection, init_database

logger = logging.getLogger(__name__)


class UploadProgressStore:
    """
    Local key/value store of upload checkpoints, keyed by project id.

    Records live under ``upload-progress-<project_id>`` as JSON. They never
    leave the machine and exist only so an interrupted upload can skip the
    chunks it already stored.

    Reads and writes for one project id must come from a single writer at a
    time; ``writer_lock`` hands out the lock the uploader holds for the whole
    upload call.
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize the store and create its table if needed.

        Args:
            db_path: SQLite file path (default: CHUNKWEAVE_PROGRESS_DB)
        """
        self.db_path = db_path or config.PROGRESS_DATABASE_PATH
        self._locks: Dict[str, asyncio.Lock] = {}
        init_database(self.db_path)
        logger.info(f"Upload progress store initialized [path={self.db_path}]")

    @staticmethod
    def _key(project_id: str) -> str:
        return f"{PROGRESS_KEY_PREFIX}{project_id}"

    def writer_lock(self, project_id: str) -> asyncio.Lock:
        """Return the lock serializing uploads of ``project_id``."""
        lock = self._locks.get(project_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[project_id] = lock
        return lock

    def _read(self, project_id: str) -> Optional[UploadProgress]:
        try:
            with get_db_connection(self.db_path) as conn:
                row = conn.execute(
                    "SELECT value FROM kv_records WHERE key = ?",
                    (self._key(project_id),)
                ).fetchone()
        except (sqlite3.Error, OSError) as e:
            logger.warning(f"Failed to read upload progress for project {project_id}: {e}")
            return None

        if row is None:
            return None

        try:
            return UploadProgress.from_json(row['value'])
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable progress record for project {project_id}: {e}")
            return None

    def load(self, project_id: str, data_hash: str, total_chunks: int) -> Optional[UploadProgress]:
        """
        Load the checkpoint for a project if it matches the current payload.

        A record whose hash or chunk count differs belongs to other content
        and is deleted.

        Args:
            project_id: Document id
            data_hash: Rolling hash of the current base64 payload
            total_chunks: Chunk count of the current payload

        Returns:
            Matching UploadProgress or None
        """
        progress = self._read(project_id)
        if progress is None:
            return None

        if progress.data_hash != data_hash or progress.total_chunks != total_chunks:
            logger.info(
                f"Stale progress for project {project_id} does not match current content, discarding "
                f"[stored_hash={progress.data_hash}, hash={data_hash}, "
                f"stored_total={progress.total_chunks}, total={total_chunks}]"
            )
            self.clear(project_id)
            return None

        logger.info(
            f"Resuming upload for project {project_id}: "
            f"{len(progress.uploaded_chunks)}/{progress.total_chunks} chunks already stored "
            f"[chunk_set_id={progress.chunk_set_id}]"
        )
        return progress

    def begin(self, project_id: str, data_hash: str, total_chunks: int) -> UploadProgress:
        """
        Load a matching checkpoint or start a new one with a fresh chunk set id.

        The new record is saved right away so the chunk set id survives a
        crash before the first chunk completes.
        """
        progress = self.load(project_id, data_hash, total_chunks)
        if progress is not None:
            return progress

        progress = UploadProgress(
            project_id=project_id,
            chunk_set_id=str(uuid.uuid4()),
            total_chunks=total_chunks,
            started_at=datetime.now(timezone.utc).isoformat(),
            data_hash=data_hash,
        )
        self.save(progress)
        return progress

    def save(self, progress: UploadProgress) -> bool:
        """
        Persist a checkpoint.

        Failures are logged and reported through the return value only; the
        stored chunks remain the source of truth.

        Returns:
            True if the record was written
        """
        now = datetime.now(timezone.utc).isoformat()
        try:
            with get_db_connection(self.db_path) as conn:
                conn.execute(
                    """
                    INSERT INTO kv_records (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (self._key(progress.project_id), progress.to_json(), now)
                )
                conn.commit()
            return True
        except (sqlite3.Error, OSError) as e:
            logger.warning(f"Failed to save upload progress for project {progress.project_id}: {e}")
            return False

    def clear(self, project_id: str) -> None:
        """
        Delete the checkpoint for a project. Failures are logged only.

        The project's writer lock is released from the registry too, unless
        an upload is still holding it.
        """
        lock = self._locks.get(project_id)
        if lock is not None and not lock.locked():
            del self._locks[project_id]

        try:
            with get_db_connection(self.db_path) as conn:
                conn.execute("DELETE FROM kv_records WHERE key = ?", (self._key(project_id),))
                conn.commit()
        except (sqlite3.Error, OSError) as e:
            logger.warning(f"Failed to clear upload progress for project {project_id}: {e}")
            return
        logger.debug(f"Cleared upload progress for project {project_id}")

    def peek(self, project_id: str) -> Optional[UploadProgress]:
        """Return the stored checkpoint without checking it against any payload."""
        return self._read(project_id)
