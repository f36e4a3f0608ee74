"""Local SQLite key/value storage for upload checkpoints."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator


def init_database(db_path: str) -> None:
    """
    Initialize database and create tables if they don't exist.

    Args:
        db_path: Path to the SQLite file
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection(db_path) as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS kv_records (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        conn.commit()


@contextmanager
def get_db_connection(db_path: str) -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()
