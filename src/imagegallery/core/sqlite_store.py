"""SQLite-backed record store for image metadata."""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import closing, contextmanager
from pathlib import Path

from imagegallery.core.errors import NotFound, StoreError
from imagegallery.core.record_store import ImageRecord, RecordStore

logger = logging.getLogger(__name__)


class SQLiteRecordStore(RecordStore):
    """Manage the ``images`` table in a local SQLite file.

    Each operation opens its own connection and closes it when done, so the
    store can be shared across the request threadpool without locking.
    """

    def __init__(self, db_path: Path, timeout: float = 5.0):
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file
            timeout: Seconds to wait on a locked database before failing
        """
        self.db_path = Path(db_path)
        self.timeout = timeout
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection inside a transaction and always close it.

        The transaction commits when the block exits cleanly and rolls back
        otherwise.  Driver errors are re-raised as :class:`StoreError`.
        """
        try:
            with closing(sqlite3.connect(self.db_path, timeout=self.timeout)) as conn:
                conn.row_factory = sqlite3.Row
                with conn:
                    yield conn
        except sqlite3.Error as e:
            logger.error(f"SQLite error on {self.db_path}: {e}")
            raise StoreError(str(e)) from e

    def initialize(self) -> None:
        """Create database schema if it doesn't exist."""
        with self._connect() as conn:
            # AUTOINCREMENT keeps ids monotonic even after the newest row is deleted
            conn.execute("""
                CREATE TABLE IF NOT EXISTS images (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    image_path TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
                """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_images_created_at
                ON images(created_at DESC)
                """)
        logger.info(f'SQLite table "images" is ready at {self.db_path}')

    def insert(self, title: str, image_path: str) -> ImageRecord:
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO images (title, image_path) VALUES (?, ?)",
                (title, image_path),
            )
            row = conn.execute(
                "SELECT * FROM images WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()

        record = ImageRecord.from_row(row)
        logger.info(f"Inserted image {record.id}: {record.image_path}")
        return record

    def list_all(self) -> list[ImageRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM images ORDER BY created_at DESC, id DESC"
            ).fetchall()
        return [ImageRecord.from_row(row) for row in rows]

    def get_by_id(self, image_id: int) -> ImageRecord:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM images WHERE id = ?", (image_id,)).fetchone()

        if row is None:
            raise NotFound(image_id)
        return ImageRecord.from_row(row)

    def update_title(self, image_id: int, title: str) -> ImageRecord:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE images SET title = ? WHERE id = ?",
                (title, image_id),
            )
            if cursor.rowcount == 0:
                raise NotFound(image_id)
            row = conn.execute("SELECT * FROM images WHERE id = ?", (image_id,)).fetchone()

        logger.info(f"Updated title of image {image_id}")
        return ImageRecord.from_row(row)

    def delete_by_id(self, image_id: int) -> ImageRecord:
        # Read and delete in one transaction so the returned row is exactly
        # the one that was removed
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM images WHERE id = ?", (image_id,)).fetchone()
            if row is None:
                raise NotFound(image_id)
            conn.execute("DELETE FROM images WHERE id = ?", (image_id,))

        logger.info(f"Deleted image {image_id}")
        return ImageRecord.from_row(row)

    def close(self) -> None:
        """No pooled connections to release; present for the shared contract."""
        logger.debug(f"Closed SQLite store at {self.db_path}")
