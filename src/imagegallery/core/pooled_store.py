"""Networked record store backed by a SQLAlchemy connection pool.

The default target is PostgreSQL (``postgresql+psycopg2``), but the store
only relies on SQLAlchemy Core constructs, so any URL SQLAlchemy can pool
works.  The test suite exercises it against a SQLite file URL.

Pool behaviour is delegated to SQLAlchemy's ``QueuePool``:

- ``pool_timeout`` bounds how long a request waits for a free connection
- ``pool_recycle`` replaces connections older than the given age
- ``pool_pre_ping`` discards connections the server has dropped
"""

from __future__ import annotations

import logging

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    Table,
    Text,
    create_engine,
    delete,
    func,
    insert,
    select,
    update,
)
from sqlalchemy.engine import URL, Connection
from sqlalchemy.exc import SQLAlchemyError

from imagegallery.core.errors import NotFound, StoreError
from imagegallery.core.record_store import ImageRecord, RecordStore

logger = logging.getLogger(__name__)

metadata = MetaData()

images = Table(
    "images",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", Text, nullable=False),
    Column("image_path", Text, nullable=False),
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.current_timestamp(),
    ),
    # Only affects SQLite URLs: never reuse ids of deleted rows
    sqlite_autoincrement=True,
)


class PooledRecordStore(RecordStore):
    """Record store using pooled connections from a SQLAlchemy engine.

    Args:
        url: SQLAlchemy database URL.
        pool_size: Connections kept open in the pool.
        max_overflow: Extra connections allowed above ``pool_size``.
        pool_timeout: Seconds to wait for a connection before failing.
        pool_recycle: Seconds after which a connection is replaced.
    """

    def __init__(
        self,
        url: str | URL,
        *,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: float = 30.0,
        pool_recycle: int = 1800,
    ):
        self.engine = create_engine(
            url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
            pool_pre_ping=True,
        )
        self._closed = False

    def _fetch(self, conn: Connection, image_id: int) -> ImageRecord | None:
        row = conn.execute(select(images).where(images.c.id == image_id)).mappings().first()
        return ImageRecord.from_row(row) if row is not None else None

    def initialize(self) -> None:
        try:
            metadata.create_all(self.engine, checkfirst=True)
        except SQLAlchemyError as e:
            logger.error(f"Error initializing images table: {e}")
            raise StoreError(str(e)) from e
        logger.info(
            f'Table "images" is ready at {self.engine.url.render_as_string(hide_password=True)}'
        )

    def insert(self, title: str, image_path: str) -> ImageRecord:
        try:
            with self.engine.begin() as conn:
                result = conn.execute(insert(images).values(title=title, image_path=image_path))
                record = self._fetch(conn, result.inserted_primary_key[0])
        except SQLAlchemyError as e:
            logger.error(f"Error inserting image {image_path}: {e}")
            raise StoreError(str(e)) from e

        logger.info(f"Inserted image {record.id}: {record.image_path}")
        return record

    def list_all(self) -> list[ImageRecord]:
        query = select(images).order_by(images.c.created_at.desc(), images.c.id.desc())
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(query).mappings().all()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching images: {e}")
            raise StoreError(str(e)) from e
        return [ImageRecord.from_row(row) for row in rows]

    def get_by_id(self, image_id: int) -> ImageRecord:
        try:
            with self.engine.connect() as conn:
                record = self._fetch(conn, image_id)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching image {image_id}: {e}")
            raise StoreError(str(e)) from e

        if record is None:
            raise NotFound(image_id)
        return record

    def update_title(self, image_id: int, title: str) -> ImageRecord:
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    update(images).where(images.c.id == image_id).values(title=title)
                )
                if result.rowcount == 0:
                    raise NotFound(image_id)
                record = self._fetch(conn, image_id)
        except SQLAlchemyError as e:
            logger.error(f"Error updating image {image_id}: {e}")
            raise StoreError(str(e)) from e

        logger.info(f"Updated title of image {image_id}")
        return record

    def delete_by_id(self, image_id: int) -> ImageRecord:
        try:
            with self.engine.begin() as conn:
                record = self._fetch(conn, image_id)
                if record is None:
                    raise NotFound(image_id)
                conn.execute(delete(images).where(images.c.id == image_id))
        except SQLAlchemyError as e:
            logger.error(f"Error deleting image {image_id}: {e}")
            raise StoreError(str(e)) from e

        logger.info(f"Deleted image {image_id}")
        return record

    def close(self) -> None:
        """Dispose of the engine's pool, closing every checked-in connection."""
        if self._closed:
            return
        self.engine.dispose()
        self._closed = True
        logger.info("Connection pool disposed")
