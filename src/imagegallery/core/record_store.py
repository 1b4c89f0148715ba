"""Record store interface for persisted image metadata.

Two interchangeable implementations honour the same contract:

- :class:`~imagegallery.core.sqlite_store.SQLiteRecordStore` keeps the
  ``images`` table in a local SQLite file.
- :class:`~imagegallery.core.pooled_store.PooledRecordStore` talks to a
  networked database (PostgreSQL by default) through a SQLAlchemy
  connection pool.

:func:`open_record_store` picks one from configuration.  Callers construct
the store once, call :meth:`RecordStore.initialize`, pass the handle to the
image handlers, and :meth:`RecordStore.close` it on shutdown.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from imagegallery.core.config import GalleryConfig


@dataclass(frozen=True)
class ImageRecord:
    """Metadata row for one uploaded image.

    Attributes:
        id: Store-assigned identifier, never reused.
        title: Non-empty display title.
        image_path: Path of the file relative to the public directory
            (``/uploads/<filename>``).
        created_at: Insert time assigned by the store, in UTC.
    """

    id: int
    title: str
    image_path: str
    created_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ImageRecord:
        """Build a record from a database row mapping.

        SQLite hands back ``CURRENT_TIMESTAMP`` values as naive strings or
        naive datetimes; both are UTC and get the timezone attached here so
        every backend returns the same shape.
        """
        created_at = row["created_at"]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        return cls(
            id=int(row["id"]),
            title=row["title"],
            image_path=row["image_path"],
            created_at=created_at,
        )

    def to_dict(self) -> dict:
        """Return a JSON-friendly dictionary with an ISO-8601 timestamp."""
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data


class RecordStore(ABC):
    """Persistence contract for the ``images`` table.

    Every backend failure is raised as
    :class:`~imagegallery.core.errors.StoreError`.  Missing rows raise
    :class:`~imagegallery.core.errors.NotFound`.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Create the ``images`` table if it does not exist yet."""

    @abstractmethod
    def insert(self, title: str, image_path: str) -> ImageRecord:
        """Insert a row and return it with its assigned id and timestamp."""

    @abstractmethod
    def list_all(self) -> list[ImageRecord]:
        """Return every record, newest first (ties broken by id, highest first)."""

    @abstractmethod
    def get_by_id(self, image_id: int) -> ImageRecord:
        """Return the record with ``image_id``."""

    @abstractmethod
    def update_title(self, image_id: int, title: str) -> ImageRecord:
        """Replace the title of ``image_id`` and return the updated record."""

    @abstractmethod
    def delete_by_id(self, image_id: int) -> ImageRecord:
        """Delete ``image_id`` and return the row as it was before deletion."""

    @abstractmethod
    def close(self) -> None:
        """Release any pooled resources.  Safe to call more than once."""


def open_record_store(cfg: GalleryConfig) -> RecordStore:
    """Construct the record store selected by ``cfg.store_backend``.

    The returned store is not yet initialized; call
    :meth:`RecordStore.initialize` before use.

    Args:
        cfg: Application configuration.

    Returns:
        A :class:`SQLiteRecordStore` or :class:`PooledRecordStore`.
    """
    if cfg.store_backend == "postgres":
        from imagegallery.core.pooled_store import PooledRecordStore

        return PooledRecordStore(
            cfg.sqlalchemy_url,
            pool_size=cfg.pool_size,
            max_overflow=cfg.max_overflow,
            pool_timeout=cfg.pool_timeout,
            pool_recycle=cfg.pool_recycle,
        )

    from imagegallery.core.sqlite_store import SQLiteRecordStore

    return SQLiteRecordStore(cfg.sqlite_path)
