"""Request handlers for the image resource lifecycle.

Each function is a stateless transform over a :class:`RecordStore` passed in
by the caller.  Input validation always runs before any side effect and
raises :class:`~imagegallery.core.errors.ValidationError`.

Two partial failures are tolerated on purpose:

- ``upload_image`` writes the file before inserting the row.  If the insert
  fails, the written file stays on disk as an orphan.
- ``delete_image`` removes the row before the file.  If the file cannot be
  removed, the failure is logged and the delete still succeeds.

The database is authoritative in both cases.
"""

from __future__ import annotations

import logging
import re

from imagegallery.core.config import MAX_UPLOAD_BYTES
from imagegallery.core.errors import ValidationError
from imagegallery.core.record_store import ImageRecord, RecordStore
from imagegallery.core.uploads import UploadStorage

logger = logging.getLogger(__name__)

_IMAGE_ID_PATTERN = re.compile(r"-?[0-9]+")

# Ids are stored as signed 64-bit integers by both backends
_MIN_IMAGE_ID = -(2**63)
_MAX_IMAGE_ID = 2**63 - 1


def parse_image_id(raw_id: str | int) -> int:
    """Convert a path parameter to an image id.

    Accepts an optional minus sign followed by ASCII digits, surrounded by
    optional whitespace, within the signed 64-bit range.

    Raises:
        ValidationError: If ``raw_id`` is not such an integer.
    """
    if isinstance(raw_id, int) and not isinstance(raw_id, bool):
        image_id = raw_id
    elif isinstance(raw_id, str) and _IMAGE_ID_PATTERN.fullmatch(raw_id.strip()):
        image_id = int(raw_id.strip())
    else:
        raise ValidationError("invalid image id")

    if not _MIN_IMAGE_ID <= image_id <= _MAX_IMAGE_ID:
        raise ValidationError("invalid image id")
    return image_id


def clean_title(title: str | None) -> str:
    """Trim ``title`` and reject it if nothing is left.

    Raises:
        ValidationError: If the title is missing or whitespace-only.
    """
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("title required")
    return cleaned


def upload_image(
    store: RecordStore,
    storage: UploadStorage,
    *,
    title: str | None,
    filename: str | None,
    content_type: str | None,
    data: bytes | None,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> ImageRecord:
    """Validate an upload, store the file, and insert its metadata row.

    Validation order:

    1. title present and not blank
    2. file part present
    3. content type in the ``image/*`` family
    4. size no larger than ``max_bytes``

    Args:
        store: Record store receiving the metadata row.
        storage: Upload storage receiving the file.
        title: Form title.
        filename: Client filename of the file part, ``None`` when absent.
        content_type: Declared content type of the file part.
        data: File content.
        max_bytes: Largest accepted file size.

    Returns:
        The inserted record.

    Raises:
        ValidationError: If any check fails.  Nothing is written.
        OSError: If the file cannot be written.
        StoreError: If the row insert fails.  The file is left in place.
    """
    cleaned_title = clean_title(title)

    if not filename or data is None:
        raise ValidationError("image required")

    if not (content_type or "").startswith("image/"):
        raise ValidationError("invalid type")

    if len(data) > max_bytes:
        raise ValidationError("too large")

    image_path = storage.save(filename, data)
    return store.insert(cleaned_title, image_path)


def get_image(store: RecordStore, raw_id: str | int) -> ImageRecord:
    """Return a single image record."""
    return store.get_by_id(parse_image_id(raw_id))


def update_image(store: RecordStore, raw_id: str | int, title: str | None) -> ImageRecord:
    """Change the title of an image.

    Both the id and the title are validated before the store is touched.
    """
    image_id = parse_image_id(raw_id)
    cleaned_title = clean_title(title)
    return store.update_title(image_id, cleaned_title)


def delete_image(store: RecordStore, storage: UploadStorage, raw_id: str | int) -> ImageRecord:
    """Delete an image row, then its file on a best-effort basis.

    Returns:
        The record as it was before deletion.
    """
    record = store.delete_by_id(parse_image_id(raw_id))

    if not storage.remove(record.image_path):
        logger.warning(f"Image {record.id} deleted but its file was left on disk")

    return record


def list_images(store: RecordStore) -> list[ImageRecord]:
    """Return every image, newest first."""
    return store.list_all()
