"""Core functionality for the image gallery.

- **GalleryConfig / config**: Pydantic Settings configuration (IMAGEGALLERY_ prefix)
- **RecordStore**: Persistence contract for image metadata, with SQLite and
  pooled SQLAlchemy implementations selected by ``open_record_store``
- **UploadStorage**: Writes and removes uploaded files under the public directory
- **image_handlers**: Upload, get, update, delete and list operations

Usage Example
-------------
    from imagegallery.core import config, open_record_store, UploadStorage
    from imagegallery.core import image_handlers

    store = open_record_store(config)
    store.initialize()
    record = image_handlers.upload_image(
        store,
        UploadStorage(config.public_dir),
        title="Sunset",
        filename="sunset.jpg",
        content_type="image/jpeg",
        data=jpeg_bytes,
    )
    store.close()
"""

from imagegallery.core.config import GalleryConfig, config
from imagegallery.core.errors import NotFound, StoreError, ValidationError
from imagegallery.core.record_store import ImageRecord, RecordStore, open_record_store
from imagegallery.core.uploads import UploadStorage

__all__ = [
    "GalleryConfig",
    "config",
    "ImageRecord",
    "RecordStore",
    "open_record_store",
    "UploadStorage",
    "NotFound",
    "StoreError",
    "ValidationError",
]
