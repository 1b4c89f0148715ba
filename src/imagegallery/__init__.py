"""Image Gallery - upload, list, retitle and delete images over HTTP."""

__version__ = "0.1.0"

from imagegallery.core.config import GalleryConfig, config
from imagegallery.core.record_store import ImageRecord, RecordStore, open_record_store

__all__ = [
    "GalleryConfig",
    "ImageRecord",
    "RecordStore",
    "config",
    "open_record_store",
]
