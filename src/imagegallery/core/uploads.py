"""On-disk storage for uploaded image files.

Files are written to ``<public_dir>/uploads/`` and referenced from the
record store by a path relative to the public directory
(``/uploads/<filename>``) so the browser can fetch them directly from the
static mount.
"""

from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path, PurePosixPath

from imagegallery.core.config import UPLOADS_URL_PREFIX

logger = logging.getLogger(__name__)


def generate_filename(original_name: str) -> str:
    """Build a collision-resistant filename that keeps the original extension.

    The name combines the current time in milliseconds with a random hex
    component, e.g. ``1718000000000-3f2a9c1b7d4e.jpg``.

    Args:
        original_name: Client-supplied filename (only its suffix is kept).

    Returns:
        The generated filename.
    """
    # Client names may use either separator; only the final suffix survives
    suffix = PurePosixPath(original_name.replace("\\", "/")).suffix
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}{suffix}"


class UploadStorage:
    """Write and remove uploaded files under a public directory."""

    def __init__(self, public_dir: Path):
        self.public_dir = Path(public_dir)
        self.uploads_dir = self.public_dir / UPLOADS_URL_PREFIX.lstrip("/")

    def save(self, original_name: str, data: bytes) -> str:
        """Persist ``data`` under a freshly generated filename.

        The uploads directory is created if it does not exist.

        Args:
            original_name: Client-supplied filename.
            data: File content.

        Returns:
            The public path of the stored file (``/uploads/<filename>``).

        Raises:
            OSError: If the directory or file cannot be written.
        """
        filename = generate_filename(original_name)
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        (self.uploads_dir / filename).write_bytes(data)
        logger.info(f"Stored upload {filename} ({len(data)} bytes)")
        return f"{UPLOADS_URL_PREFIX}/{filename}"

    def resolve(self, image_path: str) -> Path:
        """Map a stored public path back to a file inside ``public_dir``.

        Raises:
            ValueError: If the path escapes the public directory.
        """
        root = self.public_dir.resolve()
        candidate = (root / image_path.lstrip("/")).resolve()
        if not candidate.is_relative_to(root):
            raise ValueError(f"Path outside public directory: {image_path}")
        return candidate

    def remove(self, image_path: str) -> bool:
        """Delete the file behind ``image_path``, best-effort.

        Failures are logged and reported through the return value; they are
        never raised, because the database row has already been removed.

        Args:
            image_path: Public path as stored in the record.

        Returns:
            True if the file was deleted, False otherwise.
        """
        try:
            self.resolve(image_path).unlink()
        except (OSError, ValueError) as e:
            logger.warning(f"Could not delete file {image_path}: {e}")
            return False

        logger.info(f"Deleted file {image_path}")
        return True
