"""Tests for imagegallery.core.uploads - upload file storage."""

from __future__ import annotations

import re

import pytest

from imagegallery.core.uploads import UploadStorage, generate_filename


class TestGenerateFilename:
    def test_format(self):
        """Name should be <millis>-<12 hex chars><suffix>."""
        name = generate_filename("photo.jpg")
        assert re.fullmatch(r"\d{13}-[0-9a-f]{12}\.jpg", name)

    def test_keeps_only_final_suffix(self):
        assert generate_filename("archive.tar.png").endswith(".png")

    def test_no_extension(self):
        assert re.fullmatch(r"\d{13}-[0-9a-f]{12}", generate_filename("README"))

    def test_ignores_client_directories(self):
        """Directory components in the client name never reach the result."""
        name = generate_filename("..\\..\\evil/dir\\photo.gif")
        assert "/" not in name
        assert "\\" not in name
        assert name.endswith(".gif")


class TestUploadStorage:
    def test_save_returns_public_path(self, upload_storage):
        image_path = upload_storage.save("a.png", b"data")
        assert image_path.startswith("/uploads/")
        assert upload_storage.resolve(image_path).read_bytes() == b"data"

    def test_resolve_rejects_escape(self, upload_storage):
        with pytest.raises(ValueError):
            upload_storage.resolve("/../../etc/passwd")

    def test_remove_existing(self, upload_storage):
        image_path = upload_storage.save("a.png", b"data")
        assert upload_storage.remove(image_path) is True
        assert not upload_storage.resolve(image_path).exists()

    def test_remove_missing_returns_false(self, upload_storage):
        assert upload_storage.remove("/uploads/does-not-exist.png") is False

    def test_remove_logs_warning(self, upload_storage, caplog):
        with caplog.at_level("WARNING", logger="imagegallery.core.uploads"):
            upload_storage.remove("/uploads/missing.png")
        assert "Could not delete file /uploads/missing.png" in caplog.text
