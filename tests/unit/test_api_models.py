"""Tests for imagegallery.api.models - Pydantic request models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from imagegallery.api.models import UpdateImageRequest


class TestUpdateImageRequest:
    def test_title_kept_verbatim(self):
        """Trimming happens in the handler, not in the model."""
        req = UpdateImageRequest(title="  Sunset Beach ")
        assert req.title == "  Sunset Beach "

    def test_title_optional(self):
        """A missing title parses so the handler can reject it with a 400."""
        assert UpdateImageRequest().title is None

    def test_title_must_be_string(self):
        with pytest.raises(ValidationError):
            UpdateImageRequest(title=["not", "a", "string"])
