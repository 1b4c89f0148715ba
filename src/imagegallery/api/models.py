"""Pydantic request models for the Image Gallery API.

Models
------
UpdateImageRequest
    Payload for ``PUT /images/{id}`` - the new title for an image.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class UpdateImageRequest(BaseModel):
    """Request body for the ``PUT /images/{id}`` endpoint.

    ``title`` is optional at the schema level so a missing or blank title
    is reported with the same 400 response as any other validation error
    rather than FastAPI's generic 422.

    Attributes:
        title: New display title.  Surrounding whitespace is trimmed before
            it is stored.
    """

    title: str | None = Field(
        default=None,
        description="New image title (must not be blank).",
    )
