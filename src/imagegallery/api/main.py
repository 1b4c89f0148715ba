"""Image Gallery - FastAPI Application.

This module defines the application factory, all REST API routes, and the
``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Configuration** comes from :class:`~imagegallery.core.config.GalleryConfig`
  (environment variables with the ``IMAGEGALLERY_`` prefix).
- **Metadata** lives in a record store selected by configuration (SQLite
  file or pooled PostgreSQL).  The store is opened in the lifespan handler,
  kept on ``app.state`` and injected into routes with ``Depends``.
- **Image files** are written to ``<public_dir>/uploads`` and served back by
  FastAPI's ``StaticFiles`` at ``/uploads/...``.
- **The HTML page** is served as a raw ``HTMLResponse``; it fetches all data
  from the JSON routes below.

Routes are plain ``def`` functions so FastAPI runs them in its threadpool
and blocking database or file I/O never stalls the event loop.

Endpoints
---------
========  ==================  ====================================
Method    Path                Purpose
========  ==================  ====================================
GET       ``/``               Serve the gallery HTML page
GET       ``/images``         List every image, newest first
POST      ``/upload``         Upload an image with a title
GET       ``/images/{id}``    Single image record
PUT       ``/images/{id}``    Change an image title
DELETE    ``/images/{id}``    Delete image record and file
========  ==================  ====================================

Usage
-----
CLI (installed entry point)::

    imagegallery

Direct invocation::

    python -m imagegallery.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles

from imagegallery import __version__
from imagegallery.api.models import UpdateImageRequest
from imagegallery.core import image_handlers
from imagegallery.core.config import UPLOADS_URL_PREFIX, GalleryConfig, config
from imagegallery.core.errors import NotFound, StoreError, ValidationError
from imagegallery.core.record_store import RecordStore, open_record_store
from imagegallery.core.uploads import UploadStorage

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error translation at the route boundary.
# ---------------------------------------------------------------------------


@contextmanager
def _error_boundary(failure_detail: str) -> Iterator[None]:
    """Translate domain errors raised inside the block into HTTP errors.

    - :class:`ValidationError` -> 400 with the validation message
    - :class:`NotFound` -> 404
    - :class:`StoreError` / :class:`OSError` -> 500 with ``failure_detail``;
      the underlying error is logged but never returned to the client.

    Args:
        failure_detail: Generic message for 500 responses.
    """
    try:
        yield
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except NotFound as e:
        raise HTTPException(status_code=404, detail="Image not found") from e
    except (StoreError, OSError) as e:
        logger.error(f"{failure_detail}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=failure_detail) from e


# ---------------------------------------------------------------------------
# Dependencies.
# ---------------------------------------------------------------------------


def get_store(request: Request) -> RecordStore:
    """Return the record store opened by the lifespan handler."""
    return request.app.state.record_store


def get_storage(request: Request) -> UploadStorage:
    """Return the upload storage bound to the configured public directory."""
    return request.app.state.upload_storage


def get_config(request: Request) -> GalleryConfig:
    """Return the configuration the application was created with."""
    return request.app.state.config


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(cfg: GalleryConfig, store: RecordStore | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        cfg: Configuration providing directories, limits and store settings.
        store: Optional pre-built record store.  When omitted, one is opened
            from ``cfg`` at startup.  Either way it is initialized on startup
            and closed on shutdown.

    Returns:
        A configured :class:`FastAPI` instance.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open the record store on startup and close it on shutdown."""
        # --- Startup -------------------------------------------------------
        record_store = store if store is not None else open_record_store(cfg)
        record_store.initialize()
        app.state.record_store = record_store
        logger.info(f"Record store ready ({cfg.store_backend}).")

        yield  # Application runs here.

        # --- Shutdown ------------------------------------------------------
        record_store.close()
        logger.info("Record store closed on shutdown.")

    app = FastAPI(
        title="Image Gallery",
        description="Upload, list, retitle and delete images.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = cfg
    app.state.upload_storage = UploadStorage(cfg.public_dir)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Uploaded files are public and served straight from disk.
    app.mount(
        UPLOADS_URL_PREFIX,
        StaticFiles(directory=str(cfg.uploads_dir)),
        name="uploads",
    )

    # -----------------------------------------------------------------------
    # Routes.
    # -----------------------------------------------------------------------

    @app.get("/", response_class=HTMLResponse)
    def index() -> HTMLResponse:
        """Serve the gallery and upload page.

        Raises:
            HTTPException: 404 if ``index.html`` is not found.
        """
        index_path = cfg.templates_dir / "index.html"
        if index_path.exists():
            return HTMLResponse(content=index_path.read_text(encoding="utf-8"))
        raise HTTPException(status_code=404, detail="index.html not found")

    @app.get("/images")
    def list_images(store: RecordStore = Depends(get_store)) -> dict:
        """Return every image record, newest first.

        Returns:
            Dictionary with ``success`` and ``images``.
        """
        with _error_boundary("Failed to fetch images"):
            records = image_handlers.list_images(store)
        return {"success": True, "images": [r.to_dict() for r in records]}

    @app.post("/upload")
    def upload_image(
        title: str | None = Form(default=None),
        image: UploadFile | None = File(default=None),
        store: RecordStore = Depends(get_store),
        storage: UploadStorage = Depends(get_storage),
        settings: GalleryConfig = Depends(get_config),
    ) -> dict:
        """Store an uploaded image and its metadata row.

        At most ``max_upload_bytes + 1`` bytes are read, which is enough to
        tell whether the file is over the limit.

        Returns:
            Dictionary with ``success``, ``message`` and ``image``.

        Raises:
            HTTPException: 400 for validation failures, 500 if the file or
                row cannot be written.
        """
        with _error_boundary("Failed to upload image"):
            data = image.file.read(settings.max_upload_bytes + 1) if image else None
            record = image_handlers.upload_image(
                store,
                storage,
                title=title,
                filename=image.filename if image else None,
                content_type=image.content_type if image else None,
                data=data,
                max_bytes=settings.max_upload_bytes,
            )
        return {
            "success": True,
            "message": "Image uploaded successfully!",
            "image": record.to_dict(),
        }

    @app.get("/images/{image_id}")
    def get_image(image_id: str, store: RecordStore = Depends(get_store)) -> dict:
        """Return a single image record.

        Raises:
            HTTPException: 400 for a non-numeric id, 404 if absent.
        """
        with _error_boundary("Failed to fetch image"):
            record = image_handlers.get_image(store, image_id)
        return {"success": True, "image": record.to_dict()}

    @app.put("/images/{image_id}")
    def update_image(
        image_id: str,
        req: UpdateImageRequest,
        store: RecordStore = Depends(get_store),
    ) -> dict:
        """Change the title of an image.

        Raises:
            HTTPException: 400 for a non-numeric id or blank title, 404 if
                absent, 500 on store failure.
        """
        with _error_boundary("Failed to update image"):
            record = image_handlers.update_image(store, image_id, req.title)
        return {
            "success": True,
            "message": "Image updated successfully",
            "image": record.to_dict(),
        }

    @app.delete("/images/{image_id}")
    def delete_image(
        image_id: str,
        store: RecordStore = Depends(get_store),
        storage: UploadStorage = Depends(get_storage),
    ) -> dict:
        """Delete an image row, then its file on a best-effort basis.

        A file that cannot be removed is logged and does not fail the
        request.

        Raises:
            HTTPException: 400 for a non-numeric id, 404 if absent, 500 on
                store failure.
        """
        with _error_boundary("Failed to delete image"):
            image_handlers.delete_image(store, storage, image_id)
        return {"success": True, "message": "Image deleted successfully"}

    return app


app = create_app(config)


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~imagegallery.core.config.config`
    (``IMAGEGALLERY_SERVER_HOST``, ``IMAGEGALLERY_SERVER_PORT``,
    ``IMAGEGALLERY_LOG_LEVEL``).  Defaults to ``0.0.0.0:3000``.

    This function is registered as the ``imagegallery`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )

    uvicorn.run(
        "imagegallery.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
