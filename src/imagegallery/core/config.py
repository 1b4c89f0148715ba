"""Configuration management for the Image Gallery service.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the IMAGEGALLERY_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (IMAGEGALLERY_* prefix)
2. .env file in the project root
3. Default values defined in GalleryConfig

Example .env file:
    IMAGEGALLERY_STORE_BACKEND=postgres
    IMAGEGALLERY_POSTGRES_HOST=db
    IMAGEGALLERY_POSTGRES_PASSWORD=secret
    IMAGEGALLERY_PUBLIC_DIR=public

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
The API module builds its default application from it; tests construct their
own instances pointing at temporary directories.

Record Store Selection
----------------------
``store_backend`` picks one of two interchangeable record stores:

- ``sqlite``: file-backed embedded database at ``sqlite_path``
- ``postgres``: pooled connections to a PostgreSQL server, built from the
  ``postgres_*`` fields (or ``database_url`` when set explicitly)

Directory Management
--------------------
The configuration creates required directories on initialization:
- public_dir: Root of the statically served files
- uploads_dir: Where uploaded images are written
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

# Package-relative template directory holding the gallery page.
_PACKAGE_DIR = Path(__file__).resolve().parent.parent

UPLOADS_URL_PREFIX = "/uploads"

MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class GalleryConfig(BaseSettings):
    """Main configuration for the Image Gallery service.

    Attributes
    ----------
    Record Store:
        store_backend : Literal["sqlite", "postgres"]
            Which record store implementation to open at startup
        sqlite_path : Path
            Database file for the embedded store
        postgres_host, postgres_port, postgres_db, postgres_user, postgres_password
            Connection parameters for the networked store
        database_url : str | None
            Explicit SQLAlchemy URL; overrides the postgres_* fields
        pool_size, max_overflow, pool_timeout, pool_recycle
            Connection pool tuning for the networked store

    Uploads:
        public_dir : Path
            Statically served directory; uploads live in ``public_dir/uploads``
        max_upload_bytes : int
            Largest accepted upload (10 MiB)

    Server:
        server_host : str
            Bind address
        server_port : int
            Server port (1024-65535)
        log_level : str
            Root logging level applied by ``main()``

    Examples
    --------
        >>> custom_config = GalleryConfig(
        ...     store_backend="postgres",
        ...     postgres_host="db",
        ...     public_dir="/srv/gallery/public",
        ... )
        >>> str(custom_config.uploads_dir)
        '/srv/gallery/public/uploads'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="IMAGEGALLERY_",
        case_sensitive=False,
    )

    # Record store selection
    store_backend: Literal["sqlite", "postgres"] = Field(
        default="sqlite",
        description="Record store implementation (sqlite or postgres)",
    )
    sqlite_path: Path = Field(
        default=Path("database.sqlite"),
        description="Database file used by the embedded store",
    )

    # Networked store connection parameters
    postgres_host: str = Field(default="localhost")
    postgres_port: int = Field(default=5432, ge=1, le=65535)
    postgres_db: str = Field(default="image_gallery")
    postgres_user: str = Field(default="postgres")
    postgres_password: str = Field(default="password")
    database_url: str | None = Field(
        default=None,
        description="Explicit SQLAlchemy URL, overrides the postgres_* fields",
    )

    # Connection pool
    pool_size: int = Field(default=5, ge=1)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout: float = Field(
        default=30.0,
        description="Seconds to wait for a pooled connection before failing",
        gt=0,
    )
    pool_recycle: int = Field(
        default=1800,
        description="Seconds after which idle connections are replaced",
    )

    # Uploads
    public_dir: Path = Field(
        default=Path("public"),
        description="Statically served directory containing uploads/",
    )
    max_upload_bytes: int = Field(
        default=MAX_UPLOAD_BYTES,
        description="Maximum accepted upload size in bytes",
        gt=0,
    )
    templates_dir: Path = Field(
        default=_PACKAGE_DIR / "templates",
        description="Directory containing index.html",
    )

    # Server
    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(default=3000, ge=1024, le=65535)
    log_level: str = Field(default="INFO")

    def __init__(self, **kwargs):
        """Initialize configuration and create required directories.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        if self.store_backend == "sqlite":
            self.sqlite_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def uploads_dir(self) -> Path:
        """Directory uploaded image files are written to."""
        return self.public_dir / UPLOADS_URL_PREFIX.lstrip("/")

    @property
    def sqlalchemy_url(self) -> URL:
        """SQLAlchemy URL for the networked store.

        Built with ``URL.create`` so credentials containing reserved
        characters are escaped correctly.
        """
        if self.database_url:
            return make_url(self.database_url)
        return URL.create(
            "postgresql+psycopg2",
            username=self.postgres_user,
            password=self.postgres_password,
            host=self.postgres_host,
            port=self.postgres_port,
            database=self.postgres_db,
        )


config = GalleryConfig()
