# ABOUTME: Persistence models for the media cache and locally stored file nodes
# ABOUTME: SQLModel tables backing the cache store and the node store

from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Returns the current UTC timestamp."""

    return datetime.now(UTC)


class MediaCacheRecord(SQLModel, table=True):
    """Download result for one Strapi file, keyed by ``strapi-media-<id>``."""

    __tablename__ = "media_cache"  # type: ignore[assignment]

    key: str = Field(primary_key=True, description="Cache key derived from the Strapi file id")
    file_node_id: str = Field(description="Local file node created for the download")
    updated_at: str | None = Field(default=None, description="Strapi updatedAt of the file when downloaded")
    stored_at: datetime = Field(default_factory=utcnow, description="When the entry was last written")


class LocalFileNode(SQLModel, table=True):
    """A downloaded file on local disk."""

    __tablename__ = "local_file_node"  # type: ignore[assignment]

    id: str = Field(primary_key=True, description="Stable local identifier handed back to the entity tree")
    url: str = Field(index=True, description="Absolute URL the file was downloaded from")
    path: str = Field(description="Location of the stored file")
    mime_type: str | None = Field(default=None, description="Content-Type reported by the server")
    size: int = Field(default=0, description="File size in bytes")
    created_at: datetime = Field(default_factory=utcnow, description="Creation timestamp")
    touched_at: datetime = Field(default_factory=utcnow, description="Last time a pipeline run referenced the node")
