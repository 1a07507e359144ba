# ABOUTME: Domain models shared by the resolver and the schema walker
# ABOUTME: Remote file descriptors, cache entries, and resolved rich-text media descriptors

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

CACHE_KEY_PREFIX = "strapi-media-"


def media_cache_key(file_id: int | str) -> str:
    """Cache key under which the download result for a Strapi file is stored."""
    return f"{CACHE_KEY_PREFIX}{file_id}"


class RemoteFileDescriptor(BaseModel):
    """A CMS-hosted file as returned by Strapi's upload plugin.

    Unknown fields (name, mime, formats, ...) are kept so the raw metadata can be
    attached to the output tree untouched.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: int | str
    url: str
    updated_at: str | None = Field(default=None, alias="updatedAt")

    @property
    def cache_key(self) -> str:
        return media_cache_key(self.id)

    @property
    def is_absolute(self) -> bool:
        return self.url.startswith("http")

    def raw(self) -> dict[str, Any]:
        """The descriptor as Strapi spelled it."""
        return self.model_dump(by_alias=True)


class CacheEntry(BaseModel):
    """What the media cache remembers about one downloaded file."""

    model_config = ConfigDict(populate_by_name=True)

    file_node_id: str = Field(alias="fileNodeID")
    updated_at: str | None = Field(default=None, alias="updatedAt")

    def is_valid_for(self, descriptor: RemoteFileDescriptor) -> bool:
        """An entry is reusable only while the remote file is unchanged."""
        return self.updated_at == descriptor.updated_at


class ResolvedMedia(BaseModel):
    """An image embedded in rich text, resolved to a local file node."""

    model_config = ConfigDict(populate_by_name=True)

    alternative_text: str = Field(default="", alias="alternativeText")
    url: str
    src: str
    local_file: str = Field(alias="localFile")
    file: dict[str, Any] = Field(default_factory=dict)

    def to_entity_value(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
