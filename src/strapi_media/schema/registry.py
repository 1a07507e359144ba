# ABOUTME: Read-only lookup of content-type and component schemas by uid
# ABOUTME: Built once from pre-fetched Strapi content-type-builder payloads

from collections.abc import Iterable, Mapping
from typing import Any

from strapi_media.core.base import SchemaNotFoundError
from strapi_media.schema.models import ContentTypeSchema


class SchemaRegistry:
    """Holds every known schema, keyed by uid."""

    def __init__(self, schemas: Iterable[ContentTypeSchema] = ()):
        self._schemas: dict[str, ContentTypeSchema] = {schema.uid: schema for schema in schemas}

    @classmethod
    def from_strapi(cls, *payloads: Iterable[Mapping[str, Any]]) -> "SchemaRegistry":
        """Build a registry from raw content-type and component lists.

        Example:
            registry = SchemaRegistry.from_strapi(content_types, components)
        """
        return cls(ContentTypeSchema.from_strapi(dict(raw)) for payload in payloads for raw in payload)

    def get_schema(self, uid: str) -> ContentTypeSchema:
        """Return the schema registered for ``uid``.

        Raises:
            SchemaNotFoundError: If no schema has that uid
        """
        try:
            return self._schemas[uid]
        except KeyError:
            raise SchemaNotFoundError(uid) from None

    def __contains__(self, uid: object) -> bool:
        return uid in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)
