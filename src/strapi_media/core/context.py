# ABOUTME: Collaborators shared by one media walk: schemas, resolver, metadata source, parser
# ABOUTME: Passed explicitly through the walker instead of living in module globals

from dataclasses import dataclass, field

from markdown_it import MarkdownIt

from strapi_media.core.base import FileMetadataSource
from strapi_media.core.resolver import MediaResolver
from strapi_media.extraction.markdown import create_markdown_parser
from strapi_media.schema.registry import SchemaRegistry


@dataclass(slots=True)
class MediaContext:
    """Everything the schema walker needs besides the entities themselves."""

    schemas: SchemaRegistry
    resolver: MediaResolver
    files: FileMetadataSource
    api_url: str
    parser: MarkdownIt = field(default_factory=create_markdown_parser)

    @property
    def api_base(self) -> str:
        return self.api_url.rstrip("/")

    def relative_file_url(self, url: str) -> str:
        """Strip the API URL so the value matches what Strapi stores for uploads."""
        if url.startswith(self.api_base):
            return url[len(self.api_base) :]
        return url
