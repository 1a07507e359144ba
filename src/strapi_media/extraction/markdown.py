# ABOUTME: Extracts embedded image references from rich-text markdown
# ABOUTME: Walks the markdown-it syntax tree and resolves site-relative destinations against the API URL

import re

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode
from pydantic import BaseModel, ConfigDict, Field

_ABSOLUTE_HTTP = re.compile(r"^http", re.IGNORECASE)


class ExtractedImageRef(BaseModel):
    """One image found in a markdown document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(description="Absolute URL the image can be fetched from")
    src: str = Field(description="Destination exactly as written in the markdown")
    alternative_text: str = Field(default="", alias="alternativeText")


def create_markdown_parser() -> MarkdownIt:
    """Build a CommonMark parser for rich-text fields."""
    return MarkdownIt("commonmark")


def resolve_destination(destination: str, base_url: str) -> str | None:
    """Turn an image destination into a fetchable URL.

    Site-relative paths are prefixed with ``base_url``, ``http(s)`` URLs are used
    as-is, and every other form (relative paths, data URIs) is unresolvable.
    """
    if destination.startswith("/"):
        return f"{base_url}{destination}"
    if _ABSOLUTE_HTTP.match(destination):
        return destination
    return None


def _alt_text(node: SyntaxTreeNode) -> str:
    if not node.children:
        return ""
    return node.children[0].content or ""


def extract_images(markdown_text: str, base_url: str, parser: MarkdownIt | None = None) -> list[ExtractedImageRef]:
    """Return every resolvable image in ``markdown_text`` in document order.

    Duplicates are kept; the same file is deduplicated later by its cache key.

    Args:
        markdown_text: Raw rich-text content
        base_url: Prefix for site-relative destinations (the Strapi API URL)
        parser: Parser to use, a fresh CommonMark parser when omitted

    Returns:
        Extracted references with their fetch URL, original src and alt text
    """
    if not markdown_text:
        return []

    parser = parser or create_markdown_parser()
    root = SyntaxTreeNode(parser.parse(markdown_text))

    images: list[ExtractedImageRef] = []
    for node in root.walk():
        if node.type != "image":
            continue
        destination = str(node.attrs.get("src", ""))
        url = resolve_destination(destination, base_url)
        if url is None:
            continue
        images.append(ExtractedImageRef(url=url, src=destination, alternative_text=_alt_text(node)))
    return images
