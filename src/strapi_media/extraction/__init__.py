# ABOUTME: Content parsing for embedded media references
# ABOUTME: Markdown image extraction used by the rich-text branch of the schema walker

"""
Extraction Layer: Find media references inside content

This layer handles:
- Markdown parsing into a syntax tree
- Image destination resolution against the Strapi API URL

Data Flow: Rich-text field → Extracted image references → core/ resolver
"""

from .markdown import ExtractedImageRef, create_markdown_parser, extract_images

__all__ = [
    "ExtractedImageRef",
    "create_markdown_parser",
    "extract_images",
]
