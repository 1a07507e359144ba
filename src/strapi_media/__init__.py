# ABOUTME: Schema-driven media resolution and deduplicating download pipeline for Strapi content
# ABOUTME: Exposes the batch entry point that attaches local file identifiers to entity trees

"""Strapi media sync.

Walks Strapi entities against their content-type schemas, downloads every
referenced media file once, and attaches local file identifiers to the tree.
"""

from strapi_media.core.walker import download_media_files

__all__ = ["download_media_files"]
__version__ = "0.1.0"
