# ABOUTME: Media cache and local file node persistence layer
# ABOUTME: Keeps download results between runs so unchanged files are never fetched twice

"""
Persistence Layer: Remember what has already been downloaded

This layer handles:
- SQLModel tables for cache entries and local file nodes
- Cache get/set keyed by Strapi file id
- Node lookup, touch, and pruning of nodes no run references anymore

Data Flow: core/ resolver → Database → next pipeline run
"""

from .manager import DatabaseManager
from .models import LocalFileNode, MediaCacheRecord

__all__ = [
    "DatabaseManager",
    "LocalFileNode",
    "MediaCacheRecord",
]
