# ABOUTME: Media resolution core: schema walker, resolver, and their shared models
# ABOUTME: Entity tree in, transformed entity tree with local file ids out

"""
Core Layer: Schema-driven media resolution

This layer handles:
- Walking entities against their content-type schemas
- Resolving file descriptors to local file nodes through the media cache
- Protocols for the cache, node store, fetcher and metadata source

Data Flow: Entities + schemas → Resolver → Entities with local file ids
"""

# Import walker and service on-demand to avoid circular imports
# Use: from strapi_media.core.walker import download_media_files
