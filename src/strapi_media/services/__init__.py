# ABOUTME: External service integrations for the media pipeline
# ABOUTME: Strapi file metadata client and the remote file fetcher

from .files import RemoteFileFetcher
from .strapi import StrapiClient

__all__ = [
    "RemoteFileFetcher",
    "StrapiClient",
]
