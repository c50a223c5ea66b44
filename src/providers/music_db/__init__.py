"""Music-database provider implementations.

    DiscogsReleaseClient — Discogs REST API release lookups and image
    downloads for cover enrichment.  Anonymous access works; set
    DISCOGS_TOKEN for the authenticated rate limit.
"""

from src.providers.music_db.discogs_release_client import DiscogsReleaseClient, ImageDownload

__all__ = [
    "DiscogsReleaseClient",
    "ImageDownload",
]
