"""Media services for attachment uploads and URL resolution."""

from media.services.blob_store import BlobStoreService, UploadTarget

__all__ = [
    "BlobStoreService",
    "UploadTarget",
]
