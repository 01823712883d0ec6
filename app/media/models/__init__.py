"""
Media models package.

Exports:
    UploadHandle: Storage reference issued for one attachment upload
"""

from media.models.upload_handle import UploadHandle

__all__ = [
    "UploadHandle",
]
