"""
Media app for attachment uploads.

This app provides:
- UploadHandle model: opaque storage references owned by one user
- BlobStoreService: handle issue, byte storage, read-time URL resolution
"""
