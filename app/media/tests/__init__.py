"""
Tests for the media app.

Test modules:
- test_models: UploadHandle state properties
- test_blob_store: BlobStoreService upload and resolution flow
- test_views: Upload endpoints
"""
