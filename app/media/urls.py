"""
URL configuration for media app.

Media - Upload:
    POST /uploads/                    - Request an upload handle
    PUT  /uploads/{storage_ref}/      - Upload bytes for a handle
"""

from django.urls import path

from media.views import UploadBytesView, UploadHandleView

app_name = "media"

urlpatterns = [
    path("uploads/", UploadHandleView.as_view(), name="upload-handle"),
    path(
        "uploads/<uuid:storage_ref>/",
        UploadBytesView.as_view(),
        name="upload-bytes",
    ),
]
