"""
API views for attachment uploads.

Provides:
- UploadHandleView: Issue a storage reference before uploading
- UploadBytesView: Receive the bytes for a storage reference

Attachments are uploaded out of band: the client gets a handle, uploads
the file, then passes the storage_ref to the message send endpoint.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from media.serializers import (
    UploadBytesSerializer,
    UploadHandleSerializer,
    UploadTargetSerializer,
)
from media.services.blob_store import BlobStoreService


class UploadHandleView(APIView):
    """
    Issue an upload handle.

    POST /api/v1/media/uploads/

    Response:
        201 Created: {storage_ref, upload_url, expires_at}
        401 Unauthorized: Not authenticated
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="request_upload_handle",
        summary="Request upload handle",
        request=None,
        responses={201: UploadTargetSerializer},
        tags=["Media - Upload"],
    )
    def post(self, request):
        target = BlobStoreService.request_upload_handle(request.user).raise_for_error()
        return Response(
            UploadTargetSerializer(target).data,
            status=status.HTTP_201_CREATED,
        )


class UploadBytesView(APIView):
    """
    Upload the bytes for a handle.

    PUT /api/v1/media/uploads/{storage_ref}/

    Request:
        Content-Type: multipart/form-data
        - file (required): The attachment

    Response:
        200 OK: Upload stored
        400 Bad Request: Empty or oversized file
        404 Not Found: Unknown handle, or owned by someone else
        409 Conflict: Handle expired or already used
    """

    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        operation_id="upload_attachment_bytes",
        summary="Upload attachment bytes",
        request=UploadBytesSerializer,
        responses={
            200: UploadHandleSerializer,
            400: OpenApiResponse(description="Empty or oversized file"),
            404: OpenApiResponse(description="Handle not found or not owned by user"),
            409: OpenApiResponse(description="Handle expired or already used"),
        },
        tags=["Media - Upload"],
    )
    def put(self, request, storage_ref):
        serializer = UploadBytesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        handle = BlobStoreService.store(
            request.user,
            storage_ref,
            serializer.validated_data["file"],
        ).raise_for_error()

        return Response(UploadHandleSerializer(handle).data)
