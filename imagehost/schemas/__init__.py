"""Pydantic schemas for API requests and responses."""

from imagehost.schemas.auth import AuthCheckRequest, AuthCheckResponse
from imagehost.schemas.files import (
    DeleteResponse,
    HealthResponse,
    ListingEntryResponse,
    StoredFileResponse,
    UploadMultipleResponse,
    UploadResponse,
)

__all__ = [
    # Auth
    "AuthCheckRequest",
    "AuthCheckResponse",
    # Files
    "DeleteResponse",
    "HealthResponse",
    "ListingEntryResponse",
    "StoredFileResponse",
    "UploadMultipleResponse",
    "UploadResponse",
]
