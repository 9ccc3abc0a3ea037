"""File management schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StoredFileResponse(CamelModel):
    """One stored upload."""

    filename: str
    original_name: str
    size: int
    url: str


class UploadResponse(StoredFileResponse):
    """Response for a single-file upload."""

    success: bool = True


class UploadMultipleResponse(CamelModel):
    """Response for a multi-file upload, in submission order."""

    success: bool = True
    files: list[StoredFileResponse]


class ListingEntryResponse(CamelModel):
    """Directory listing entry."""

    name: str
    size: int
    is_directory: bool
    modified: datetime
    url: str


class DeleteResponse(CamelModel):
    success: bool = True
    message: str = "File deleted successfully"


class HealthResponse(BaseModel):
    status: str = "healthy"
    uptime: float
