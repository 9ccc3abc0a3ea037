"""Error taxonomy for imagehost.

Every request-level failure is an ``ImageHostError`` subclass carrying the
HTTP status it maps to. ``main.create_app`` registers a single handler that
renders them as ``{"success": false, "error": message}``.
"""

from __future__ import annotations

from fastapi import status


class ImageHostError(Exception):
    """Base class for errors recovered at the request boundary."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(ImageHostError):
    message = "Only image files are allowed"


class TooManyFiles(ImageHostError):
    message = "Too many files"


class PayloadTooLarge(ImageHostError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    message = "File too large"


class NoFileProvided(ImageHostError):
    message = "No file uploaded"


class NoFilesProvided(ImageHostError):
    message = "No files uploaded"


class Unauthorized(ImageHostError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized. Please provide a valid auth key."


class NotFound(ImageHostError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "File not found"


class ScanError(ImageHostError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Unable to scan directory"


class StartupError(Exception):
    """Raised when the service cannot start, e.g. the storage directory is unusable."""
