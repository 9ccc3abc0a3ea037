"""Authentication schemas."""

from pydantic import BaseModel


class AuthCheckRequest(BaseModel):
    """Key supplied by a client to verify before uploading."""

    key: str | None = None


class AuthCheckResponse(BaseModel):
    success: bool
    error: str | None = None
