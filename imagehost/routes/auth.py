"""Authentication routes."""

import json

from fastapi import APIRouter, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from imagehost.dependencies import SettingsDep, key_matches
from imagehost.schemas.auth import AuthCheckRequest, AuthCheckResponse

router = APIRouter()

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_check_request(request: Request) -> AuthCheckRequest:
    """Parse the key from a JSON or form body. An empty body carries no key."""
    content_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        data = {"key": form["key"]} if isinstance(form.get("key"), str) else {}
    else:
        body = await request.body()
        if not body.strip():
            return AuthCheckRequest()
        try:
            data = json.loads(body)
        except ValueError as e:
            raise RequestValidationError(
                [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error", "input": {}}]
            ) from e

    try:
        return AuthCheckRequest.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e


@router.post(
    "/check",
    response_model=AuthCheckResponse,
    response_model_exclude_none=True,
    responses={status.HTTP_401_UNAUTHORIZED: {"model": AuthCheckResponse}},
)
async def check_key(request: Request, settings: SettingsDep):
    """Verify a key before uploading. Has no side effects.

    The key may be sent as JSON ``{"key": ...}`` or as a form field.
    """
    payload = await read_check_request(request)
    if not settings.require_auth or key_matches(settings, payload.key):
        return AuthCheckResponse(success=True)

    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"success": False, "error": "Invalid auth key"},
    )
