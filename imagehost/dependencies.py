"""FastAPI dependencies for settings, storage and the shared-secret gate."""

import secrets
from pathlib import Path
from typing import Annotated

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from imagehost.config import Settings
from imagehost.errors import Unauthorized


def get_settings(request: Request) -> Settings:
    """Settings built once at startup and stored on the app."""
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_serve_dir(settings: SettingsDep) -> Path:
    return settings.serve_dir


ServeDirDep = Annotated[Path, Depends(get_serve_dir)]

# Auth
security = HTTPBearer(auto_error=False)


def key_matches(settings: Settings, provided: str | None) -> bool:
    """Constant-time comparison against the configured secret."""
    if not provided:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), settings.auth_key.encode("utf-8"))


async def require_key(
    settings: SettingsDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    key: Annotated[str | None, Query(include_in_schema=False)] = None,
) -> None:
    """Gate mutating routes behind the shared secret.

    The bearer header takes precedence over the ``key`` query parameter.
    """
    if not settings.require_auth:
        return

    provided = credentials.credentials if credentials is not None else key
    if not key_matches(settings, provided):
        raise Unauthorized()


AuthGate = Depends(require_key)
