"""Upload page and static file serving from the storage directory."""

from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from imagehost.dependencies import ServeDirDep
from imagehost.errors import NotFound
from imagehost.storage import content_type_for, resolve_stored_path

router = APIRouter()

INDEX_PAGE = Path(__file__).resolve().parent.parent / "static" / "index.html"


def _not_found() -> PlainTextResponse:
    # Plain body, as a conventional static server would send
    return PlainTextResponse("Not Found", status_code=404)


@router.get("/", include_in_schema=False)
async def upload_page():
    """Serve the bundled upload page."""
    return FileResponse(INDEX_PAGE, media_type="text/html")


@router.api_route("/{filename}", methods=["GET", "HEAD"], include_in_schema=False)
async def serve_file(filename: str, serve_dir: ServeDirDep):
    """Serve a stored file with a content type taken from its extension."""
    try:
        path = resolve_stored_path(serve_dir, filename)
    except NotFound:
        return _not_found()

    if not await run_in_threadpool(path.is_file):
        return _not_found()

    return FileResponse(path, media_type=content_type_for(filename))
