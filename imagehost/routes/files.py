"""Directory listing route."""

from fastapi import APIRouter

from imagehost.dependencies import ServeDirDep
from imagehost.schemas.files import ListingEntryResponse
from imagehost.storage import scan_directory

router = APIRouter()


@router.get("/list", response_model=list[ListingEntryResponse])
def list_images(serve_dir: ServeDirDep):
    """List stored images. Recomputed from the filesystem on every call."""
    return [
        ListingEntryResponse(
            name=entry.name,
            size=entry.size,
            is_directory=entry.is_directory,
            modified=entry.modified,
            url=entry.url,
        )
        for entry in scan_directory(serve_dir)
    ]
