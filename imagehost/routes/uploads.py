"""Upload and delete routes, gated by the shared secret."""

import logging
import time
from typing import Annotated

from fastapi import APIRouter, File, UploadFile
from starlette.concurrency import run_in_threadpool

from imagehost.dependencies import AuthGate, ServeDirDep
from imagehost.errors import NoFileProvided, NoFilesProvided, TooManyFiles
from imagehost.log_utils import log_batch_stored, log_file_deleted, log_file_stored
from imagehost.schemas.files import (
    DeleteResponse,
    StoredFileResponse,
    UploadMultipleResponse,
    UploadResponse,
)
from imagehost.storage import MAX_FILES_PER_REQUEST, StoredFile, delete_file, store_files, validate_image

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[AuthGate])


def _to_response(stored: StoredFile, model: type[StoredFileResponse] = StoredFileResponse):
    return model(
        filename=stored.filename,
        original_name=stored.original_name,
        size=stored.size,
        url=stored.url,
    )


async def _store(serve_dir, uploads: list[UploadFile]) -> list[StoredFile]:
    """Validate every upload, then write them all in the threadpool."""
    for upload in uploads:
        validate_image(upload.filename, upload.content_type, upload.size)

    try:
        for upload in uploads:
            await upload.seek(0)
        stored = await run_in_threadpool(
            store_files, serve_dir, [(upload.file, upload.filename) for upload in uploads]
        )
    finally:
        for upload in uploads:
            await upload.close()

    for item in stored:
        log_file_stored(logger, item.filename, item.original_name, item.size)
    return stored


@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    serve_dir: ServeDirDep,
    image: Annotated[UploadFile | None, File()] = None,
):
    """Store one image sent as multipart field ``image``."""
    if image is None or not image.filename:
        raise NoFileProvided()

    (stored,) = await _store(serve_dir, [image])
    return _to_response(stored, UploadResponse)


@router.post("/upload-multiple", response_model=UploadMultipleResponse)
async def upload_images(
    serve_dir: ServeDirDep,
    images: Annotated[list[UploadFile] | None, File()] = None,
):
    """Store up to ``MAX_FILES_PER_REQUEST`` images sent as multipart field ``images``.

    The batch is all-or-nothing: one rejected file fails the request and
    nothing from it is left in storage.
    """
    uploads = [upload for upload in images or [] if upload.filename]
    if not uploads:
        raise NoFilesProvided()
    if len(uploads) > MAX_FILES_PER_REQUEST:
        raise TooManyFiles(f"Too many files. Maximum: {MAX_FILES_PER_REQUEST}")

    start_time = time.time()
    stored = await _store(serve_dir, uploads)
    log_batch_stored(
        logger,
        len(stored),
        sum(item.size for item in stored),
        int((time.time() - start_time) * 1000),
    )
    return UploadMultipleResponse(files=[_to_response(item) for item in stored])


@router.delete("/delete/{filename}", response_model=DeleteResponse)
def delete_image(filename: str, serve_dir: ServeDirDep):
    """Delete one stored image by its exact generated name."""
    delete_file(serve_dir, filename)
    log_file_deleted(logger, filename)
    return DeleteResponse()
