"""Flat-directory image storage.

All reads and writes stay directly inside the configured serve directory.
Uploads are copied to a hidden ``.upload-*.part`` file first and moved into
place with ``os.replace`` so a partially written file is never listed or
served.
"""

from __future__ import annotations

import logging
import os
import re
import secrets
import tempfile
import time
import urllib.parse
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

from imagehost.errors import NotFound, PayloadTooLarge, ScanError, StartupError, ValidationError
from imagehost.log_utils import format_size

logger = logging.getLogger(__name__)

ALLOWED_TYPES = {"jpeg", "jpg", "png", "gif", "svg", "webp"}
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB
MAX_FILES_PER_REQUEST = 10
CHUNK_SIZE = 1024 * 1024

CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"

TEMP_PREFIX = ".upload-"
TEMP_SUFFIX = ".part"

_SEPARATORS_RE = re.compile(r"[\\/]")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")

MAX_NAME_BYTES = 255


@dataclass
class StagedFile:
    """An upload copied into a temporary file, not yet visible."""

    temp_path: Path
    filename: str
    original_name: str
    size: int


@dataclass
class StoredFile:
    filename: str
    original_name: str
    size: int

    @property
    def url(self) -> str:
        return "/" + urllib.parse.quote(self.filename)


@dataclass
class ListingEntry:
    name: str
    size: int
    is_directory: bool
    modified: datetime

    @property
    def url(self) -> str:
        return "/" + urllib.parse.quote(self.name)


def ensure_storage_dir(serve_dir: Path) -> Path:
    """Create the serve directory if needed and sweep stale temporary uploads.

    Raises:
        StartupError: if the directory cannot be created or is not a directory.
    """
    try:
        serve_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StartupError(f"Cannot create storage directory {serve_dir}: {e}") from e
    if not serve_dir.is_dir():
        raise StartupError(f"Storage path {serve_dir} is not a directory")

    for stale in serve_dir.glob(f"{TEMP_PREFIX}*{TEMP_SUFFIX}"):
        stale.unlink(missing_ok=True)
        logger.debug(f"Removed stale upload {stale.name}")

    return serve_dir


def _client_basename(original_name: str) -> str:
    # Browsers on Windows may send the full client path.
    return _SEPARATORS_RE.split(original_name)[-1]


def file_extension(name: str) -> str:
    """Return the extension of ``name`` including the dot, case preserved."""
    return os.path.splitext(_client_basename(name))[1]


def generate_filename(original_name: str) -> str:
    """Build ``<base>-<ms timestamp>-<random><ext>`` from a client filename.

    Uniqueness is probabilistic: the name is not checked against the
    directory. Control characters are dropped and the base is shortened so
    the whole name fits in ``MAX_NAME_BYTES`` of UTF-8.
    """
    name = _CONTROL_CHARS_RE.sub("", _client_basename(original_name))
    ext = os.path.splitext(name)[1]
    base = name[: len(name) - len(ext)].lstrip(".")
    token = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9 + 1)}"

    budget = MAX_NAME_BYTES - len(f"-{token}{ext}".encode())
    if budget < 1:
        # Extension alone is oversized; it cannot be a valid image extension
        ext = ""
        budget = MAX_NAME_BYTES - len(f"-{token}".encode())
    base = base.encode()[:budget].decode("utf-8", errors="ignore") or "image"
    return f"{base}-{token}{ext}"


def _media_subtype(content_type: str | None) -> str:
    if not content_type or "/" not in content_type:
        return ""
    mime = content_type.split(";", 1)[0].strip().lower()
    subtype = mime.split("/", 1)[1]
    return subtype.split("+", 1)[0]


def is_allowed_image(filename: str, content_type: str | None) -> bool:
    ext = file_extension(filename).lower()[1:]
    return ext in ALLOWED_TYPES and _media_subtype(content_type) in ALLOWED_TYPES


def validate_image(filename: str, content_type: str | None, size: int | None = None) -> None:
    """Reject anything that is not an allowed image, or is over the size limit."""
    if not is_allowed_image(filename, content_type):
        raise ValidationError()
    if size is not None and size > MAX_FILE_SIZE:
        raise PayloadTooLarge(f"File too large. Maximum size: {format_size(MAX_FILE_SIZE)}")


def content_type_for(name: str) -> str:
    return CONTENT_TYPES.get(os.path.splitext(name)[1].lower(), DEFAULT_CONTENT_TYPE)


def is_safe_name(name: str) -> bool:
    """True if ``name`` is a single path component with no traversal."""
    if not name or name in (".", ".."):
        return False
    return "\x00" not in name and not _SEPARATORS_RE.search(name)


def resolve_stored_path(serve_dir: Path, name: str) -> Path:
    """Map a client-supplied name to a path directly inside ``serve_dir``.

    Hidden names are refused so in-flight temporary uploads stay invisible.
    """
    if not is_safe_name(name) or name.startswith("."):
        raise NotFound()
    path = serve_dir / name
    if path.parent != serve_dir:
        raise NotFound()
    return path


def stage_upload(serve_dir: Path, source: BinaryIO, original_name: str) -> StagedFile:
    """Copy ``source`` into a hidden temporary file in ``serve_dir``.

    Raises:
        PayloadTooLarge: if more than ``MAX_FILE_SIZE`` bytes are read. The
            temporary file is removed before raising.
    """
    fd, temp_name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX, dir=serve_dir)
    temp_path = Path(temp_name)
    size = 0
    try:
        with os.fdopen(fd, "wb") as out:
            while True:
                chunk = source.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > MAX_FILE_SIZE:
                    raise PayloadTooLarge(f"File too large. Maximum size: {format_size(MAX_FILE_SIZE)}")
                out.write(chunk)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise

    return StagedFile(
        temp_path=temp_path,
        filename=generate_filename(original_name),
        original_name=original_name,
        size=size,
    )


def store_files(serve_dir: Path, sources: list[tuple[BinaryIO, str]]) -> list[StoredFile]:
    """Stage every source, then move them all into place.

    All-or-nothing: on any failure every staged or already committed file
    from this call is removed and the exception propagates.
    """
    staged: list[StagedFile] = []
    committed: list[Path] = []
    try:
        for source, original_name in sources:
            staged.append(stage_upload(serve_dir, source, original_name))
        for item in staged:
            target = serve_dir / item.filename
            os.replace(item.temp_path, target)
            committed.append(target)
    except BaseException:
        for item in staged:
            item.temp_path.unlink(missing_ok=True)
        for target in committed:
            target.unlink(missing_ok=True)
        raise

    return [StoredFile(item.filename, item.original_name, item.size) for item in staged]


def scan_directory(serve_dir: Path) -> list[ListingEntry]:
    """List image entries directly inside ``serve_dir`` in enumeration order.

    Raises:
        ScanError: if the directory cannot be read.
    """
    try:
        entries = list(os.scandir(serve_dir))
    except OSError as e:
        logger.error(f"Unable to scan {serve_dir}: {e}")
        raise ScanError() from e

    listing = []
    for entry in entries:
        if entry.name.startswith("."):
            continue
        if os.path.splitext(entry.name)[1].lower()[1:] not in ALLOWED_TYPES:
            continue
        try:
            stats = entry.stat()
        except FileNotFoundError:
            # Deleted between scandir and stat
            continue
        listing.append(
            ListingEntry(
                name=entry.name,
                size=stats.st_size,
                is_directory=entry.is_dir(),
                modified=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
            )
        )
    return listing


def delete_file(serve_dir: Path, name: str) -> None:
    """Remove one stored file by exact name.

    Raises:
        NotFound: if the name is unsafe, missing, or cannot be removed.
    """
    path = resolve_stored_path(serve_dir, name)
    try:
        path.unlink()
    except OSError as e:
        raise NotFound() from e
