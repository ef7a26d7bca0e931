"""
Local media storage for avatars, course thumbnails and lecture videos.

Uploads land under MEDIA_ROOT/<folder>/<uuid><ext> and are served by the app
at MEDIA_URL (see `api/main.py`). A stored file is identified by its
`public_id`, the path relative to MEDIA_ROOT.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile

from . import env
from .errors import AppError

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}
VIDEO_EXTENSIONS = {".mp4", ".webm", ".mov", ".mkv"}

DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024  # 50 MiB

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


@dataclass(frozen=True)
class StoredMedia:
    public_id: str
    secure_url: str
    size_bytes: int


def media_root() -> Path:
    return Path(env.env_str("MEDIA_ROOT", "media")).resolve()


def media_url() -> str:
    return "/" + env.env_str("MEDIA_URL", "/media").strip("/")


def max_upload_bytes() -> int:
    value = env.env_int("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)
    return value if value > 0 else DEFAULT_MAX_UPLOAD_BYTES


def validate_upload(file: UploadFile, allowed_extensions: set[str]) -> str:
    """
    Return the normalized file extension if this upload is acceptable.
    """
    if not file.filename:
        raise AppError("Missing filename.", 400)

    ext = Path(file.filename).suffix.lower()
    if ext not in allowed_extensions:
        raise AppError(
            f"Unsupported file type '{ext}'. Allowed: {sorted(allowed_extensions)}",
            400,
        )
    return ext


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise AppError(
                f"File too large. Max is {max_bytes} bytes.",
                413,
            )

    return bytes(buf)


def _resolve(public_id: str) -> Path:
    root = media_root()
    path = (root / public_id).resolve()
    if root not in path.parents:
        raise StorageError(f"Media id escapes MEDIA_ROOT: {public_id}")
    return path


def _write(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


async def save_upload(file: UploadFile, *, folder: str, allowed_extensions: set[str]) -> StoredMedia:
    ext = validate_upload(file, allowed_extensions)
    data = await read_upload_bytes(file, max_bytes=max_upload_bytes())
    if not data:
        raise AppError("Uploaded file is empty.", 400)

    public_id = f"{folder.strip('/')}/{uuid.uuid4().hex}{ext}"
    try:
        await asyncio.to_thread(_write, _resolve(public_id), data)
    except OSError as exc:
        raise StorageError(f"Failed to store upload: {exc}") from exc

    logger.info("media_saved public_id=%s size_bytes=%s", public_id, len(data))
    return StoredMedia(
        public_id=public_id,
        secure_url=f"{media_url()}/{public_id}",
        size_bytes=len(data),
    )


async def delete_media(public_id: str | None) -> bool:
    if not public_id:
        return False
    path = _resolve(public_id)
    try:
        await asyncio.to_thread(path.unlink)
    except FileNotFoundError:
        return False
    logger.info("media_deleted public_id=%s", public_id)
    return True
