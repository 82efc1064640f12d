"""Image upload storage.

Files land in ``UPLOAD_DIR/<subdir>/`` under a generated name
``<epoch-ms>-<random><ext>`` and are served back from ``/uploads``.
Only ``image/*`` content types are accepted and size is capped at
``MAX_UPLOAD_BYTES``.
"""

import logging
import os
import random
import time
from dataclasses import dataclass

from fastapi import HTTPException, UploadFile

from config import MAX_UPLOAD_BYTES, UPLOAD_DIR

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
UPLOAD_URL_PREFIX = "/uploads"


class UploadRejected(ValueError):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class StoredUpload:
    filename: str
    original_name: str
    content_type: str
    size: int
    path: str
    url: str


def generate_filename(original_name: str | None, now: float | None = None) -> str:
    ext = os.path.splitext(original_name or "")[1].lower()
    stamp = int((time.time() if now is None else now) * 1000)
    return f"{stamp}-{random.randint(0, 999_999_999)}{ext}"


def check_content_type(content_type: str | None) -> None:
    if not (content_type or "").lower().startswith("image/"):
        raise UploadRejected("Only image files are allowed!")


async def save_image_upload(
    file: UploadFile,
    subdir: str = "",
    upload_dir: str | None = None,
    max_bytes: int | None = None,
) -> StoredUpload:
    check_content_type(file.content_type)
    limit = MAX_UPLOAD_BYTES if max_bytes is None else max_bytes
    target_dir = os.path.join(upload_dir or UPLOAD_DIR, subdir) if subdir else (upload_dir or UPLOAD_DIR)
    os.makedirs(target_dir, exist_ok=True)

    filename = generate_filename(file.filename)
    path = os.path.join(target_dir, filename)
    size = 0
    complete = False
    try:
        with open(path, "wb") as out:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > limit:
                    raise UploadRejected("File too large", status_code=413)
                out.write(chunk)
        complete = True
    finally:
        # No partial files, whether rejected, failed or cancelled.
        if not complete and os.path.exists(path):
            os.remove(path)

    url_path = f"{subdir}/{filename}" if subdir else filename
    logger.info("Stored upload %s (%s bytes)", url_path, size)
    return StoredUpload(
        filename=filename,
        original_name=file.filename or "",
        content_type=file.content_type or "",
        size=size,
        path=path,
        url=f"{UPLOAD_URL_PREFIX}/{url_path}",
    )


async def store_image_or_400(file: UploadFile, subdir: str) -> StoredUpload:
    try:
        return await save_image_upload(file, subdir)
    except UploadRejected as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc))


def remove_upload(url: str | None, upload_dir: str | None = None) -> None:
    if not url or not url.startswith(f"{UPLOAD_URL_PREFIX}/"):
        return
    rel = url[len(UPLOAD_URL_PREFIX) + 1:]
    path = os.path.join(upload_dir or UPLOAD_DIR, rel)
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
