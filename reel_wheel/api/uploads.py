"""File upload operations (product images, memorabilia photos)."""

from __future__ import annotations

import mimetypes
from pathlib import Path

from loguru import logger

from ..models.catalog import FileUpload
from .client import ReelWheelClient

UPLOADS_PATH = "/v1/uploads/"


async def upload_file(
    client: ReelWheelClient,
    source: Path | str | bytes,
    filename: str | None = None,
    content_type: str | None = None,
) -> FileUpload:
    """Upload a file as the multipart field ``file``.

    *source* is a path on disk or the raw bytes; *filename* is required
    for raw bytes.  Errors propagate.
    """
    if isinstance(source, bytes):
        if not filename:
            raise ValueError("filename is required when uploading raw bytes")
        content = source
    else:
        path = Path(source)
        content = path.read_bytes()
        filename = filename or path.name

    content_type = (
        content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
    )
    logger.debug(f"Uploading {filename} ({len(content)} bytes, {content_type})")
    raw = await client.post(UPLOADS_PATH, files={"file": (filename, content, content_type)})
    return FileUpload.model_validate(raw)


async def delete_file(client: ReelWheelClient, url: str) -> None:
    """Delete a previously uploaded file by its public URL."""
    await client.delete(UPLOADS_PATH, params={"url": url})
