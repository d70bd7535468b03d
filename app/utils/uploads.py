"""Validation and encoding of uploaded photos."""

from __future__ import annotations

import base64
import re

from fastapi import UploadFile

from app.errors import BadRequestError

_ALLOWED_TYPES = re.compile(r"jpeg|jpg|png")
_CHUNK_SIZE = 1024 * 1024


def is_allowed_image(filename: str | None, content_type: str | None) -> bool:
    """Both the file extension and the MIME type must name jpeg, jpg or png."""
    if not filename or "." not in filename or not content_type:
        return False
    ext = filename.rsplit(".", 1)[-1].lower()
    return bool(_ALLOWED_TYPES.search(ext)) and bool(
        _ALLOWED_TYPES.search(content_type.lower())
    )


async def read_photo(upload: UploadFile | None, max_bytes: int) -> str:
    """Read an uploaded image and return it base64-encoded.

    Raises ``BadRequestError`` for a missing or empty file, a disallowed
    type, or a file larger than ``max_bytes``.
    """
    if upload is None:
        raise BadRequestError("No photo uploaded")

    if not is_allowed_image(upload.filename, upload.content_type):
        raise BadRequestError("Only jpeg, jpg and png files are allowed")

    data = bytearray()
    while chunk := await upload.read(_CHUNK_SIZE):
        data.extend(chunk)
        if len(data) > max_bytes:
            limit_mb = max_bytes // (1024 * 1024)
            raise BadRequestError(f"File is too large. Maximum size is {limit_mb}MB")

    if not data:
        raise BadRequestError("No photo uploaded")

    return base64.b64encode(bytes(data)).decode("ascii")
