"""
Encode uploaded documents as base64 data URLs.

Uploads never touch disk; the matter record keeps the data URL itself.
"""

from __future__ import annotations

import base64
import mimetypes
import re
from typing import Any

from soloscale.utils.config import max_upload_mb

ALLOWED_UPLOAD_TYPES = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+\-/]+);base64,(?P<payload>[A-Za-z0-9+/=]*)$")


class UploadTooLargeError(ValueError):
    """Raised when an upload exceeds MAX_UPLOAD_MB."""


class UnsupportedUploadError(ValueError):
    """Raised when an upload is not one of ALLOWED_UPLOAD_TYPES."""


def _extension(filename: str | None) -> str:
    name = filename or ""
    return name.rsplit(".", 1)[-1].lower() if "." in name else ""


def guess_mime(filename: str, declared: str | None = None) -> str:
    """Prefer the extension's type for allowed uploads, then the browser's, then octet-stream."""
    ext = _extension(filename)
    if ext in ALLOWED_UPLOAD_TYPES:
        return ALLOWED_UPLOAD_TYPES[ext]
    if declared:
        return declared
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or "application/octet-stream"


def to_data_url(data: bytes, mime: str) -> str:
    """Return `data:<mime>;base64,<payload>`."""
    payload = base64.b64encode(data or b"").decode("ascii")
    return f"data:{mime};base64,{payload}"


def parse_data_url(url: str) -> tuple[str, bytes]:
    """
    Split a base64 data URL into (mime, bytes).

    Raises:
        ValueError: If the string is not a base64 data URL.
    """
    m = _DATA_URL_RE.match((url or "").strip())
    if not m:
        raise ValueError("Not a base64 data URL")
    return m.group("mime"), base64.b64decode(m.group("payload"))


def encode_upload(filename: str, data: bytes, declared_mime: str | None = None, limit_mb: int | None = None) -> dict[str, Any]:
    """
    Build the file entry stored on a matter.

    Returns:
        Dict with name, mime, size (bytes) and data_url.

    Raises:
        UnsupportedUploadError: If the extension is not pdf or docx.
        UploadTooLargeError: If data is larger than the configured cap.
    """
    if _extension(filename) not in ALLOWED_UPLOAD_TYPES:
        allowed = ", ".join(ext.upper() for ext in ALLOWED_UPLOAD_TYPES)
        raise UnsupportedUploadError(f"{filename} is not a supported file type ({allowed} only).")
    limit_mb = max_upload_mb() if limit_mb is None else limit_mb
    size = len(data or b"")
    if size > limit_mb * 1024 * 1024:
        raise UploadTooLargeError(f"{filename} is {size / (1024 * 1024):.1f} MB; the limit is {limit_mb} MB.")
    mime = guess_mime(filename, declared_mime)
    return {
        "name": filename,
        "mime": mime,
        "size": size,
        "data_url": to_data_url(data, mime),
    }

