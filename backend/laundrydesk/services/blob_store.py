# Overview: Local filesystem storage for bill attachments and branding assets.

"""
Blob store.

Files live under ``UPLOAD_FOLDER/<kind>/`` with a generated name; the stored
reference is the bare filename for bills and ``branding/<filename>`` for
branding assets, which is what the uploads route serves.
"""

from __future__ import annotations

import os
import secrets
import time
from pathlib import Path

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..errors import FileUploadError


BILLS = "bills"
BRANDING = "branding"

ALLOWED_EXTENSIONS = {
    BILLS: {".jpeg", ".jpg", ".png", ".pdf"},
    BRANDING: {".png", ".jpg", ".jpeg", ".svg", ".ico", ".gif", ".webp"},
}

ALLOWED_MIMETYPES = {
    BILLS: {"image/jpeg", "image/jpg", "image/png", "application/pdf"},
    BRANDING: {
        "image/png", "image/jpeg", "image/jpg", "image/svg+xml",
        "image/x-icon", "image/vnd.microsoft.icon", "image/gif", "image/webp",
    },
}

TYPE_HINTS = {
    BILLS: "Only JPEG, PNG images and PDF files are allowed.",
    BRANDING: "Only PNG, JPG, SVG, ICO, GIF and WEBP images are allowed.",
}


def _root() -> Path:
    return Path(current_app.config["UPLOAD_FOLDER"])


def folder(kind: str) -> Path:
    if kind not in ALLOWED_EXTENSIONS:
        raise FileUploadError(f"Unknown upload kind: {kind}")
    path = _root() / kind
    path.mkdir(parents=True, exist_ok=True)
    return path


def _check(kind: str, upload: FileStorage) -> str:
    if upload is None or not upload.filename:
        raise FileUploadError("No file uploaded")

    original = secure_filename(upload.filename)
    ext = Path(original).suffix.lower()
    if not original or ext not in ALLOWED_EXTENSIONS[kind]:
        raise FileUploadError(f"Invalid file type. {TYPE_HINTS[kind]}")

    mimetype = (upload.mimetype or "").lower()
    if mimetype and mimetype != "application/octet-stream" and mimetype not in ALLOWED_MIMETYPES[kind]:
        raise FileUploadError(f"Invalid file type. {TYPE_HINTS[kind]}")
    return ext


def save(kind: str, upload: FileStorage, *, prefix: str) -> str:
    """
    Store ``upload`` and return its reference.

    Raises FileUploadError for a missing file or a disallowed type.
    """
    ext = _check(kind, upload)
    filename = f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(6)}{ext}"
    upload.save(os.fspath(folder(kind) / filename))

    current_app.logger.info("Stored %s upload %s", kind, filename)
    if kind == BILLS:
        return filename
    return f"{kind}/{filename}"


def resolve(kind: str, filename: str) -> Path | None:
    """Absolute path of a stored file, or None if it does not exist."""
    safe = secure_filename(filename)
    if not safe or safe != filename:
        return None
    path = folder(kind) / safe
    return path if path.is_file() else None


def _split_reference(kind: str, reference: str) -> str:
    # Branding references carry their folder; bill references do not
    head, _, tail = reference.partition("/")
    return tail if tail and head == kind else reference


def delete(kind: str, reference: str | None) -> bool:
    """
    Remove a stored file, best effort.

    Failures are logged and reported as False, never raised.
    """
    if not reference:
        return False
    try:
        path = resolve(kind, _split_reference(kind, reference))
        if path is None:
            return False
        path.unlink()
        return True
    except OSError:
        current_app.logger.warning("Failed to delete %s file %s", kind, reference, exc_info=True)
        return False
