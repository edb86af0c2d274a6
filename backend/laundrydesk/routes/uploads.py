# Overview: Serves stored bill attachments and branding assets.

from flask import Blueprint, send_file

from ..errors import NotFoundError
from ..services import blob_store


uploads_bp = Blueprint("uploads", __name__, url_prefix="/api/uploads")


@uploads_bp.get("/<any(bills, branding):kind>/<filename>")
def serve_upload_route(kind: str, filename: str):
    path = blob_store.resolve(kind, filename)
    if path is None:
        raise NotFoundError("File not found", "file")
    return send_file(path)
