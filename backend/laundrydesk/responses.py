# Overview: JSON envelope helpers shared by every route and error handler.

from __future__ import annotations

from typing import Any

from flask import jsonify


def success(data: Any = None, message: str | None = None, status: int = 200):
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return jsonify(body), status


def failure(status: int, code: str, message: str, details: Any = None, stack: str | None = None):
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    if stack:
        error["stack"] = stack
    return jsonify({"success": False, "error": error}), status
