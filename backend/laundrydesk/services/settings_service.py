# Overview: Service-layer operations for the business settings singleton.

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import FileStorage

from ..errors import classify_database_error
from ..extensions import db
from ..models import BusinessSettings
from . import blob_store


ASSETS = ("logo", "favicon")


def _commit(failure_message: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(failure_message)
        raise classify_database_error(exc, failure_message) from exc


def get_current() -> BusinessSettings:
    """Return the settings row, creating it with the default name if absent."""
    settings = db.session.query(BusinessSettings).order_by(BusinessSettings.id.asc()).first()
    if settings is None:
        settings = BusinessSettings(business_name=current_app.config["DEFAULT_BUSINESS_NAME"])
        db.session.add(settings)
        _commit("Failed to initialize business settings")
    return settings


def update_business_name(name: str) -> BusinessSettings:
    settings = get_current()
    settings.business_name = name
    _commit("Failed to update business name")
    current_app.logger.info("Business name updated to %r", name)
    return settings


def set_asset(asset: str, upload: FileStorage | None) -> BusinessSettings:
    """
    Store a new logo or favicon and delete the one it replaces.

    The new file is removed again if the settings row cannot be saved.
    """
    settings = get_current()
    stored = blob_store.save(blob_store.BRANDING, upload, prefix=asset)

    column = f"{asset}_path"
    previous = getattr(settings, column)
    setattr(settings, column, stored)
    try:
        _commit(f"Failed to update {asset}")
    except Exception:
        blob_store.delete(blob_store.BRANDING, stored)
        raise

    blob_store.delete(blob_store.BRANDING, previous)
    return settings


def remove_asset(asset: str) -> BusinessSettings:
    settings = get_current()
    column = f"{asset}_path"
    previous = getattr(settings, column)
    setattr(settings, column, None)
    _commit(f"Failed to remove {asset}")

    blob_store.delete(blob_store.BRANDING, previous)
    return settings
