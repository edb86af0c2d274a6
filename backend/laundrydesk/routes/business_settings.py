# Overview: Flask API routes for business branding settings.

from flask import Blueprint, request

from ..decorators import require_auth, require_permission
from ..responses import success
from ..services import settings_service
from ..validation import validate_business_name


business_settings_bp = Blueprint("business_settings", __name__, url_prefix="/api/business-settings")

ASSET_FIELDS = {"logo": "logo", "favicon": "favicon"}


@business_settings_bp.get("/public")
def public_settings_route():
    """Branding for unauthenticated pages (login screen, favicon)."""
    return success(settings_service.get_current().to_public_dict())


@business_settings_bp.get("")
@require_auth
@require_permission("business_settings:read")
def get_settings_route():
    return success(settings_service.get_current().to_dict())


@business_settings_bp.put("")
@business_settings_bp.put("/business-name")
@require_auth
@require_permission("business_settings:update")
def update_business_name_route():
    name = validate_business_name(request.get_json(silent=True))
    settings = settings_service.update_business_name(name)
    return success(settings.to_dict(), "Business name updated successfully")


@business_settings_bp.post("/<any(logo, favicon):asset>")
@require_auth
@require_permission("business_settings:update")
def upload_asset_route(asset: str):
    settings = settings_service.set_asset(asset, request.files.get(ASSET_FIELDS[asset]))
    return success(settings.to_dict(), f"{asset.capitalize()} uploaded successfully")


@business_settings_bp.delete("/<any(logo, favicon):asset>")
@require_auth
@require_permission("business_settings:update")
def delete_asset_route(asset: str):
    settings = settings_service.remove_asset(asset)
    return success(settings.to_dict(), f"{asset.capitalize()} removed successfully")
