from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class BusinessSettings(db.Model):
    """Singleton branding row; created lazily on first read."""
    __tablename__ = "business_settings"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    business_name = db.Column(db.String(255), nullable=False)
    logo_path = db.Column(db.String(255), nullable=True)
    favicon_path = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=db.func.now()
    )

    @property
    def logo_url(self) -> str | None:
        return f"/api/uploads/{self.logo_path}" if self.logo_path else None

    @property
    def favicon_url(self) -> str | None:
        return f"/api/uploads/{self.favicon_path}" if self.favicon_path else None

    def to_public_dict(self) -> dict:
        return {
            "businessName": self.business_name,
            "logoUrl": self.logo_url,
            "faviconUrl": self.favicon_url,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "businessName": self.business_name,
            "logoPath": self.logo_path,
            "faviconPath": self.favicon_path,
            "logoUrl": self.logo_url,
            "faviconUrl": self.favicon_url,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
