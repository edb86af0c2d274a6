from __future__ import annotations

from ..extensions import db


class DocumentSequence(db.Model):
    """Per-document-type counter used for order and expense identifiers."""
    __tablename__ = "document_sequences"

    document_type = db.Column(db.String(32), primary_key=True)
    next_number = db.Column(db.Integer, nullable=False, default=1)
