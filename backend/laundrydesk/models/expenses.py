from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso_date, to_utc_z, utcnow


class Expense(db.Model):
    """Business expense. No lifecycle; edits are restricted by role only."""
    __tablename__ = "expenses"
    __table_args__ = (
        db.CheckConstraint("amount >= 0", name="ck_expenses_amount"),
        db.Index("ix_expenses_expense_date", "expense_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    expense_id = db.Column(db.String(32), nullable=False, unique=True, index=True)
    expense_type = db.Column(db.String(100), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    expense_date = db.Column(db.Date, nullable=False)

    # Stored blob reference (filename inside the bills folder)
    bill_attachment = db.Column(db.String(255), nullable=True)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    creator = db.relationship("User", foreign_keys=[created_by])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "expenseId": self.expense_id,
            "expenseType": self.expense_type,
            "amount": float(self.amount),
            "expenseDate": to_iso_date(self.expense_date),
            "billAttachment": self.bill_attachment,
            "billAttachmentUrl": f"/api/uploads/bills/{self.bill_attachment}" if self.bill_attachment else None,
            "createdBy": self.created_by,
            "createdByUsername": self.creator.username if self.creator else None,
            "createdAt": to_utc_z(self.created_at),
        }
