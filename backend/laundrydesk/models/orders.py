from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso_date, to_utc_z, utcnow


class OrderStatus:
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    REJECTED = "Rejected"


ORDER_STATUSES = (
    OrderStatus.PENDING,
    OrderStatus.IN_PROGRESS,
    OrderStatus.COMPLETED,
    OrderStatus.REJECTED,
)


class PaymentStatus:
    UNPAID = "Unpaid"
    PAID = "Paid"


PAYMENT_STATUSES = (PaymentStatus.UNPAID, PaymentStatus.PAID)


SERVICE_TYPES = ("washing", "ironing", "dry_cleaning", "dryclean", "stain_removal")
CLOTH_TYPES = ("saari", "normal", "delicate", "others", "heavy")


class Order(db.Model):
    """
    Customer laundry order.

    ``total_amount`` is derived: it always equals the sum of the current
    service lines and is written together with them in one transaction.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_status", "status"),
        db.Index("ix_orders_order_date", "order_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(32), nullable=False, unique=True, index=True)

    customer_name = db.Column(db.String(100), nullable=False)
    contact_number = db.Column(db.String(20), nullable=False)
    customer_address = db.Column(db.Text, nullable=True)
    order_date = db.Column(db.Date, nullable=False)

    status = db.Column(db.String(20), nullable=False, default=OrderStatus.PENDING)
    total_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    payment_status = db.Column(db.String(10), nullable=False, default=PaymentStatus.UNPAID)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Populated only when status == Rejected
    rejection_reason = db.Column(db.Text, nullable=True)
    rejected_at = db.Column(db.DateTime(timezone=True), nullable=True)
    rejected_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=db.func.now()
    )

    services = db.relationship(
        "OrderService",
        back_populates="order",
        order_by="OrderService.id",
        cascade="all, delete-orphan",
    )
    creator = db.relationship("User", foreign_keys=[created_by])

    def __repr__(self) -> str:
        return f"<Order id={self.id} number={self.order_number!r} status={self.status}>"

    def to_dict(self, include_services: bool = True) -> dict:
        data = {
            "id": self.id,
            "orderNumber": self.order_number,
            "customerName": self.customer_name,
            "contactNumber": self.contact_number,
            "customerAddress": self.customer_address,
            "orderDate": to_iso_date(self.order_date),
            "status": self.status,
            "totalAmount": float(self.total_amount or 0),
            "paymentStatus": self.payment_status,
            "createdBy": self.created_by,
            "createdByUsername": self.creator.username if self.creator else None,
            "rejectionReason": self.rejection_reason,
            "rejectedAt": to_utc_z(self.rejected_at),
            "rejectedBy": self.rejected_by,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
        if include_services:
            data["services"] = [service.to_dict() for service in self.services]
        return data


class OrderService(db.Model):
    """One service line of an order; never referenced outside its order."""
    __tablename__ = "order_services"
    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_order_services_quantity"),
        db.CheckConstraint("unit_cost >= 0", name="ck_order_services_unit_cost"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(
        db.Integer, db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_type = db.Column(db.String(32), nullable=False)
    cloth_type = db.Column(db.String(32), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_cost = db.Column(db.Numeric(10, 2), nullable=False)
    total_cost = db.Column(db.Numeric(10, 2), nullable=False)

    order = db.relationship("Order", back_populates="services")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "serviceType": self.service_type,
            "clothType": self.cloth_type,
            "quantity": self.quantity,
            "unitCost": float(self.unit_cost),
            "totalCost": float(self.total_cost),
        }
