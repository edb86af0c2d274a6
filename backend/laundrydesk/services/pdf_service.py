# Overview: PDF rendering of order bills with reportlab.

from __future__ import annotations

import io
from decimal import Decimal

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from ..models import BusinessSettings, Order
from ..time_utils import to_iso_date, utcnow


MARGIN = 48
LINE_HEIGHT = 14
BOTTOM_LIMIT = 90

# x offsets of the services table columns
COLUMNS = (("Service", 0), ("Cloth Type", 130), ("Qty", 230), ("Rate (Rs.)", 280), ("Amount (Rs.)", 380))


def _rs(value) -> str:
    return f"Rs.{Decimal(value or 0):.2f}"


def _table_header(c, x: float, y: float, right: float) -> float:
    """Draw the services column titles at ``y``; returns the y of the first row."""
    c.setFont("Helvetica-Bold", 10)
    for title, offset in COLUMNS:
        c.drawString(x + offset, y, title)
    y -= 4
    c.line(x, y, right, y)
    c.setFont("Helvetica", 10)
    return y - LINE_HEIGHT


def render_bill(order: Order, settings: BusinessSettings | None = None) -> bytes:
    """Render the bill for ``order`` and return the PDF bytes."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    width, height = A4
    x = MARGIN
    y = height - MARGIN

    business_name = settings.business_name if settings else "Laundry Management System"

    c.setTitle(f"Bill {order.order_number}")
    c.setFont("Helvetica-Bold", 18)
    c.drawString(x, y, business_name)
    y -= 26

    c.setFont("Helvetica-Bold", 13)
    c.drawString(x, y, "SERVICE INVOICE")
    y -= 22

    c.setFont("Helvetica", 10)
    c.drawString(x, y, f"Order No: {order.order_number}")
    c.drawRightString(width - MARGIN, y, f"Payment Status: {order.payment_status}")
    y -= LINE_HEIGHT
    c.drawString(x, y, f"Date: {to_iso_date(order.order_date)}")
    y -= LINE_HEIGHT
    c.drawString(x, y, f"Status: {order.status}")
    y -= LINE_HEIGHT + 8

    c.setFont("Helvetica-Bold", 11)
    c.drawString(x, y, "BILL TO:")
    y -= LINE_HEIGHT
    c.setFont("Helvetica", 10)
    c.drawString(x, y, order.customer_name or "N/A")
    y -= LINE_HEIGHT
    c.drawString(x, y, f"Phone: {order.contact_number or 'N/A'}")
    y -= LINE_HEIGHT
    if order.customer_address:
        for line in str(order.customer_address).splitlines():
            c.drawString(x, y, f"Address: {line}"[:110])
            y -= LINE_HEIGHT
    y -= 8

    c.setFont("Helvetica-Bold", 11)
    c.drawString(x, y, "SERVICES BREAKDOWN")
    y -= LINE_HEIGHT + 2

    y = _table_header(c, x, y, width - MARGIN)
    subtotal = Decimal("0")
    for line in order.services:
        amount = Decimal(line.quantity) * Decimal(line.unit_cost)
        subtotal += amount
        cells = (line.service_type, line.cloth_type, str(line.quantity), _rs(line.unit_cost), _rs(amount))
        for (_, offset), text in zip(COLUMNS, cells):
            c.drawString(x + offset, y, text)
        y -= LINE_HEIGHT

        if y < BOTTOM_LIMIT:
            c.showPage()
            y = _table_header(c, x, height - MARGIN, width - MARGIN)

    y -= 4
    c.line(x, y, width - MARGIN, y)
    y -= LINE_HEIGHT
    c.drawRightString(width - MARGIN, y, f"Subtotal: {_rs(subtotal)}")
    y -= LINE_HEIGHT + 4

    c.setFont("Helvetica-Bold", 12)
    c.drawRightString(width - MARGIN, y, f"TOTAL AMOUNT: {_rs(order.total_amount)}")
    y -= LINE_HEIGHT * 2

    c.setFont("Helvetica", 9)
    c.drawString(x, y, "Payment Terms: Cash on Delivery")
    y -= 12
    c.drawString(x, y, "Thank you for choosing our services!")

    c.setFont("Helvetica", 8)
    c.drawRightString(width - MARGIN, MARGIN - 20, f"Generated: {utcnow().strftime('%Y-%m-%d %H:%M')} UTC")

    c.showPage()
    c.save()
    return buf.getvalue()
