"""
Order lifecycle tests.

Verifies:
- Totals are derived from the service lines
- Employees edit only orders that are neither Completed nor Paid
- Rejection requires a reason and a privileged role
- Bills require Completed; the PDF is always available
"""

import re

import pytest

from laundrydesk.models import Order, OrderService


ORDER_NUMBER_RE = re.compile(r"^ORD\d{13}\d{4}$")


class TestCreateOrder:

    def test_total_is_sum_of_lines(self, client, employee_headers, create_order):
        order = create_order(employee_headers)
        assert order["totalAmount"] == 95.0
        assert order["status"] == "Pending"
        assert order["paymentStatus"] == "Unpaid"
        assert [line["totalCost"] for line in order["services"]] == [50.0, 45.0]
        assert ORDER_NUMBER_RE.match(order["orderNumber"])

    def test_client_total_is_ignored(self, client, employee_headers, create_order):
        order = create_order(employee_headers, totalAmount=1)
        assert order["totalAmount"] == 95.0

    def test_records_creator(self, client, employee, employee_headers, create_order):
        order = create_order(employee_headers)
        assert order["createdBy"] == employee.id
        assert order["createdByUsername"] == employee.username

    def test_order_numbers_are_unique(self, client, employee_headers, create_order):
        numbers = {create_order(employee_headers)["orderNumber"] for _ in range(5)}
        assert len(numbers) == 5

    def test_decimal_costs_are_rounded_to_cents(self, client, employee_headers, create_order):
        order = create_order(employee_headers, services=[
            {"serviceType": "dry_cleaning", "clothType": "delicate", "quantity": 3, "unitCost": "33.333"},
        ])
        assert order["services"][0]["unitCost"] == 33.33
        assert order["totalAmount"] == 99.99

    @pytest.mark.parametrize("overrides,field", [
        ({"customerName": "A"}, "customerName"),
        ({"contactNumber": "12345"}, "contactNumber"),
        ({"contactNumber": "98765abcde"}, "contactNumber"),
        ({"orderDate": "05/03/2024"}, "orderDate"),
        ({"services": []}, "services"),
        ({"services": [{"serviceType": "folding", "clothType": "normal", "quantity": 1, "unitCost": 1}]},
         "services[0].serviceType"),
        ({"services": [{"serviceType": "washing", "clothType": "normal", "quantity": 0, "unitCost": 1}]},
         "services[0].quantity"),
        ({"services": [{"serviceType": "washing", "clothType": "normal", "quantity": 1.5, "unitCost": 1}]},
         "services[0].quantity"),
        ({"services": [{"serviceType": "washing", "clothType": "normal", "quantity": "\u00b2", "unitCost": 1}]},
         "services[0].quantity"),
        ({"services": [{"serviceType": "washing", "clothType": "normal", "quantity": 1, "unitCost": -2}]},
         "services[0].unitCost"),
    ])
    def test_validation(self, client, employee_headers, order_payload, overrides, field):
        resp = client.post("/api/orders", json=order_payload(**overrides), headers=employee_headers)
        assert resp.status_code == 400
        error = resp.get_json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"][0]["field"] == field

    def test_requires_auth(self, client, db_session, order_payload):
        assert client.post("/api/orders", json=order_payload()).status_code == 401


class TestEditRestrictions:

    def test_employee_edit_lifecycle(self, client, employee_headers, admin_headers, create_order, order_payload):
        order = create_order(employee_headers)
        order_id = order["id"]

        resp = client.put(f"/api/orders/{order_id}", json=order_payload(customerName="Asha V"),
                          headers=employee_headers)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["customerName"] == "Asha V"

        resp = client.patch(f"/api/orders/{order_id}/payment", json={"paymentStatus": "Paid"},
                            headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["paymentStatus"] == "Paid"

        resp = client.put(f"/api/orders/{order_id}", json=order_payload(customerName="Someone Else"),
                          headers=employee_headers)
        assert resp.status_code == 403
        assert resp.get_json()["error"] == {
            "code": "ORDER_EDIT_RESTRICTED",
            "message": "Cannot edit completed or paid orders",
        }

        resp = client.put(f"/api/orders/{order_id}", json=order_payload(customerName="Someone Else"),
                          headers=admin_headers)
        assert resp.status_code == 200

    def test_employee_cannot_edit_completed(self, client, employee_headers, admin_headers, create_order):
        order_id = create_order(employee_headers)["id"]
        client.patch(f"/api/orders/{order_id}/status", json={"status": "Completed"}, headers=admin_headers)

        resp = client.patch(f"/api/orders/{order_id}", json={"customerName": "Changed Name"},
                            headers=employee_headers)
        assert resp.status_code == 403
        assert resp.get_json()["error"]["code"] == "ORDER_EDIT_RESTRICTED"

        resp = client.patch(f"/api/orders/{order_id}/status", json={"status": "Pending"},
                            headers=employee_headers)
        assert resp.status_code == 403

    def test_employee_can_move_status_forward(self, client, employee_headers, create_order):
        order_id = create_order(employee_headers)["id"]
        resp = client.patch(f"/api/orders/{order_id}/status", json={"status": "In Progress"},
                            headers=employee_headers)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["status"] == "In Progress"

    def test_employee_cannot_set_payment(self, client, employee_headers, create_order):
        order_id = create_order(employee_headers)["id"]
        resp = client.patch(f"/api/orders/{order_id}/payment", json={"paymentStatus": "Paid"},
                            headers=employee_headers)
        assert resp.status_code == 403
        assert resp.get_json()["error"]["code"] == "INSUFFICIENT_PERMISSIONS"

    def test_full_update_replaces_lines(self, client, employee_headers, create_order, order_payload, db_session):
        order_id = create_order(employee_headers)["id"]
        resp = client.put(
            f"/api/orders/{order_id}",
            json=order_payload(services=[
                {"serviceType": "stain_removal", "clothType": "heavy", "quantity": 2, "unitCost": 40},
            ]),
            headers=employee_headers,
        )
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["totalAmount"] == 80.0
        assert [line["serviceType"] for line in data["services"]] == ["stain_removal"]
        assert db_session.query(OrderService).filter_by(order_id=order_id).count() == 1

    def test_patch_keeps_lines_when_omitted(self, client, employee_headers, create_order):
        order_id = create_order(employee_headers)["id"]
        resp = client.patch(f"/api/orders/{order_id}", json={"customerAddress": "New address"},
                            headers=employee_headers)
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["customerAddress"] == "New address"
        assert data["totalAmount"] == 95.0
        assert len(data["services"]) == 2

    @pytest.mark.parametrize("method,suffix,body", [
        ("put", "", None),
        ("patch", "", {"customerName": "Nobody Here"}),
        ("patch", "/status", {"status": "Completed"}),
    ])
    def test_missing_order_is_not_found(self, client, admin_headers, order_payload, method, suffix, body):
        resp = getattr(client, method)(f"/api/orders/424242{suffix}", json=body or order_payload(),
                                       headers=admin_headers)
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "ORDER_NOT_FOUND"

    def test_status_cannot_be_set_to_rejected(self, client, admin_headers, create_order):
        order_id = create_order(admin_headers)["id"]
        resp = client.patch(f"/api/orders/{order_id}/status", json={"status": "Rejected"}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"]["details"][0]["field"] == "status"

    def test_invalid_payment_status(self, client, admin_headers, create_order):
        order_id = create_order(admin_headers)["id"]
        resp = client.patch(f"/api/orders/{order_id}/payment", json={"paymentStatus": "Partial"},
                            headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"]["message"] == 'Payment status must be either "Paid" or "Unpaid"'


class TestRejectOrder:

    def test_admin_rejects_with_reason(self, client, admin, admin_headers, employee_headers, create_order):
        order_id = create_order(employee_headers)["id"]
        resp = client.post(f"/api/orders/{order_id}/reject", json={"rejectionReason": "  Customer cancelled "},
                           headers=admin_headers)
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["status"] == "Rejected"
        assert data["rejectionReason"] == "Customer cancelled"
        assert data["rejectedBy"] == admin.id
        assert data["rejectedAt"].endswith("Z")

    def test_patch_verb_also_rejects(self, client, super_admin_headers, create_order):
        order_id = create_order(super_admin_headers)["id"]
        resp = client.patch(f"/api/orders/{order_id}/reject", json={"rejectionReason": "Duplicate"},
                            headers=super_admin_headers)
        assert resp.status_code == 200

    @pytest.mark.parametrize("body", [{}, {"rejectionReason": ""}, {"rejectionReason": "   "}])
    def test_reason_required(self, client, admin_headers, create_order, body):
        order_id = create_order(admin_headers)["id"]
        resp = client.post(f"/api/orders/{order_id}/reject", json=body, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"]["message"] == "Rejection reason is required"

    def test_employee_cannot_reject(self, client, employee_headers, create_order):
        order_id = create_order(employee_headers)["id"]
        resp = client.post(f"/api/orders/{order_id}/reject", json={"rejectionReason": "No"},
                           headers=employee_headers)
        assert resp.status_code == 403
        assert resp.get_json()["error"]["code"] == "INSUFFICIENT_PERMISSIONS"

    def test_completed_orders_cannot_be_rejected(self, client, admin_headers, create_order):
        order_id = create_order(admin_headers)["id"]
        client.patch(f"/api/orders/{order_id}/status", json={"status": "Completed"}, headers=admin_headers)
        resp = client.post(f"/api/orders/{order_id}/reject", json={"rejectionReason": "Late"},
                           headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "INVALID_ORDER_STATE"

    def test_rejected_cannot_be_rejected_again(self, client, admin_headers, create_order):
        order_id = create_order(admin_headers)["id"]
        client.post(f"/api/orders/{order_id}/reject", json={"rejectionReason": "First"}, headers=admin_headers)
        resp = client.post(f"/api/orders/{order_id}/reject", json={"rejectionReason": "Second"},
                           headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "INVALID_ORDER_STATE"

    def test_reopening_clears_rejection(self, client, admin_headers, create_order):
        order_id = create_order(admin_headers)["id"]
        client.post(f"/api/orders/{order_id}/reject", json={"rejectionReason": "Oops"}, headers=admin_headers)
        resp = client.patch(f"/api/orders/{order_id}/status", json={"status": "Pending"}, headers=admin_headers)
        data = resp.get_json()["data"]
        assert data["status"] == "Pending"
        assert data["rejectionReason"] is None
        assert data["rejectedBy"] is None

    def test_missing_order(self, client, admin_headers, db_session):
        resp = client.post("/api/orders/999/reject", json={"rejectionReason": "x"}, headers=admin_headers)
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "ORDER_NOT_FOUND"


class TestBillAndPdf:

    def test_bill_requires_completed(self, client, employee_headers, create_order):
        order_id = create_order(employee_headers)["id"]
        resp = client.get(f"/api/orders/{order_id}/bill", headers=employee_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == {
            "code": "ORDER_NOT_COMPLETED",
            "message": "Bill can only be generated for completed orders",
        }

    def test_bill_for_completed_order(self, client, employee_headers, admin_headers, create_order):
        order = create_order(employee_headers)
        client.patch(f"/api/orders/{order['id']}/status", json={"status": "Completed"}, headers=admin_headers)

        resp = client.get(f"/api/orders/{order['id']}/bill", headers=employee_headers)
        assert resp.status_code == 200
        bill = resp.get_json()["data"]
        assert bill["billNumber"] == f"BILL-{order['orderNumber']}"
        assert bill["businessName"] == "Laundry Management System"
        assert bill["subtotal"] == 95.0
        assert bill["totalAmount"] == 95.0
        assert bill["services"][0]["description"] == "washing - normal"
        assert bill["paymentStatus"] == "Unpaid"

    def test_pdf_is_available_for_any_status(self, client, employee_headers, create_order):
        order_id = create_order(employee_headers)["id"]
        resp = client.get(f"/api/orders/{order_id}/pdf", headers=employee_headers)
        assert resp.status_code == 200
        assert resp.mimetype == "application/pdf"
        assert resp.data.startswith(b"%PDF")
        assert f'filename="bill-order-{order_id}.pdf"' in resp.headers["Content-Disposition"]

    def test_pdf_missing_order(self, client, employee_headers):
        resp = client.get("/api/orders/31337/pdf", headers=employee_headers)
        assert resp.status_code == 404

    def test_long_bill_repeats_column_titles(self, db_session, employee_headers, create_order, monkeypatch):
        from laundrydesk.services import pdf_service

        lines = [{"serviceType": "washing", "clothType": "normal", "quantity": 1, "unitCost": 5}] * 60
        order_id = create_order(employee_headers, services=lines)["id"]
        order = db_session.get(Order, order_id)

        header_rows = []
        real_header = pdf_service._table_header

        def recording_header(c, x, y, right):
            header_rows.append(c.getPageNumber())
            return real_header(c, x, y, right)

        monkeypatch.setattr(pdf_service, "_table_header", recording_header)
        pdf = pdf_service.render_bill(order)
        assert pdf.startswith(b"%PDF")
        assert len(header_rows) >= 2
        assert header_rows == sorted(set(header_rows))


class TestListAndDelete:

    def test_list_newest_first(self, client, employee_headers, create_order):
        first = create_order(employee_headers, customerName="First Customer")
        second = create_order(employee_headers, customerName="Second Customer")
        data = client.get("/api/orders", headers=employee_headers).get_json()["data"]
        assert [o["id"] for o in data] == [second["id"], first["id"]]

    def test_filter_by_status(self, client, admin_headers, create_order):
        pending = create_order(admin_headers)
        done = create_order(admin_headers)
        client.patch(f"/api/orders/{done['id']}/status", json={"status": "Completed"}, headers=admin_headers)

        data = client.get("/api/orders?status=Completed", headers=admin_headers).get_json()["data"]
        assert [o["id"] for o in data] == [done["id"]]
        data = client.get("/api/orders?status=Pending", headers=admin_headers).get_json()["data"]
        assert [o["id"] for o in data] == [pending["id"]]

    def test_filter_by_date_range(self, client, employee_headers, create_order):
        create_order(employee_headers, orderDate="2024-01-10")
        march = create_order(employee_headers, orderDate="2024-03-10")
        data = client.get("/api/orders?startDate=2024-03-01&endDate=2024-03-31",
                          headers=employee_headers).get_json()["data"]
        assert [o["id"] for o in data] == [march["id"]]

    def test_inverted_date_range(self, client, employee_headers):
        resp = client.get("/api/orders?startDate=2024-03-31&endDate=2024-03-01", headers=employee_headers)
        assert resp.status_code == 400

    def test_invalid_status_filter(self, client, employee_headers):
        resp = client.get("/api/orders?status=Lost", headers=employee_headers)
        assert resp.status_code == 400

    def test_get_missing(self, client, employee_headers):
        resp = client.get("/api/orders/55555", headers=employee_headers)
        assert resp.status_code == 404
        assert resp.get_json()["error"] == {"code": "ORDER_NOT_FOUND", "message": "Order not found"}

    def test_employee_cannot_delete(self, client, employee_headers, create_order):
        order_id = create_order(employee_headers)["id"]
        resp = client.delete(f"/api/orders/{order_id}", headers=employee_headers)
        assert resp.status_code == 403

    def test_admin_delete_cascades_lines(self, client, admin_headers, create_order, db_session):
        order = create_order(admin_headers)
        resp = client.delete(f"/api/orders/{order['id']}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["orderNumber"] == order["orderNumber"]

        assert db_session.get(Order, order["id"]) is None
        assert db_session.query(OrderService).filter_by(order_id=order["id"]).count() == 0
        assert client.get(f"/api/orders/{order['id']}", headers=admin_headers).status_code == 404
