"""
Error envelope and database error classification tests.
"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from laundrydesk.errors import (
    ApiError,
    DatabaseError,
    NotFoundError,
    classify_database_error,
    is_unique_violation,
)


class _DriverError(Exception):
    def __init__(self, text, pgcode=None):
        super().__init__(text)
        self.pgcode = pgcode


def _integrity(text, pgcode=None):
    return IntegrityError("stmt", {}, _DriverError(text, pgcode))


class TestEnvelope:

    def test_unknown_route(self, client, db_session):
        resp = client.get("/api/nowhere")
        assert resp.status_code == 404
        assert resp.get_json() == {
            "success": False,
            "error": {"code": "ROUTE_NOT_FOUND", "message": "Route GET /api/nowhere not found"},
        }

    def test_method_not_allowed(self, client, db_session):
        resp = client.delete("/api/auth/status")
        assert resp.status_code == 405
        assert resp.get_json()["error"]["code"] == "METHOD_NOT_ALLOWED"

    def test_health(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        assert body["data"]["checks"]["database"]["status"] == "healthy"

    def test_malformed_json_body(self, client, employee_headers):
        resp = client.post("/api/orders", data="{not json", content_type="application/json",
                           headers=employee_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "VALIDATION_ERROR"

    def test_cors_headers_for_known_origin(self, client, db_session):
        resp = client.get("/api/health", headers={"Origin": "http://localhost:3000"})
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
        assert resp.headers["Access-Control-Allow-Credentials"] == "true"

    def test_no_cors_headers_for_unknown_origin(self, client, db_session):
        resp = client.get("/api/health", headers={"Origin": "http://evil.example"})
        assert "Access-Control-Allow-Origin" not in resp.headers


class TestErrorTypes:

    def test_not_found_code_from_resource(self):
        assert NotFoundError("Order not found", "order").code == "ORDER_NOT_FOUND"
        assert NotFoundError("Nothing").code == "NOT_FOUND"

    def test_code_override(self):
        err = ApiError("Boom", code="CUSTOM")
        assert err.code == "CUSTOM"
        assert err.status_code == 500


class TestClassifyDatabaseError:

    @pytest.mark.parametrize("text,message", [
        ("UNIQUE constraint failed: users.username", "Duplicate entry found"),
        ("FOREIGN KEY constraint failed", "Referenced record not found"),
        ("NOT NULL constraint failed: orders.customer_name", "Required field is missing"),
        ("CHECK constraint failed: ck_expenses_amount", "Invalid data format"),
    ])
    def test_sqlite_messages(self, text, message):
        err = classify_database_error(_integrity(text))
        assert isinstance(err, DatabaseError)
        assert err.message == message
        assert err.status_code == 500

    @pytest.mark.parametrize("pgcode,message", [
        ("23505", "Duplicate entry found"),
        ("23503", "Referenced record not found"),
        ("23502", "Required field is missing"),
        ("23514", "Invalid data format"),
    ])
    def test_postgres_sqlstate(self, pgcode, message):
        assert classify_database_error(_integrity("whatever", pgcode)).message == message

    def test_connection_failure(self):
        exc = OperationalError("stmt", {}, Exception("could not connect to server: Connection refused"))
        assert classify_database_error(exc).message == "Database connection failed"

    def test_unknown_keeps_fallback(self):
        exc = OperationalError("stmt", {}, Exception("something odd"))
        err = classify_database_error(exc, "Failed to update order")
        assert err.message == "Failed to update order"
        assert err.original_error is exc

    def test_is_unique_violation(self):
        assert is_unique_violation(_integrity("UNIQUE constraint failed: orders.order_number"))
        assert not is_unique_violation(_integrity("CHECK constraint failed"))
