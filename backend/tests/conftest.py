"""
Pytest fixtures for laundry back office tests.

Provides the application on an in-memory database, a per-test table wipe,
users for each role and ready-made Basic auth headers.
"""

import base64

import pytest

from laundrydesk import create_app
from laundrydesk.extensions import db
from laundrydesk.models import User
from laundrydesk.permissions import Role
from laundrydesk.services.auth_service import hash_password


DEFAULT_PASSWORD = "Password123"


def basic_auth(username: str, password: str = DEFAULT_PASSWORD) -> dict:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'UPLOAD_FOLDER': str(tmp_path_factory.mktemp("uploads")),
        'BCRYPT_ROUNDS': 10,
        'EXPOSE_ERROR_DETAILS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def make_user(db_session):
    """Factory: create a user with a role and the default password."""
    def _make(username: str, role: str = Role.EMPLOYEE, password: str = DEFAULT_PASSWORD) -> User:
        user = User(username=username, password_hash=hash_password(password), role=role)
        db_session.add(user)
        db_session.commit()
        return user
    return _make


@pytest.fixture(scope='function')
def employee(make_user):
    return make_user("employee1", Role.EMPLOYEE)


@pytest.fixture(scope='function')
def admin(make_user):
    return make_user("admin1", Role.ADMIN)


@pytest.fixture(scope='function')
def super_admin(make_user):
    return make_user("superadmin1", Role.SUPER_ADMIN)


@pytest.fixture
def auth_headers():
    """Factory: Basic auth header for arbitrary credentials."""
    return basic_auth


@pytest.fixture(scope='function')
def employee_headers(employee):
    return basic_auth(employee.username)


@pytest.fixture(scope='function')
def admin_headers(admin):
    return basic_auth(admin.username)


@pytest.fixture(scope='function')
def super_admin_headers(super_admin):
    return basic_auth(super_admin.username)


@pytest.fixture
def order_payload():
    """Factory for a valid order body (the 5 x 10 + 3 x 15 = 95.00 example)."""
    def _payload(**overrides) -> dict:
        payload = {
            "customerName": "Asha Verma",
            "contactNumber": "9876543210",
            "customerAddress": "12 Lake Road",
            "orderDate": "2024-03-05",
            "services": [
                {"serviceType": "washing", "clothType": "normal", "quantity": 5, "unitCost": 10},
                {"serviceType": "ironing", "clothType": "saari", "quantity": 3, "unitCost": 15},
            ],
        }
        payload.update(overrides)
        return payload
    return _payload


@pytest.fixture
def create_order(client, order_payload):
    """Factory: create an order through the API and return its JSON data."""
    def _create(headers: dict, **overrides) -> dict:
        resp = client.post("/api/orders", json=order_payload(**overrides), headers=headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]
    return _create


@pytest.fixture
def create_expense(client):
    """Factory: create an expense through the API and return its JSON data."""
    def _create(headers: dict, **overrides) -> dict:
        payload = {"expenseType": "Detergent", "amount": 250.5, "expenseDate": "2024-03-05"}
        payload.update(overrides)
        resp = client.post("/api/expenses", json=payload, headers=headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]
    return _create
