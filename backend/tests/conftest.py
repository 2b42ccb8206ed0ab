"""
Pytest fixtures for IMS backend tests.

Provides test database setup, one user per role, catalogue/client fixtures,
and test client helpers.
"""

import pytest
from ims import create_app
from ims.config import TestConfig
from ims.extensions import db
from ims.models import Client, Item, Shade
from ims.permissions import ADMIN, MANAGER, CLERK, SALES
from ims.services import auth_service, order_service
from ims.services.notification_service import broker


PASSWORDS = {
    "admin": "admin123",
    "manager": "manager123",
    "clerk": "clerk123",
    "sales": "sales123",
    "sales2": "sales456",
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

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


@pytest.fixture(autouse=True)
def reset_broker():
    broker.reset()
    yield
    broker.reset()


def _make_user(username: str, full_name: str, role: str):
    return auth_service.create_user({
        "username": username,
        "full_name": full_name,
        "role": role,
        "password": PASSWORDS[username],
    })


@pytest.fixture(scope='function')
def admin(db_session):
    return _make_user("admin", "Ada Admin", ADMIN)


@pytest.fixture(scope='function')
def manager(db_session):
    return _make_user("manager", "Mona Manager", MANAGER)


@pytest.fixture(scope='function')
def clerk(db_session):
    return _make_user("clerk", "Cal Clerk", CLERK)


@pytest.fixture(scope='function')
def sales(db_session):
    return _make_user("sales", "Sam Sales", SALES)


@pytest.fixture(scope='function')
def sales2(db_session):
    return _make_user("sales2", "Sid Sales", SALES)


@pytest.fixture(scope='function')
def client_c(db_session):
    """Customer C."""
    c = Client(name="Client C", address="1 Main St", phone="555-0100", email="c@example.com")
    db_session.add(c)
    db_session.commit()
    return c


@pytest.fixture(scope='function')
def item_i(db_session):
    """Item I with two shades."""
    item = Item(name="Item I", description="Cotton thread", track_inventory=True)
    item.shades.append(Shade(shade_number="101", shade_name="Red", stock_count=10))
    item.shades.append(Shade(shade_number="102", shade_name="Blue", stock_count=4))
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture(scope='function')
def shade_s(item_i):
    return next(s for s in item_i.shades if s.shade_number == "101")


@pytest.fixture(scope='function')
def make_order(client_c, item_i, shade_s):
    """Create an order through the service; defaults to one line of 3 x 10.00."""
    def _make(actor, lines=None, client=None):
        if lines is None:
            lines = [{"item_id": item_i.id, "shade_id": shade_s.id, "quantity": 3, "rate": "10.00"}]
        return order_service.create_order(actor, (client or client_c).id, lines)
    return _make


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def headers_for(client, user) -> dict:
    """Log user in (fixture password) and return Authorization headers."""
    token = get_auth_token(client, user.username, PASSWORDS[user.username])
    assert token, f"login failed for {user.username}"
    return auth_headers(token)


@pytest.fixture
def admin_headers(client, admin):
    return headers_for(client, admin)


@pytest.fixture
def manager_headers(client, manager):
    return headers_for(client, manager)


@pytest.fixture
def clerk_headers(client, clerk):
    return headers_for(client, clerk)


@pytest.fixture
def sales_headers(client, sales):
    return headers_for(client, sales)


@pytest.fixture
def sales2_headers(client, sales2):
    return headers_for(client, sales2)
