"""
User management API tests (Admin only).
"""

import pytest

from ims.extensions import db
from ims.models import User
from ims.permissions import CLERK, MANAGER, SALES
from ims.services import fulfillment_service
from ims.services.notification_service import broker

from conftest import auth_headers, get_auth_token


def test_list_users_hides_credentials(client, admin_headers, sales):
    resp = client.get("/api/users", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json["count"] == 2
    for user in resp.json["items"]:
        assert "password_hash" not in user
        assert "password" not in user


def test_roles_endpoint(client, admin_headers):
    resp = client.get("/api/users/roles", headers=admin_headers)
    assert [r["code"] for r in resp.json["items"]] == ["Admin", "MANG", "CLK", "FSSALE"]


def test_create_user(client, admin_headers):
    resp = client.post(
        "/api/users",
        json={"username": "Clerk2", "full_name": "Second Clerk", "password": "clerk999", "role": CLERK},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    assert resp.json["username"] == "Clerk2"
    assert get_auth_token(client, "clerk2", "clerk999")


def test_create_duplicate_username(client, admin_headers, sales):
    resp = client.post(
        "/api/users",
        json={"username": "SALES", "full_name": "Dup", "password": "dup12345", "role": SALES},
        headers=admin_headers,
    )
    assert resp.status_code == 409
    assert resp.json["error"] == "Username already exists"


def test_create_validation_names_field(client, admin_headers):
    resp = client.post(
        "/api/users",
        json={"username": "newbie", "full_name": "New", "password": "123", "role": SALES},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.json["field"] == "password"


def test_update_without_password_keeps_it(client, admin_headers, sales):
    resp = client.patch(
        f"/api/users/{sales.id}",
        json={"full_name": "Samantha Sales", "password": ""},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json["full_name"] == "Samantha Sales"
    assert get_auth_token(client, "sales", "sales123")


def test_update_password(client, admin_headers, sales):
    resp = client.patch(f"/api/users/{sales.id}", json={"password": "newpass1"}, headers=admin_headers)
    assert resp.status_code == 200
    assert get_auth_token(client, "sales", "sales123") is None
    assert get_auth_token(client, "sales", "newpass1")


def test_rename_to_taken_username(client, admin_headers, sales, clerk):
    resp = client.patch(f"/api/users/{clerk.id}", json={"username": "Sales"}, headers=admin_headers)
    assert resp.status_code == 409


def test_rename_keeps_own_username_case_change(client, admin_headers, sales):
    resp = client.patch(f"/api/users/{sales.id}", json={"username": "Sales"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json["username"] == "Sales"


def test_role_change_out_of_notifications_revokes_feed(client, admin_headers, clerk):
    subscription = broker.subscribe(clerk)
    assert broker.subscriber_count(clerk.id) == 1

    resp = client.patch(f"/api/users/{clerk.id}", json={"role": SALES}, headers=admin_headers)
    assert resp.status_code == 200
    assert subscription.closed
    assert broker.subscriber_count(clerk.id) == 0


def test_role_change_between_eligible_roles_keeps_feed(client, admin_headers, clerk):
    subscription = broker.subscribe(clerk)
    client.patch(f"/api/users/{clerk.id}", json={"role": MANAGER}, headers=admin_headers)
    assert not subscription.closed


def test_delete_user_ends_sessions(client, admin_headers, clerk):
    token = get_auth_token(client, "clerk", "clerk123")
    resp = client.delete(f"/api/users/{clerk.id}", headers=admin_headers)
    assert resp.status_code == 200
    assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 401
    assert db.session.query(User).filter_by(username="clerk").first() is None


def test_cannot_delete_self(client, admin, admin_headers):
    resp = client.delete(f"/api/users/{admin.id}", headers=admin_headers)
    assert resp.status_code == 409


def test_cannot_delete_user_with_orders(client, admin_headers, make_order, sales):
    make_order(sales)
    resp = client.delete(f"/api/users/{sales.id}", headers=admin_headers)
    assert resp.status_code == 409


def test_cannot_delete_fulfiller(client, admin_headers, make_order, manager, clerk):
    order = make_order(manager)
    fulfillment_service.toggle_fulfillment(order.id, order.lines[0].id, clerk)
    resp = client.delete(f"/api/users/{clerk.id}", headers=admin_headers)
    assert resp.status_code == 409


def test_get_unknown_user(client, admin_headers):
    assert client.get("/api/users/nope", headers=admin_headers).status_code == 404


@pytest.mark.parametrize("headers_fixture", ["manager_headers", "clerk_headers", "sales_headers"])
def test_non_admin_forbidden(request, client, headers_fixture):
    headers = request.getfixturevalue(headers_fixture)
    assert client.get("/api/users", headers=headers).status_code == 403
    resp = client.post(
        "/api/users",
        json={"username": "sneaky", "full_name": "S", "password": "secret1", "role": "Admin"},
        headers=headers,
    )
    assert resp.status_code == 403
    assert db.session.query(User).filter_by(username="sneaky").first() is None
