"""
Client and catalogue API tests.

Any signed-in role may read; only Admin may write.
"""

import pytest

from ims.extensions import db
from ims.models import Client, Item, Shade


class TestClients:
    def test_create_and_list(self, client, admin_headers, sales_headers):
        resp = client.post(
            "/api/clients",
            json={"name": "  Acme Textiles ", "phone": "555-0199"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.json["name"] == "Acme Textiles"
        assert resp.json["email"] == ""

        listed = client.get("/api/clients", headers=sales_headers)
        assert listed.status_code == 200
        assert [c["name"] for c in listed.json["items"]] == ["Acme Textiles"]

    @pytest.mark.parametrize("body", [{}, {"name": ""}, {"name": "   "}])
    def test_name_required(self, client, admin_headers, body):
        resp = client.post("/api/clients", json=body, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json["field"] == "name"

    def test_rejects_unknown_field(self, client, admin_headers):
        resp = client.post("/api/clients", json={"name": "X", "id": "forced"}, headers=admin_headers)
        assert resp.status_code == 400

    def test_update(self, client, admin_headers, client_c):
        resp = client.patch(f"/api/clients/{client_c.id}", json={"address": "2 High St"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["address"] == "2 High St"
        assert resp.json["name"] == "Client C"

    def test_delete_unused(self, client, admin_headers, client_c):
        assert client.delete(f"/api/clients/{client_c.id}", headers=admin_headers).status_code == 200
        assert db.session.query(Client).count() == 0

    def test_delete_with_orders(self, client, admin_headers, make_order, sales, client_c):
        make_order(sales)
        resp = client.delete(f"/api/clients/{client_c.id}", headers=admin_headers)
        assert resp.status_code == 409

    @pytest.mark.parametrize("headers_fixture", ["manager_headers", "clerk_headers", "sales_headers"])
    def test_writes_admin_only(self, request, client, client_c, headers_fixture):
        headers = request.getfixturevalue(headers_fixture)
        assert client.post("/api/clients", json={"name": "X"}, headers=headers).status_code == 403
        assert client.patch(f"/api/clients/{client_c.id}", json={"name": "Y"}, headers=headers).status_code == 403
        assert client.delete(f"/api/clients/{client_c.id}", headers=headers).status_code == 403
        assert client.get(f"/api/clients/{client_c.id}", headers=headers).status_code == 200


class TestItems:
    def test_create_with_shades(self, client, admin_headers, clerk_headers):
        resp = client.post(
            "/api/items",
            json={
                "name": "Wool",
                "track_inventory": False,
                "shades": [
                    {"shade_number": "2", "shade_name": "Grey", "stock_count": 3},
                    {"shade_number": "1", "shade_name": "Black"},
                ],
            },
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.json["track_inventory"] is False
        assert [s["shade_number"] for s in resp.json["shades"]] == ["1", "2"]
        assert resp.json["shades"][0]["stock_count"] == 0

        listed = client.get("/api/items", headers=clerk_headers)
        assert listed.json["items"][0]["name"] == "Wool"

    @pytest.mark.parametrize(
        "shade,field",
        [
            ({"shade_number": ""}, "shade_number"),
            ({"shade_name": "no number"}, "shade_number"),
            ({"shade_number": "1", "stock_count": -1}, "stock_count"),
            ({"shade_number": "1", "stock_count": "many"}, "stock_count"),
        ],
    )
    def test_shade_validation(self, client, admin_headers, shade, field):
        resp = client.post("/api/items", json={"name": "Bad", "shades": [shade]}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json["field"] == field
        assert db.session.query(Item).count() == 0

    def test_track_inventory_must_be_boolean(self, client, admin_headers):
        resp = client.post("/api/items", json={"name": "X", "track_inventory": "yes"}, headers=admin_headers)
        assert resp.status_code == 400

    def test_upsert_shades(self, client, admin_headers, item_i, shade_s):
        resp = client.put(
            f"/api/items/{item_i.id}/shades",
            json={"shades": [
                {"id": shade_s.id, "stock_count": 42},
                {"shade_number": "103", "shade_name": "Green"},
            ]},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        by_number = {s["shade_number"]: s for s in resp.json["shades"]}
        assert by_number["101"]["stock_count"] == 42
        assert by_number["101"]["shade_name"] == "Red"
        assert "103" in by_number
        assert len(by_number) == 3

    def test_upsert_unknown_shade(self, client, admin_headers, item_i):
        resp = client.put(
            f"/api/items/{item_i.id}/shades",
            json={"shades": [{"id": "nope", "stock_count": 1}]},
            headers=admin_headers,
        )
        assert resp.status_code == 404

    def test_delete_shade(self, client, admin_headers, item_i, shade_s):
        resp = client.delete(f"/api/items/{item_i.id}/shades/{shade_s.id}", headers=admin_headers)
        assert resp.status_code == 200
        assert db.session.query(Shade).filter_by(item_id=item_i.id).count() == 1

    def test_delete_item_cascades_shades(self, client, admin_headers, item_i):
        resp = client.delete(f"/api/items/{item_i.id}", headers=admin_headers)
        assert resp.status_code == 200
        assert db.session.query(Item).count() == 0
        assert db.session.query(Shade).count() == 0

    def test_delete_item_in_use(self, client, admin_headers, make_order, sales, item_i, shade_s):
        make_order(sales)
        assert client.delete(f"/api/items/{item_i.id}", headers=admin_headers).status_code == 409
        assert client.delete(f"/api/items/{item_i.id}/shades/{shade_s.id}", headers=admin_headers).status_code == 409

    def test_update_item(self, client, admin_headers, item_i):
        resp = client.patch(f"/api/items/{item_i.id}", json={"description": "Mercerised"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["description"] == "Mercerised"

    @pytest.mark.parametrize("headers_fixture", ["manager_headers", "clerk_headers", "sales_headers"])
    def test_writes_admin_only(self, request, client, item_i, headers_fixture):
        headers = request.getfixturevalue(headers_fixture)
        assert client.post("/api/items", json={"name": "X"}, headers=headers).status_code == 403
        assert client.patch(f"/api/items/{item_i.id}", json={"name": "Y"}, headers=headers).status_code == 403
        assert client.put(f"/api/items/{item_i.id}/shades", json={"shades": []}, headers=headers).status_code == 403
        assert client.delete(f"/api/items/{item_i.id}", headers=headers).status_code == 403
        assert client.get(f"/api/items/{item_i.id}", headers=headers).status_code == 200
