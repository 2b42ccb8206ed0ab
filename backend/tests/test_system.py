"""
Health endpoint and CLI command tests.
"""

from ims.extensions import db
from ims.models import User
from ims.permissions import ADMIN
from ims.services.notification_service import broker


def test_health(client, db_session, clerk):
    with broker.subscribe(clerk):
        resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json["status"] == "ok"
    assert resp.json["timestamp"].endswith("Z")
    database = resp.json["checks"]["database"]
    assert database["status"] == "healthy"
    assert database["details"]["users"] == 1
    assert resp.json["checks"]["notifications"]["subscribers"] == 1


def test_cors_allowed_origin(client, db_session):
    resp = client.get("/health", headers={"Origin": "http://localhost:5173"})
    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"


def test_cors_unknown_origin(client, db_session):
    resp = client.get("/health", headers={"Origin": "http://evil.example"})
    assert "Access-Control-Allow-Origin" not in resp.headers


class TestCli:
    def test_system_init_creates_admin_once(self, app, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=["system", "init"])
        assert result.exit_code == 0, result.output
        assert "Created admin user: admin" in result.output

        admin = db.session.query(User).filter_by(username="admin").one()
        assert admin.role == ADMIN

        result = runner.invoke(args=["system", "init"])
        assert result.exit_code == 0
        assert "already exists" in result.output
        assert db.session.query(User).count() == 1

    def test_users_create_and_list(self, app, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=[
            "users", "create",
            "--username", "sales",
            "--full-name", "Sales One",
            "--password", "sales123",
            "--role", "FSSALE",
        ])
        assert result.exit_code == 0, result.output
        assert "Created user: sales" in result.output

        result = runner.invoke(args=["users", "list"])
        assert "sales" in result.output
        assert "FSSALE" in result.output

    def test_users_create_rejects_duplicate(self, app, sales):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "users", "create",
            "--username", "SALES",
            "--full-name", "Dup",
            "--password", "sales999",
            "--role", "FSSALE",
        ])
        assert result.exit_code == 1
        assert "FAIL" in result.output

    def test_users_list_empty(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["users", "list"])
        assert "No users found" in result.output

    def test_cleanup_sessions(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["maintenance", "cleanup-sessions"])
        assert result.exit_code == 0
        assert "Deleted 0 sessions" in result.output
