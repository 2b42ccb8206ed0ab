# Overview: Service-layer operations for clients; encapsulates business logic and database work.

"""
Client Service

WHY: Every order is placed for exactly one client. Any signed-in user can
read clients (order composition needs them); only Admin writes them.
A client that orders point to cannot be deleted.
"""

from ..extensions import db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Client, Order
from ..validation import ModelValidationPolicy, validate_payload
from .concurrency import commit_or_raise


CLIENT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "address", "phone", "email"},
    required_on_create={"name"},
)


def list_clients() -> list[Client]:
    return db.session.query(Client).order_by(Client.name.asc()).all()


def get_client(client_id: str) -> Client:
    client = db.session.get(Client, client_id)
    if not client:
        raise NotFoundError("Client not found")
    return client


def _check_name(patch: dict) -> None:
    if "name" in patch and not patch["name"]:
        raise ValidationError("Name is required", "name")


def create_client(payload: dict | None) -> Client:
    patch = validate_payload(model=Client, payload=payload, policy=CLIENT_POLICY, partial=False)
    _check_name(patch)

    client = Client(**patch)
    db.session.add(client)
    commit_or_raise()
    return client


def update_client(client_id: str, payload: dict | None) -> Client:
    client = get_client(client_id)
    patch = validate_payload(model=Client, payload=payload, policy=CLIENT_POLICY, partial=True)
    _check_name(patch)

    for key, value in patch.items():
        setattr(client, key, value)
    commit_or_raise()
    return client


def delete_client(client_id: str) -> None:
    client = get_client(client_id)
    if db.session.query(Order.id).filter(Order.client_id == client.id).first():
        raise ConflictError("Client has orders and cannot be deleted")
    db.session.delete(client)
    commit_or_raise()
