from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from ims.time_utils import parse_iso_date, parse_iso_datetime

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Date, Integer, Numeric, String, Text, DateTime
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError


# Largest rate accepted for an order line: 9,999,999.99
MAX_RATE = Decimal("9999999.99")
MONEY_QUANT = Decimal("0.01")

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_int(key: str, value: Any) -> int:
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer", key)
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)", key)
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)", key)
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer", key)
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal", key)
    raise ValidationError(f"{key} must be an integer", key)


def coerce_money(key: str, value: Any) -> Decimal:
    """Accept int, float, Decimal or numeric string; return a 2-place Decimal."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{key} must be a number", key)
    try:
        # str() first so 0.1 stays 0.1 instead of its binary expansion
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{key} must be a number", key)
    if not amount.is_finite():
        raise ValidationError(f"{key} must be a finite number", key)
    try:
        return amount.quantize(MONEY_QUANT)
    except InvalidOperation:
        # More digits than the decimal context can hold at 2 places
        raise ValidationError(f"{key} is out of range", key)


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return coerce_int(col.key, value)

    # Booleans
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{col.key} must be true or false", col.key)

    if isinstance(coltype, Numeric):
        return coerce_money(col.key, value)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime", col.key)
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime", col.key)
            return dt
        raise ValidationError(f"{col.key} must be a datetime", col.key)

    if isinstance(coltype, Date):
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                d = parse_iso_date(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 date (YYYY-MM-DD)", col.key)
            if d is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 date (YYYY-MM-DD)", col.key)
            return d
        raise ValidationError(f"{col.key} must be a date", col.key)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", missing[0])

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}", k)
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}", k)

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null", k)
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable and k in required:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank", k)

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}", k)

        patch[k] = val

    return patch


def enforce_rules_user(patch: dict, *, creating: bool) -> None:
    """Rules carried over from the user form: name, username and password lengths."""
    if "full_name" in patch and not patch["full_name"]:
        raise ValidationError("Full name is required", "full_name")

    if "username" in patch:
        if not patch["username"]:
            raise ValidationError("Username is required", "username")
        if len(patch["username"]) < MIN_USERNAME_LENGTH:
            raise ValidationError(
                f"Username must be at least {MIN_USERNAME_LENGTH} characters long", "username"
            )

    password = patch.get("password")
    if creating and not password:
        raise ValidationError("Password is required for new users", "password")
    if password:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long", "password"
            )
        # bcrypt only looks at the first 72 bytes
        if len(password.encode("utf-8")) > 72:
            raise ValidationError("Password cannot exceed 72 bytes", "password")


def enforce_rules_shade(patch: dict) -> None:
    if "shade_number" in patch and not patch["shade_number"]:
        raise ValidationError("shade_number is required", "shade_number")
    if "stock_count" in patch and patch["stock_count"] is not None:
        if patch["stock_count"] < 0:
            raise ValidationError("stock_count must be >= 0", "stock_count")


def enforce_rules_order_line(quantity: Any, rate: Any) -> tuple[int, Decimal]:
    """Validate one order line's numbers; returns (quantity, rate)."""
    if quantity is None:
        raise ValidationError("quantity is required", "quantity")
    if rate is None:
        raise ValidationError("rate is required", "rate")
    qty = coerce_int("quantity", quantity)
    if qty <= 0:
        raise ValidationError("quantity must be > 0", "quantity")
    amount_rate = coerce_money("rate", rate)
    if amount_rate < 0:
        raise ValidationError("rate must be >= 0", "rate")
    if amount_rate > MAX_RATE:
        raise ValidationError(f"rate cannot exceed {MAX_RATE}", "rate")
    return qty, amount_rate
