from __future__ import annotations

import uuid
from decimal import Decimal

ID_LENGTH = 32
MONEY_QUANT = Decimal("0.01")


def new_id() -> str:
    """Opaque row identifier (UUID4 hex)."""
    return uuid.uuid4().hex


def money_str(value) -> str | None:
    if value is None:
        return None
    return str(Decimal(value).quantize(MONEY_QUANT))
