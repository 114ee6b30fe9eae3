from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable


# Upper bound for prices and quantities; keeps obviously broken input out of the ledger
MAX_AMOUNT = Decimal("999999999999")


class ValidationError(ValueError):
    """400-level input problem."""


@dataclass(frozen=True)
class PayloadPolicy:
    """
    Central policy layer:
    - fields: field name -> coercer; the allowlist of what clients may set
    - required_on_create: fields required for POST
    """
    fields: dict[str, Callable[[str, Any], Any]]
    required_on_create: frozenset[str] = frozenset()


def coerce_decimal(field: str, value: Any) -> Decimal:
    """
    Normalize a JSON number or numeric string to Decimal.

    Floats go through str() so 0.1 stays 0.1. Booleans, NaN and infinities
    are rejected.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be a number")
        try:
            result = Decimal(stripped)
        except InvalidOperation:
            raise ValidationError(f"{field} must be a number")
    else:
        raise ValidationError(f"{field} must be a number")

    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if abs(result) > MAX_AMOUNT:
        raise ValidationError(f"{field} exceeds the maximum allowed value")
    return result


def coerce_price(field: str, value: Any) -> Decimal:
    price = coerce_decimal(field, value)
    if price < 0:
        raise ValidationError(f"{field} must be >= 0")
    return price


def coerce_text(field: str, value: Any) -> str:
    if value is None:
        raise ValidationError(f"{field} cannot be null")
    text = str(value).strip()
    if not text:
        raise ValidationError(f"{field} cannot be blank")
    if len(text) > 255:
        raise ValidationError(f"{field} exceeds max length 255")
    return text


def coerce_optional_text(field: str, value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def validate_payload(*, payload: Any, policy: PayloadPolicy, partial: bool) -> dict:
    """
    Validates + normalizes incoming JSON against a policy.
    Returns a cleaned patch dict with only allowed fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    patch: dict = {}
    for key, raw in payload.items():
        coercer = policy.fields.get(key)
        if coercer is None:
            raise ValidationError(f"Field not allowed: {key}")
        patch[key] = coercer(key, raw)
    return patch
