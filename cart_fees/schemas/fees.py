"""
Fee Configuration Schemas
=========================

This module defines the Pydantic models for the admin fee editor. The editor
saves the whole ordered fee list at once; each row is sanitized on its own.

Endpoint Coverage:
------------------
- GET /admin/fees: List the fee configuration
- PUT /admin/fees: Replace the fee configuration
- GET /admin/tax-classes: Tax classes offered by the editor

Row Sanitization:
-----------------
Untrusted rows are cleaned rather than rejected wherever a safe default
exists:

- Unknown `type` values become "required"; unknown `condition` values become
  "always".
- A missing, malformed or negative `condition_minimum` becomes 0.
- `active` is false only for false-like values (false, 0, "0", "", "false")
  or null; a row without the key is active.
- Text fields are stripped; missing text becomes "".
- Any incoming `order` is ignored; order comes from list position.

Only the fields a fee cannot exist without are validated strictly:
`internal_name` and `public_name` must be non-empty and `price` must be a
positive number that is still positive at the stored scale of four decimal
places. A failure is reported per row and field.

Example save payload:
---------------------
    {
        "fees": [
            {
                "id": "fee_a1B2c3D4",
                "internal_name": "Handling (all orders)",
                "public_name": "Handling",
                "price": 2.42,
                "tax_class": "",
                "type": "required",
                "condition": "always",
                "active": true
            },
            {
                "internal_name": "Insurance over 50",
                "public_name": "Shipping insurance",
                "price": 11.0,
                "type": "optional",
                "checkbox_text": "Insure my parcel",
                "condition": "minimum",
                "condition_minimum": 50
            }
        ]
    }
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..services.fee_rules import FeeCondition, FeeType, coerce_condition, coerce_fee_type
from ..services.tax_utils import ZERO, to_decimal
from .common import Money

_FALSE_LIKE = ("", "0", "false", "no", "off")

# Scale and bound of the Numeric(12, 4) price and minimum columns.
STORED_QUANTUM = Decimal("0.0001")
STORED_LIMIT = Decimal("100000000")


def _to_stored_scale(value: Decimal) -> Decimal:
    return value.quantize(STORED_QUANTUM, rounding=ROUND_HALF_UP)


class FeeIn(BaseModel):
    """One row of a fee save request."""

    id: Optional[str] = None
    internal_name: str
    public_name: str
    price: Decimal
    tax_class: str = ""
    type: FeeType = FeeType.REQUIRED
    checkbox_text: str = ""
    help_text: str = ""
    condition: FeeCondition = FeeCondition.ALWAYS
    condition_minimum: Decimal = ZERO
    active: bool = True

    @field_validator("id", mode="before")
    @classmethod
    def clean_id(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("internal_name", "public_name", "tax_class", "checkbox_text", "help_text", mode="before")
    @classmethod
    def clean_text(cls, v):
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("internal_name")
    @classmethod
    def internal_name_required(cls, v):
        if not v:
            raise ValueError("Internal name is required.")
        return v

    @field_validator("public_name")
    @classmethod
    def public_name_required(cls, v):
        if not v:
            raise ValueError("Public name is required.")
        return v

    @field_validator("price", mode="before")
    @classmethod
    def positive_price(cls, v):
        price = to_decimal(v, default=None)
        if price is None or price <= ZERO:
            raise ValueError("Price must be a valid positive number.")
        if price >= STORED_LIMIT:
            raise ValueError("Price is too large.")
        price = _to_stored_scale(price)
        if price <= ZERO:
            raise ValueError("Price must be at least 0.0001.")
        return price

    @field_validator("type", mode="before")
    @classmethod
    def sanitize_type(cls, v):
        return coerce_fee_type(v)

    @field_validator("condition", mode="before")
    @classmethod
    def sanitize_condition(cls, v):
        return coerce_condition(v)

    @field_validator("condition_minimum", mode="before")
    @classmethod
    def sanitize_minimum(cls, v):
        minimum = to_decimal(v)
        if minimum <= ZERO:
            return ZERO
        if minimum >= STORED_LIMIT:
            raise ValueError("Minimum is too large.")
        return _to_stored_scale(minimum)

    @field_validator("active", mode="before")
    @classmethod
    def sanitize_active(cls, v):
        if v is None or v is False:
            return False
        if isinstance(v, str):
            return v.strip().lower() not in _FALSE_LIKE
        return bool(v)


class FeeSaveRequest(BaseModel):
    """
    Full replacement of the fee configuration.

    Rows stay loosely typed here so a malformed row is reported with its index
    by the fee configuration service instead of failing the whole body.
    """
    fees: List[Dict[str, Any]] = []


class FeeOut(BaseModel):
    """A stored fee definition."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    internal_name: str
    public_name: str
    price: Money
    tax_class: str
    type: FeeType
    checkbox_text: str
    help_text: str
    condition: FeeCondition
    condition_minimum: Money
    order: int
    active: bool


class TaxClassOut(BaseModel):
    slug: str
    name: str
