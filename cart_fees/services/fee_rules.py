"""
Fee definitions and activation conditions.

FeeDefinition is the read-only view of one configured fee that the
evaluation engine works on. A configuration snapshot is a tuple of these,
loaded once per request so one evaluation pass never sees a half-applied
admin edit.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from .tax_utils import ZERO, to_decimal


class FeeType(str, Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"


class FeeCondition(str, Enum):
    ALWAYS = "always"
    MINIMUM = "minimum"


def coerce_fee_type(value: Any) -> FeeType:
    """Unknown values fall back to `required`."""
    try:
        return FeeType(value)
    except ValueError:
        return FeeType.REQUIRED


def coerce_condition(value: Any) -> FeeCondition:
    """Unknown values fall back to `always`."""
    try:
        return FeeCondition(value)
    except ValueError:
        return FeeCondition.ALWAYS


@dataclass(frozen=True)
class FeeDefinition:
    id: str
    internal_name: str
    public_name: str
    price: Decimal
    tax_class: str = ""
    type: FeeType = FeeType.REQUIRED
    checkbox_text: str = ""
    help_text: str = ""
    condition: FeeCondition = FeeCondition.ALWAYS
    condition_minimum: Decimal = ZERO
    order: int = 0
    active: bool = True

    def __post_init__(self):
        # Accept raw values ("optional", "11.0", None) and normalize them.
        object.__setattr__(self, "price", to_decimal(self.price))
        object.__setattr__(self, "condition_minimum", to_decimal(self.condition_minimum))
        object.__setattr__(self, "type", coerce_fee_type(self.type))
        object.__setattr__(self, "condition", coerce_condition(self.condition))
        object.__setattr__(self, "tax_class", self.tax_class or "")

    @property
    def is_optional(self) -> bool:
        return self.type is FeeType.OPTIONAL

    @property
    def label(self) -> str:
        """Checkbox label shown to customers; falls back to the public name."""
        return self.checkbox_text or self.public_name

    @classmethod
    def from_record(cls, record: Any) -> "FeeDefinition":
        """Build from a `models.Fee` row."""
        return cls(
            id=record.fee_id,
            internal_name=record.internal_name,
            public_name=record.public_name,
            price=record.price,
            tax_class=record.tax_class,
            type=record.type,
            checkbox_text=record.checkbox_text or "",
            help_text=record.help_text or "",
            condition=record.condition,
            condition_minimum=record.condition_minimum,
            order=record.order or 0,
            active=bool(record.active),
        )


def evaluate_condition(fee: FeeDefinition, cart_subtotal: Any) -> bool:
    """
    Decide whether the fee's activation condition holds for the cart.

    `minimum` holds when the subtotal reaches condition_minimum. A missing or
    malformed minimum counts as 0, so the condition degrades to always-true.
    """
    if fee.condition is not FeeCondition.MINIMUM:
        return True
    return to_decimal(cart_subtotal) >= to_decimal(fee.condition_minimum)
