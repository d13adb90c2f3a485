"""
Fee Evaluation Engine
=====================

Turns a fee configuration snapshot plus the current cart state into the list
of fee lines to attach to the cart.

Evaluation Order:
-----------------
For each fee, in the order given (callers pre-sort by `order`):

1. Inactive fees are skipped.
2. Fees whose condition does not hold for the subtotal are skipped.
3. Optional fees are skipped unless the customer selected them.
4. The tax-inclusive price is converted to its net amount using the
   aggregate rate of the fee's tax class.

The engine is a pure request/response transform: it reads through the tax
rate resolver and touches nothing else, so it can run on every cart
recalculation.

Usage:
------
    from cart_fees.services.engine import resolve_fees

    lines = resolve_fees(snapshot, cart.subtotal, selection, resolver)
    for line in lines:
        cart.add_fee(line.name, line.net_amount, line.taxable, line.tax_class)
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import AbstractSet, Any, Dict, Iterable, List, Optional

from .. import config
from .fee_rules import FeeDefinition, evaluate_condition
from .tax_utils import TaxRateResolver, gross_to_net, round_money, to_decimal


@dataclass(frozen=True)
class FeeLine:
    """One fee line to register on the cart."""

    fee_id: str
    name: str
    net_amount: Decimal
    tax_class: str
    taxable: bool = True

    def as_tuple(self):
        return (self.name, self.net_amount, self.taxable, self.tax_class)


@dataclass(frozen=True)
class Cart:
    """The slice of cart state fee evaluation depends on."""

    subtotal: Decimal

    def __post_init__(self):
        object.__setattr__(self, "subtotal", to_decimal(self.subtotal))


def is_applicable(fee: FeeDefinition, subtotal: Any, selection: AbstractSet[str]) -> bool:
    """Active, condition met, and (for optional fees) selected."""
    if not fee.active:
        return False
    if not evaluate_condition(fee, subtotal):
        return False
    if fee.is_optional and fee.id not in selection:
        return False
    return True


def applicable_fees(
    fees: Iterable[FeeDefinition],
    subtotal: Any,
    selection: AbstractSet[str],
) -> List[FeeDefinition]:
    return [fee for fee in fees if is_applicable(fee, subtotal, selection)]


def resolve_fees(
    fees: Iterable[FeeDefinition],
    subtotal: Any,
    selection: AbstractSet[str],
    rate_source: TaxRateResolver,
) -> List[FeeLine]:
    """
    Produce the ordered fee lines for a cart.

    Args:
        fees: Fee configuration snapshot, already sorted by `order`
        subtotal: Current cart subtotal
        selection: Optional fee ids the customer opted into
        rate_source: Resolver for the aggregate rate of a tax class

    Returns:
        FeeLine per surviving fee, in input order. Every line is taxable and
        carries the fee's tax class; net amounts are unrounded.
    """
    lines = []
    for fee in applicable_fees(fees, subtotal, selection):
        net = gross_to_net(fee.price, rate_source.aggregate_rate(fee.tax_class))
        lines.append(FeeLine(
            fee_id=fee.id,
            name=fee.public_name,
            net_amount=net,
            tax_class=fee.tax_class,
        ))
    return lines


def format_price(amount: Any, decimals: Optional[int] = None) -> str:
    """Format a price with the configured currency symbol and position."""
    if decimals is None:
        decimals = config.PRICE_DECIMALS
    value = f"{round_money(amount, decimals):,.{decimals}f}"
    if config.CURRENCY_POSITION == "left":
        return f"{config.CURRENCY_SYMBOL}{value}"
    return f"{value} {config.CURRENCY_SYMBOL}"


def list_optional_fees(
    fees: Iterable[FeeDefinition],
    subtotal: Any,
    selection: AbstractSet[str],
) -> List[Dict[str, Any]]:
    """
    Optional fees a customer can currently choose from.

    Only active optional fees whose condition holds are offered. Both
    checkout surfaces render their checkboxes from this list.
    """
    offered = []
    for fee in fees:
        if not fee.active or not fee.is_optional:
            continue
        if not evaluate_condition(fee, subtotal):
            continue
        offered.append({
            "id": fee.id,
            "checkbox_text": fee.label,
            "help_text": fee.help_text,
            "price": fee.price,
            "price_display": format_price(fee.price),
            "selected": fee.id in selection,
        })
    return offered
