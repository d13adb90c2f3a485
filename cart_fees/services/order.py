"""
Order Fee Recording Service
===========================

This module commits the fees of a cart to an order and reads them back for
the admin order list and the order confirmation email.

Key Functions:
--------------
- place_order: Create an order from a cart and record its applied fees
- record_applied_fees: Write the applied fee records of an existing order
- get_applied_fees: Applied fee records of one order, in application order
- applied_fee_names: Summary text for the admin order list column
- email_fee_lines: Plain-text block listing applied fees for the email

Order Lifecycle:
----------------
1. Customer toggles optional fees (selection lives in the cart session)
2. Checkout posts the order -> place_order
   - fees are resolved one last time against the current snapshot
   - the order row stores subtotal and the sum of net fee amounts
   - one AppliedFee row per fee line, in configured order
   - the session selection is cleared

Write-Once Records:
-------------------
Applied fee records copy the fee's names, price and tax class. Editing or
deleting a fee afterwards never changes a past order. Recording a second time
for the same order raises AppliedFeesAlreadyRecordedError.
"""

import logging
from typing import Any, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..exceptions import AppliedFeesAlreadyRecordedError
from ..models import AppliedFee, Order
from .engine import Cart, FeeLine, resolve_fees
from .fee_rules import FeeDefinition
from .selection import SelectionStore, find_fee
from .tax_utils import ZERO, TaxRateResolver


logger = logging.getLogger(__name__)

NO_FEES_PLACEHOLDER = "—"


def record_applied_fees(
    db: Session,
    order: Order,
    lines: Sequence[FeeLine],
    fees: Sequence[FeeDefinition],
) -> List[AppliedFee]:
    """
    Write one AppliedFee row per fee line.

    Args:
        db: Database session
        order: The order the fees were charged on
        lines: Resolved fee lines (output of resolve_fees)
        fees: Snapshot the lines were resolved from, for the name/price copy

    Raises:
        AppliedFeesAlreadyRecordedError: if the order already has its records
    """
    if order.fees_recorded:
        raise AppliedFeesAlreadyRecordedError(order.id)

    records = []
    for position, line in enumerate(lines):
        fee = find_fee(fees, line.fee_id)
        record = AppliedFee(
            order_id=order.id,
            fee_id=line.fee_id,
            position=position,
            internal_name=fee.internal_name if fee else line.name,
            public_name=line.name,
            price=fee.price if fee else line.net_amount,
            net_amount=line.net_amount,
            tax_class=line.tax_class,
            fee_type=fee.type.value if fee else "required",
        )
        db.add(record)
        records.append(record)

    order.fees_recorded = True
    db.commit()
    logger.info("Recorded %d applied fees for order %s", len(records), order.id)
    return records


def place_order(
    db: Session,
    session_id: str,
    cart: Cart,
    fees: Sequence[FeeDefinition],
    resolver: TaxRateResolver,
    store: SelectionStore,
    customer_name: Optional[str] = None,
    customer_email: Optional[str] = None,
) -> Order:
    """
    Create an order for the cart and commit its fees.

    The selection is read once and fees are resolved against the same
    snapshot the caller used for display. After the records are written the
    session selection is cleared.
    """
    selection = store.get(session_id)
    lines = resolve_fees(fees, cart.subtotal, selection, resolver)
    fee_total = sum((line.net_amount for line in lines), ZERO)

    order = Order(
        status="placed",
        session_id=session_id,
        customer_name=customer_name,
        customer_email=customer_email,
        subtotal=cart.subtotal,
        fee_total=fee_total,
    )
    db.add(order)
    db.flush()

    record_applied_fees(db, order, lines, fees)
    store.clear(session_id)

    db.refresh(order)
    logger.info(
        "Placed order %s with %d fees (fee total %s)",
        order.id, len(lines), fee_total,
    )
    return order


def get_applied_fees(db: Session, order_id: int) -> List[AppliedFee]:
    return (
        db.query(AppliedFee)
        .filter(AppliedFee.order_id == order_id)
        .order_by(AppliedFee.position)
        .all()
    )


def applied_fee_names(records: Sequence[Any]) -> str:
    """Internal names joined by ", ", or a dash when no fee was applied."""
    names = [r.internal_name for r in records if r.internal_name]
    return ", ".join(names) if names else NO_FEES_PLACEHOLDER


def email_fee_lines(records: Sequence[Any]) -> str:
    """
    Plain-text fee block for the order email.

    Example:
        Applied fees:
        - Handling
        - Shipping insurance

    Empty string when the order has no applied fees.
    """
    if not records:
        return ""
    lines = ["Applied fees:"]
    lines.extend(f"- {r.public_name}" for r in records)
    return "\n".join(lines)
