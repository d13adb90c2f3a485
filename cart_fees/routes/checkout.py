"""
Classic Checkout Routes
=======================

Customer-facing endpoints for the form-submit style checkout page.

Endpoints:
----------
- GET /checkout/fees?subtotal=...: Optional fee checkboxes and current fee lines
- POST /checkout/fees/toggle: Tick or untick one optional fee
- POST /checkout/orders: Place the order and record its applied fees

Cart Session:
-------------
The cart is identified by the X-Cart-Session header or the cart_session
cookie. A new session id is issued (as a cookie) when neither is present.

Toggle Semantics:
-----------------
    POST /checkout/fees/toggle
    {"fee_id": "fee_a1B2c3D4", "checked": "true"}

`checked` is true only for the string "true" (or a JSON true). Toggles for
unknown, required or inactive fees succeed with `applied: false` and change
nothing. The toggle endpoint is rate limited per cart session.
"""

import logging
from decimal import Decimal
from typing import Sequence

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from .. import config
from ..db import get_db
from ..schemas.checkout import (
    CheckoutFeesResponse,
    FeeLineOut,
    PlaceOrderRequest,
    ToggleRequest,
    ToggleResponse,
)
from ..schemas.orders import OrderOut
from ..services.engine import Cart, resolve_fees
from ..services.fee_rules import FeeDefinition
from ..services.order import email_fee_lines, place_order
from ..services.selection import ClassicCheckoutSurface, SelectionStore
from ..services.tax_utils import ZERO, TaxRateResolver
from .dependencies import (
    get_cart_session_id,
    get_fee_snapshot,
    get_rate_resolver,
    get_selection_store,
    limiter,
)


logger = logging.getLogger(__name__)

checkout_router = APIRouter(prefix="/checkout", tags=["Checkout"])


@checkout_router.get("/fees", response_model=CheckoutFeesResponse)
def checkout_fees(
    subtotal: Decimal = Query(Decimal("0"), ge=0),
    session_id: str = Depends(get_cart_session_id),
    fees: Sequence[FeeDefinition] = Depends(get_fee_snapshot),
    store: SelectionStore = Depends(get_selection_store),
    resolver: TaxRateResolver = Depends(get_rate_resolver),
) -> CheckoutFeesResponse:
    """Fee checkboxes to render plus the fee lines the cart carries now."""
    surface = ClassicCheckoutSurface(store, fees)
    lines = resolve_fees(fees, subtotal, store.get(session_id), resolver)
    return CheckoutFeesResponse(
        subtotal=subtotal,
        optional_fees=surface.optional_fees(session_id, subtotal),
        fees=[FeeLineOut.model_validate(line) for line in lines],
        fee_total=sum((line.net_amount for line in lines), ZERO),
    )


@checkout_router.post("/fees/toggle", response_model=ToggleResponse)
@limiter.limit(config.get_rate_limit_toggle)
def toggle_fee(
    request: Request,
    req: ToggleRequest,
    session_id: str = Depends(get_cart_session_id),
    fees: Sequence[FeeDefinition] = Depends(get_fee_snapshot),
    store: SelectionStore = Depends(get_selection_store),
) -> ToggleResponse:
    surface = ClassicCheckoutSurface(store, fees)
    result = surface.handle_toggle(session_id, req.fee_id, req.checked)
    return ToggleResponse(applied=result.applied, selected_fees=sorted(result.selection))


@checkout_router.post("/orders", response_model=OrderOut, status_code=201)
def create_order(
    req: PlaceOrderRequest,
    db: Session = Depends(get_db),
    session_id: str = Depends(get_cart_session_id),
    fees: Sequence[FeeDefinition] = Depends(get_fee_snapshot),
    store: SelectionStore = Depends(get_selection_store),
    resolver: TaxRateResolver = Depends(get_rate_resolver),
) -> OrderOut:
    """
    Place an order for the current cart.

    Fees are resolved against the current configuration and selection, the
    applied fee records are written and the selection is cleared.
    """
    order = place_order(
        db,
        session_id,
        Cart(req.subtotal),
        fees,
        resolver,
        store,
        customer_name=req.customer_name,
        customer_email=req.customer_email,
    )

    out = OrderOut.model_validate(order)
    out.fee_summary = email_fee_lines(order.applied_fees)
    return out
