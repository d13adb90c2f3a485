"""
Block Checkout (Store API) Routes
=================================

Endpoints used by the fetch-based block checkout. Fee data travels under the
`cart-fees` extension namespace, the way Store API extensions are keyed.

Endpoints:
----------
- GET /store/checkout?subtotal=...: Fee lines plus extension data
      {"extensions": {"cart-fees": {"optional_fees": [...]}}}
- POST /store/cart/extensions: Extension update callback
      {"namespace": "cart-fees", "data": {"fee_id": "fee_abc", "checked": true}}

The block surface writes to the same selection store as the classic
checkout, so a fee ticked here shows as selected there and vice versa.
Any non-empty `checked` value counts as ticked ("0", "", 0, false and null
do not).
"""

import logging
from decimal import Decimal
from typing import Sequence

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from .. import config
from ..schemas.checkout import (
    FeeLineOut,
    StoreCheckoutResponse,
    StoreUpdateRequest,
    ToggleResponse,
)
from ..services.engine import resolve_fees
from ..services.fee_rules import FeeDefinition
from ..services.selection import BlockCheckoutSurface, SelectionStore
from ..services.tax_utils import TaxRateResolver
from .dependencies import (
    get_cart_session_id,
    get_fee_snapshot,
    get_rate_resolver,
    get_selection_store,
    limiter,
)


logger = logging.getLogger(__name__)

store_api_router = APIRouter(prefix="/store", tags=["Store API"])


@store_api_router.get("/checkout", response_model=StoreCheckoutResponse)
def store_checkout(
    subtotal: Decimal = Query(Decimal("0"), ge=0),
    session_id: str = Depends(get_cart_session_id),
    fees: Sequence[FeeDefinition] = Depends(get_fee_snapshot),
    store: SelectionStore = Depends(get_selection_store),
    resolver: TaxRateResolver = Depends(get_rate_resolver),
) -> StoreCheckoutResponse:
    surface = BlockCheckoutSurface(store, fees)
    lines = resolve_fees(fees, subtotal, store.get(session_id), resolver)
    return StoreCheckoutResponse(
        subtotal=subtotal,
        fees=[FeeLineOut.model_validate(line) for line in lines],
        extensions={BlockCheckoutSurface.NAMESPACE: surface.checkout_data(session_id, subtotal)},
    )


@store_api_router.post("/cart/extensions", response_model=ToggleResponse)
@limiter.limit(config.get_rate_limit_toggle)
def update_cart_extension(
    request: Request,
    req: StoreUpdateRequest,
    session_id: str = Depends(get_cart_session_id),
    fees: Sequence[FeeDefinition] = Depends(get_fee_snapshot),
    store: SelectionStore = Depends(get_selection_store),
) -> ToggleResponse:
    if req.namespace != BlockCheckoutSurface.NAMESPACE:
        raise HTTPException(status_code=400, detail=f"Unknown extension namespace: {req.namespace}")

    surface = BlockCheckoutSurface(store, fees)
    result = surface.handle_update(session_id, req.data)
    return ToggleResponse(applied=result.applied, selected_fees=sorted(result.selection))
