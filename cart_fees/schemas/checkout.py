"""
Checkout Schemas
================

Request and response models for the two customer-facing checkout surfaces.

Classic checkout (form-submit style):
-------------------------------------
- GET /checkout/fees?subtotal=...: Optional fees to offer plus the fee lines
  the cart currently carries
- POST /checkout/fees/toggle: {"fee_id": "fee_abc", "checked": "true"}
- POST /checkout/orders: Place the order and record the applied fees

Block checkout (Store-API style):
---------------------------------
- GET /store/checkout?subtotal=...: Checkout data with the `cart-fees`
  extension
- POST /store/cart/extensions:
      {"namespace": "cart-fees", "data": {"fee_id": "fee_abc", "checked": true}}

`checked` is deliberately loose on both surfaces: the classic form sends the
string "true", while the block checkout sends any truthy value.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .common import Money


class ToggleRequest(BaseModel):
    fee_id: Optional[str] = None
    checked: Union[bool, str, None] = None


class StoreUpdateRequest(BaseModel):
    namespace: str
    data: Dict[str, Any] = {}


class OptionalFeeOut(BaseModel):
    """A checkbox the customer can tick."""
    id: str
    checkbox_text: str
    help_text: str
    price: Money
    price_display: str
    selected: bool


class FeeLineOut(BaseModel):
    """A fee line registered on the cart (net of tax)."""
    model_config = ConfigDict(from_attributes=True)

    fee_id: str
    name: str
    net_amount: Money
    taxable: bool
    tax_class: str


class CheckoutFeesResponse(BaseModel):
    subtotal: Money
    optional_fees: List[OptionalFeeOut]
    fees: List[FeeLineOut]
    fee_total: Money


class ToggleResponse(BaseModel):
    success: bool = True
    applied: bool
    selected_fees: List[str]


class StoreCheckoutResponse(BaseModel):
    """Block checkout data; extension payloads are keyed by namespace."""
    subtotal: Money
    fees: List[FeeLineOut]
    extensions: Dict[str, Dict[str, List[OptionalFeeOut]]]


class PlaceOrderRequest(BaseModel):
    subtotal: Decimal = Field(..., ge=0)
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
