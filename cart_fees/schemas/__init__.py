"""
Schemas Package for Cart Fees
=============================

Pydantic models used for request validation and response serialization.

Schema Organization:
--------------------
- **fees.py**: Fee configuration rows and tax class choices
- **tax_rates.py**: Tax rate table CRUD
- **checkout.py**: Classic and block checkout surfaces
- **orders.py**: Orders and applied fee records
- **common.py**: Shared field types (Money)

Naming Conventions:
-------------------
- *Out: Response models - what the API returns
- *Create / *Update: Request models for POST / PUT
- *Request / *Response: Composite request and response bodies

Response models built from ORM rows or frozen dataclasses use
`model_config = ConfigDict(from_attributes=True)`:

    fee = load_fee_snapshot(db)[0]
    return FeeOut.model_validate(fee)
"""

from .fees import FeeIn, FeeSaveRequest, FeeOut, TaxClassOut
from .tax_rates import TaxRateCreate, TaxRateUpdate, TaxRateOut
from .checkout import (
    ToggleRequest,
    ToggleResponse,
    StoreUpdateRequest,
    StoreCheckoutResponse,
    OptionalFeeOut,
    FeeLineOut,
    CheckoutFeesResponse,
    PlaceOrderRequest,
)
from .orders import AppliedFeeOut, OrderOut, OrderSummaryOut, OrderListResponse

__all__ = [
    "FeeIn",
    "FeeSaveRequest",
    "FeeOut",
    "TaxClassOut",
    "TaxRateCreate",
    "TaxRateUpdate",
    "TaxRateOut",
    "ToggleRequest",
    "ToggleResponse",
    "StoreUpdateRequest",
    "StoreCheckoutResponse",
    "OptionalFeeOut",
    "FeeLineOut",
    "CheckoutFeesResponse",
    "PlaceOrderRequest",
    "AppliedFeeOut",
    "OrderOut",
    "OrderSummaryOut",
    "OrderListResponse",
]
