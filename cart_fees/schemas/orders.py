"""
Order Schemas
=============

Response models for orders and the fees recorded on them.

Endpoint Coverage:
------------------
- POST /checkout/orders: Returns OrderOut
- GET /admin/orders: List of OrderSummaryOut
- GET /admin/orders/{id}/fees: List of AppliedFeeOut

Applied fees are a snapshot taken when the order was placed; the names and
amounts shown here never follow later edits to the fee configuration.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from .common import Money


class AppliedFeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    fee_id: str
    position: int
    internal_name: str
    public_name: str
    price: Money
    net_amount: Money
    tax_class: str
    fee_type: str


class OrderOut(BaseModel):
    """
    A placed order with its applied fees.

    `fee_summary` is the plain-text block used in the confirmation email.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: str
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    subtotal: Money
    fee_total: Money
    applied_fees: List[AppliedFeeOut] = []
    fee_summary: str = ""
    created_at: Optional[datetime] = None


class OrderSummaryOut(BaseModel):
    """Row of the admin order list; `applied_fees` is the fee column text."""
    id: int
    status: str
    customer_name: Optional[str] = None
    subtotal: Money
    fee_total: Money
    applied_fees: str
    created_at: Optional[datetime] = None


class OrderListResponse(BaseModel):
    items: List[OrderSummaryOut]
    page: int
    page_size: int
    total: int
    has_next: bool
