"""
Admin Orders Routes
===================

Read-only views of placed orders and the fees recorded on them.

Endpoints:
----------
- GET /admin/orders: List orders with the applied fees column
- GET /admin/orders/{id}: One order with its applied fee records
- GET /admin/orders/{id}/fees: Applied fee records of one order

Authentication:
---------------
All endpoints require admin authentication via HTTP Basic Auth.

Applied Fees Column:
--------------------
The list shows each order's applied fees as their internal names joined by
", " (for example "Handling, Insurance over 50"), or "—" when the order
carries no fees.

Pagination:
-----------
    GET /admin/orders?status=placed&page=1&page_size=20
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..auth import verify_admin_credentials
from ..db import get_db
from ..models import Order
from ..schemas.orders import AppliedFeeOut, OrderListResponse, OrderOut, OrderSummaryOut
from ..services.order import applied_fee_names, email_fee_lines, get_applied_fees


logger = logging.getLogger(__name__)

admin_orders_router = APIRouter(prefix="/admin/orders", tags=["Admin - Orders"])


@admin_orders_router.get("", response_model=OrderListResponse)
def list_orders(
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
    status: Optional[str] = Query(None, description="Filter by order status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> OrderListResponse:
    """Orders, newest first."""
    query = db.query(Order)
    if status:
        query = query.filter(Order.status == status)

    total = query.count()
    offset = (page - 1) * page_size

    orders = (
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset(offset)
        .limit(page_size)
        .all()
    )

    items = [
        OrderSummaryOut(
            id=o.id,
            status=o.status,
            customer_name=o.customer_name,
            subtotal=o.subtotal,
            fee_total=o.fee_total,
            applied_fees=applied_fee_names(o.applied_fees),
            created_at=o.created_at,
        )
        for o in orders
    ]

    return OrderListResponse(
        items=items,
        page=page,
        page_size=page_size,
        total=total,
        has_next=offset + len(items) < total,
    )


def _get_order_or_404(db: Session, order_id: int) -> Order:
    order = db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@admin_orders_router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> OrderOut:
    order = _get_order_or_404(db, order_id)
    out = OrderOut.model_validate(order)
    out.fee_summary = email_fee_lines(order.applied_fees)
    return out


@admin_orders_router.get("/{order_id}/fees", response_model=List[AppliedFeeOut])
def get_order_fees(
    order_id: int,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> List[AppliedFeeOut]:
    _get_order_or_404(db, order_id)
    return [AppliedFeeOut.model_validate(r) for r in get_applied_fees(db, order_id)]
