"""
Admin Tax Rate Routes
=====================

CRUD for the tax rate table that fee net amounts are computed from.

Endpoints:
----------
- GET /admin/tax-rates: List tax rates (optionally for one class)
- POST /admin/tax-rates: Create a tax rate
- PUT /admin/tax-rates/{id}: Update a tax rate
- DELETE /admin/tax-rates/{id}: Delete a tax rate

Authentication:
---------------
All endpoints require admin authentication via HTTP Basic Auth.

Negative rates are rejected with 422 by the request schema.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..auth import verify_admin_credentials
from ..db import get_db
from ..models import TaxRate
from ..schemas.tax_rates import TaxRateCreate, TaxRateOut, TaxRateUpdate


logger = logging.getLogger(__name__)

admin_tax_rates_router = APIRouter(prefix="/admin/tax-rates", tags=["Admin - Tax Rates"])


@admin_tax_rates_router.get("", response_model=List[TaxRateOut])
def list_tax_rates(
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
    tax_class: Optional[str] = Query(None, description="Only rates of this class"),
) -> List[TaxRateOut]:
    query = db.query(TaxRate)
    if tax_class is not None:
        query = query.filter(TaxRate.tax_class == tax_class)
    rates = query.order_by(TaxRate.tax_class, TaxRate.priority, TaxRate.id).all()
    return [TaxRateOut.model_validate(r) for r in rates]


@admin_tax_rates_router.post("", response_model=TaxRateOut, status_code=201)
def create_tax_rate(
    payload: TaxRateCreate,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> TaxRateOut:
    rate = TaxRate(**payload.model_dump())
    db.add(rate)
    db.commit()
    db.refresh(rate)
    logger.info("Created tax rate %s for class %r", rate.id, rate.tax_class)
    return TaxRateOut.model_validate(rate)


@admin_tax_rates_router.put("/{rate_id}", response_model=TaxRateOut)
def update_tax_rate(
    rate_id: int,
    payload: TaxRateUpdate,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> TaxRateOut:
    rate = db.get(TaxRate, rate_id)
    if not rate:
        raise HTTPException(status_code=404, detail="Tax rate not found")

    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
        setattr(rate, field, value)

    db.commit()
    db.refresh(rate)
    logger.info("Updated tax rate %s", rate.id)
    return TaxRateOut.model_validate(rate)


@admin_tax_rates_router.delete("/{rate_id}", status_code=204)
def delete_tax_rate(
    rate_id: int,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> None:
    rate = db.get(TaxRate, rate_id)
    if not rate:
        raise HTTPException(status_code=404, detail="Tax rate not found")
    db.delete(rate)
    db.commit()
    logger.info("Deleted tax rate %s", rate_id)
