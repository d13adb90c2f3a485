"""
Tax Rate Schemas
================

Pydantic models for the admin tax rate table. Rates are percentages
(21.0 means 21%); all active rates of one tax class are summed when a fee's
net amount is computed.

Endpoint Coverage:
------------------
- GET /admin/tax-rates: List tax rates
- POST /admin/tax-rates: Create a tax rate
- PUT /admin/tax-rates/{id}: Update a tax rate
- DELETE /admin/tax-rates/{id}: Delete a tax rate

Negative rates are rejected here so the aggregate rate of a class can never
fall to -100% or below.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import Money


class TaxRateCreate(BaseModel):
    tax_class: str = ""
    name: str = ""
    rate: Decimal = Field(..., ge=0)
    priority: int = 1
    active: bool = True

    @field_validator("tax_class", "name", mode="before")
    @classmethod
    def clean_text(cls, v):
        if v is None:
            return ""
        return str(v).strip()


class TaxRateUpdate(BaseModel):
    """Partial update; omitted fields keep their stored value."""
    tax_class: Optional[str] = None
    name: Optional[str] = None
    rate: Optional[Decimal] = Field(None, ge=0)
    priority: Optional[int] = None
    active: Optional[bool] = None


class TaxRateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tax_class: str
    name: str
    rate: Money
    priority: int
    active: bool
