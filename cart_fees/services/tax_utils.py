"""
Tax calculation utilities.

Fee prices are entered tax-inclusive ("gross"). Before a fee is attached to a
cart its tax-exclusive base amount ("net") is extracted using the aggregate
rate of the fee's tax class:

    net = gross / (1 + rate / 100)

All arithmetic uses decimal.Decimal. The converters return unrounded amounts;
rounding belongs to the display/tax layer (see round_money).
"""

import logging
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Dict, Iterable, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import TaxRate


logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Working precision for the gross/net inversion; far beyond any currency's
# decimal places so no precision is lost before the caller rounds.
_PRECISION = 28


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """
    Coerce a number-like value to Decimal.

    Floats go through str() so 11.0 becomes Decimal("11.0") rather than its
    binary expansion. None, empty strings and anything unparseable return
    `default`.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    if isinstance(value, (int, float)):
        value = str(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
        try:
            result = Decimal(value)
        except InvalidOperation:
            return default
        return result if result.is_finite() else default
    return default


def round_money(amount: Decimal, places: int = 2) -> Decimal:
    """Round to `places` decimal places (half-up) for currency display."""
    quantum = Decimal(1).scaleb(-places)
    return to_decimal(amount).quantize(quantum, rounding=ROUND_HALF_UP)


def _effective_rate(rate: Optional[Any]) -> Decimal:
    rate = to_decimal(rate)
    return rate if rate > ZERO else ZERO


def gross_to_net(gross: Any, rate: Optional[Any]) -> Decimal:
    """
    Extract the tax-exclusive amount from a tax-inclusive price.

    Args:
        gross: Price including tax
        rate: Aggregate tax rate as a percentage (21 = 21%). Missing or
              negative rates count as 0.

    Returns:
        Unrounded net amount. With a 0 rate this is `gross` unchanged.
    """
    gross = to_decimal(gross)
    rate = _effective_rate(rate)
    if rate == ZERO:
        return gross
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return gross / (1 + rate / HUNDRED)


def net_to_gross(net: Any, rate: Optional[Any]) -> Decimal:
    """Inverse of gross_to_net: add tax at `rate` percent to a net amount."""
    net = to_decimal(net)
    rate = _effective_rate(rate)
    if rate == ZERO:
        return net
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return net * (1 + rate / HUNDRED)


# =============================================================================
# Tax Rate Resolvers
# =============================================================================

class TaxRateResolver(ABC):
    """
    Looks up the aggregate rate (a percentage) for a tax class.

    Implementations must never raise for an unknown class: "no rates" means
    0%, so gross equals net.
    """

    @abstractmethod
    def aggregate_rate(self, tax_class: str) -> Decimal:
        raise NotImplementedError


class StaticTaxRateResolver(TaxRateResolver):
    """
    Resolver over an in-memory table {tax_class: [rate, ...]}.

    Used by tests and by callers that already hold the rate table.
    """

    def __init__(self, rates: Optional[Mapping[str, Iterable[Any]]] = None, enabled: bool = True):
        self.enabled = enabled
        self._rates: Dict[str, Decimal] = {}
        for tax_class, class_rates in (rates or {}).items():
            self._rates[tax_class or ""] = sum((to_decimal(r) for r in class_rates), ZERO)

    def aggregate_rate(self, tax_class: str) -> Decimal:
        if not self.enabled:
            return ZERO
        return self._rates.get(tax_class or "", ZERO)


class DatabaseTaxRateResolver(TaxRateResolver):
    """
    Resolver over the `tax_rates` table.

    Sums the active rates of the class. Results are memoized per instance, so
    create one per request to see rate edits. A failing query degrades to 0%
    and is logged; a broken tax class must never block checkout.
    """

    def __init__(self, db: Session, enabled: bool = True):
        self.db = db
        self.enabled = enabled
        self._cache: Dict[str, Decimal] = {}

    def aggregate_rate(self, tax_class: str) -> Decimal:
        if not self.enabled:
            return ZERO

        tax_class = tax_class or ""
        if tax_class in self._cache:
            return self._cache[tax_class]

        try:
            rows = self.db.execute(
                select(TaxRate.rate).where(
                    TaxRate.tax_class == tax_class,
                    TaxRate.active.is_(True),
                )
            ).scalars().all()
        except SQLAlchemyError:
            logger.warning("Tax rate lookup failed for class %r; using 0%%", tax_class, exc_info=True)
            return ZERO

        total = sum((to_decimal(r) for r in rows), ZERO)
        self._cache[tax_class] = total
        return total
