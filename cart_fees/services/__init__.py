"""
Services Package for Cart Fees
==============================

This package contains the fee evaluation core and the services around it.

Available Services:
-------------------
- **tax_utils**: Decimal helpers, gross/net conversion and tax rate resolvers
- **fee_rules**: FeeDefinition value object and condition evaluation
- **engine**: Fee evaluation (which fees apply, at what net amount)
- **session**: Cart session cache with database persistence
- **selection**: Optional fee selection store and the two checkout surfaces
- **fee_config**: Loading and saving the fee configuration
- **order**: Recording applied fees on orders

The core modules (tax_utils, fee_rules, engine) take plain values and never
touch a request, a session id or the database on their own; callers pass the
fee snapshot, subtotal, selection and rate resolver explicitly.

Usage:
------
    from cart_fees.services.engine import resolve_fees
    from cart_fees.services.fee_config import load_fee_snapshot

fee_config and order depend on the schemas package, so they are imported by
module path rather than re-exported here.
"""

from . import tax_utils
from . import fee_rules
from . import engine
from . import session
from . import selection

__all__ = ["tax_utils", "fee_rules", "engine", "session", "selection"]
