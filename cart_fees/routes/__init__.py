"""
Routes Package for Cart Fees
============================

API route definitions, one APIRouter per area.

**Customer-Facing Routes:**
- checkout.py: Classic checkout (fee list, toggle, order placement)
- store_api.py: Block checkout (Store API data and update callback)

**Admin Routes (require authentication):**
- admin_fees.py: Fee configuration editor and tax classes
- admin_tax_rates.py: Tax rate table CRUD
- admin_orders.py: Orders and their applied fees

Shared dependencies (cart session, selection store, rate resolver, fee
snapshot, rate limiter) live in dependencies.py.

Error Handling:
---------------
- 400: Unknown Store API namespace
- 401: Invalid admin credentials
- 404: Unknown order or tax rate
- 422: Invalid fee configuration or request body
- 429: Too many toggle requests
- 503: Admin password not configured
"""

from .admin_fees import admin_fees_router
from .admin_tax_rates import admin_tax_rates_router
from .admin_orders import admin_orders_router
from .checkout import checkout_router
from .store_api import store_api_router

__all__ = [
    "admin_fees_router",
    "admin_tax_rates_router",
    "admin_orders_router",
    "checkout_router",
    "store_api_router",
]
