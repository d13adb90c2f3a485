"""
Cart Fees
=========

Merchant-configured cart fees with tax-inclusive prices, optional fees the
customer opts into at checkout, and write-once applied fee records on orders.

Run the API with:

    uvicorn cart_fees.main:app --reload
"""

__version__ = "1.0.0"
