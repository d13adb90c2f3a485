"""
Configuration Module for Cart Fees
==================================

This module centralizes all configuration settings, environment variables, and
constants used throughout the Cart Fees service. Values are parsed and typed
at module load time so that configuration errors surface early.

Configuration Categories:
-------------------------
- **Database**: Connection URL for fee configuration, tax rates, sessions and
  order records.

- **Tax & Currency**: Whether tax calculation is enabled at all, and how
  prices are formatted for customer-facing fee listings.

- **Session Management**: TTL and cache size settings for the in-memory
  session cache that fronts the `cart_sessions` table, plus the cookie name
  used to identify a customer's cart session.

- **Rate Limiting**: Throttling for the public fee-toggle endpoints.

- **CORS Settings**: Cross-Origin Resource Sharing configuration for the
  storefront.

- **Admin Authentication**: Credentials for the admin fee editor.

Environment Variables:
----------------------
- DATABASE_URL: SQLAlchemy URL (default: "sqlite:///./cart_fees.db")
- TAX_ENABLED: Global tax switch (default: "true")
- PRICE_DECIMALS: Decimal places for displayed prices (default: 2)
- CURRENCY_SYMBOL: Symbol used in formatted prices (default: "€")
- CURRENCY_POSITION: "left" or "right" of the amount (default: "right")
- SESSION_TTL_SECONDS: Session cache TTL (default: 3600)
- SESSION_MAX_CACHE_SIZE: Max cached sessions (default: 1000)
- SESSION_COOKIE_NAME: Cart session cookie (default: "cart_session")
- RATE_LIMIT_TOGGLE: Toggle endpoint rate limit (default: "60 per minute")
- RATE_LIMIT_ENABLED: Enable/disable rate limiting (default: "true")
- CORS_ORIGINS: Comma-separated allowed origins (default: "*")
- ADMIN_USERNAME: Admin username (default: "admin")
- ADMIN_PASSWORD: Admin password (required for admin access)

Usage:
------
    from cart_fees.config import TAX_ENABLED, PRICE_DECIMALS
"""

import os
from typing import List


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# Database Configuration
# =============================================================================

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./cart_fees.db")


# =============================================================================
# Tax & Currency Configuration
# =============================================================================
# Fee prices are entered tax-inclusive. When tax is disabled the configured
# price is charged as-is (gross equals net).

TAX_ENABLED: bool = _env_flag("TAX_ENABLED", "true")

PRICE_DECIMALS: int = int(os.getenv("PRICE_DECIMALS", "2"))
CURRENCY_SYMBOL: str = os.getenv("CURRENCY_SYMBOL", "€")
CURRENCY_POSITION: str = os.getenv("CURRENCY_POSITION", "right")


def is_tax_enabled() -> bool:
    """
    Return the global tax switch.

    Routes call this instead of reading TAX_ENABLED directly so tests can
    flip the module attribute at runtime.
    """
    return TAX_ENABLED


# =============================================================================
# Session Management Configuration
# =============================================================================
# Optional-fee selections live in the cart session. Sessions are persisted to
# the database and cached in memory with TTL/LRU eviction.

SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "3600"))  # 1 hour
SESSION_MAX_CACHE_SIZE: int = int(os.getenv("SESSION_MAX_CACHE_SIZE", "1000"))

SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "cart_session")
SESSION_HEADER_NAME: str = "X-Cart-Session"


# =============================================================================
# Rate Limiting Configuration
# =============================================================================
# Format: "X per Y" where Y is second, minute, hour, or day

RATE_LIMIT_TOGGLE: str = os.getenv("RATE_LIMIT_TOGGLE", "60 per minute")
RATE_LIMIT_ENABLED: bool = _env_flag("RATE_LIMIT_ENABLED", "true")


def get_rate_limit_toggle() -> str:
    """Return the current toggle rate limit (allows dynamic override in tests)."""
    return RATE_LIMIT_TOGGLE


# =============================================================================
# CORS Configuration
# =============================================================================

_cors_origins_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in _cors_origins_env.split(",")
    if origin.strip()
] or ["*"]


# =============================================================================
# Admin Authentication Configuration
# =============================================================================
# ADMIN_PASSWORD must be set for the admin routes to answer at all.

ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")
