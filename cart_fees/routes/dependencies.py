"""
Shared route dependencies: cart session resolution, per-request service
objects and the rate limiter for the public checkout endpoints.
"""

import logging
import uuid
from typing import Tuple

from fastapi import Depends, Request, Response
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from .. import config
from ..db import get_db
from ..services.fee_config import load_fee_snapshot
from ..services.fee_rules import FeeDefinition
from ..services.selection import SelectionStore
from ..services.session import DatabaseSessionBackend
from ..services.tax_utils import DatabaseTaxRateResolver


logger = logging.getLogger(__name__)


# =============================================================================
# Cart Session
# =============================================================================

def _session_from_request(request: Request) -> str:
    return (
        request.headers.get(config.SESSION_HEADER_NAME)
        or request.cookies.get(config.SESSION_COOKIE_NAME)
        or ""
    ).strip()


def get_cart_session_id(request: Request, response: Response) -> str:
    """
    Resolve the customer's cart session.

    The X-Cart-Session header wins over the cart_session cookie. When neither
    is present a new id is issued and returned as a cookie.
    """
    session_id = _session_from_request(request)
    if not session_id:
        session_id = str(uuid.uuid4())
        response.set_cookie(
            config.SESSION_COOKIE_NAME,
            session_id,
            httponly=True,
            samesite="lax",
        )
        logger.debug("Issued new cart session %s", session_id[:8])
    return session_id


# =============================================================================
# Per-request Services
# =============================================================================

def get_selection_store(db: Session = Depends(get_db)) -> SelectionStore:
    return SelectionStore(DatabaseSessionBackend(db))


def get_rate_resolver(db: Session = Depends(get_db)) -> DatabaseTaxRateResolver:
    return DatabaseTaxRateResolver(db, enabled=config.is_tax_enabled())


def get_fee_snapshot(db: Session = Depends(get_db)) -> Tuple[FeeDefinition, ...]:
    return load_fee_snapshot(db)


# =============================================================================
# Rate Limiting Setup
# =============================================================================

def get_cart_session_or_ip(request: Request) -> str:
    """Rate limit key: the cart session when known, otherwise the client IP."""
    session_id = _session_from_request(request)
    if session_id:
        return f"session:{session_id}"
    return get_remote_address(request)


# In-memory storage; use storage_uri="redis://..." with several workers.
limiter = Limiter(key_func=get_cart_session_or_ip, enabled=config.RATE_LIMIT_ENABLED)
