"""
Admin Fee Configuration Routes
==============================

Endpoints for the merchant's fee editor.

Endpoints:
----------
- GET /admin/fees: List the fee configuration in order
- PUT /admin/fees: Replace the fee configuration
- GET /admin/tax-classes: Tax classes a fee can use

Authentication:
---------------
All endpoints require admin authentication via HTTP Basic Auth.

Saving:
-------
The editor always sends the complete ordered list. Row position becomes the
fee's `order`; fees missing from the list are deleted. A request with any
invalid row is rejected with 422 and nothing is saved:

    {
        "detail": {
            "message": "Invalid fee configuration: fees[1].price",
            "errors": [
                {"index": 1, "field": "price", "message": "..."}
            ]
        }
    }
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..auth import verify_admin_credentials
from ..db import get_db
from ..exceptions import FeeValidationError
from ..schemas.fees import FeeOut, FeeSaveRequest, TaxClassOut
from ..services.fee_config import get_tax_classes, load_fee_snapshot, save_fees


logger = logging.getLogger(__name__)

admin_fees_router = APIRouter(prefix="/admin", tags=["Admin - Fees"])


@admin_fees_router.get("/fees", response_model=List[FeeOut])
def list_fees(
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> List[FeeOut]:
    return [FeeOut.model_validate(fee) for fee in load_fee_snapshot(db)]


@admin_fees_router.put("/fees", response_model=List[FeeOut])
def replace_fees(
    payload: FeeSaveRequest,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> List[FeeOut]:
    """Replace the whole fee configuration with the posted list."""
    try:
        snapshot = save_fees(db, payload.fees)
    except FeeValidationError as exc:
        logger.info("Rejected fee save with %d invalid fields", len(exc.errors))
        raise HTTPException(
            status_code=422,
            detail={
                "message": str(exc),
                "errors": [e.as_dict() for e in exc.errors],
            },
        )
    return [FeeOut.model_validate(fee) for fee in snapshot]


@admin_fees_router.get("/tax-classes", response_model=List[TaxClassOut])
def list_tax_classes(
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> List[TaxClassOut]:
    return [
        TaxClassOut(slug=slug, name=name)
        for slug, name in get_tax_classes(db).items()
    ]
