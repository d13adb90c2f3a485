"""
Fee Configuration Service
=========================

Reads and replaces the merchant's fee configuration stored in the `fees`
table.

Key Functions:
--------------
- load_fee_snapshot: Immutable, ordered view of all fees for one request
- get_fee: Look up one fee by its public id
- save_fees: Replace the whole configuration from an ordered list of rows
- get_tax_classes: Tax classes the fee editor can choose from

Snapshots:
----------
Evaluation never reads the table row by row. Each request loads one snapshot
(a tuple of frozen FeeDefinition objects sorted by `order`) and passes it to
the engine, so an admin saving mid-request cannot produce a mixed view.

Saving:
-------
save_fees is a full replacement:
1. Every row is sanitized and validated (see schemas/fees.py). If any row has
   a field error, FeeValidationError is raised and nothing is written.
2. Rows carrying an `id` keep it; rows without one get a fresh "fee_XXXXXXXX".
3. `order` is rewritten from list position (0, 1, 2, ...).
4. Stored fees missing from the new list are deleted.
"""

import logging
import secrets
import string
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import ValidationError
from sqlalchemy import distinct
from sqlalchemy.orm import Session

from ..exceptions import FeeValidationError, FieldError
from ..models import Fee, TaxRate
from ..schemas.fees import FeeIn
from .fee_rules import FeeDefinition


logger = logging.getLogger(__name__)

FEE_ID_PREFIX = "fee_"
FEE_ID_LENGTH = 8
_FEE_ID_ALPHABET = string.ascii_letters + string.digits


def generate_fee_id() -> str:
    """Random public fee id, e.g. "fee_a1B2c3D4"."""
    suffix = "".join(secrets.choice(_FEE_ID_ALPHABET) for _ in range(FEE_ID_LENGTH))
    return f"{FEE_ID_PREFIX}{suffix}"


def load_fee_snapshot(db: Session) -> Tuple[FeeDefinition, ...]:
    """All configured fees, sorted by `order` (ties keep insertion order)."""
    records = db.query(Fee).order_by(Fee.order, Fee.id).all()
    return tuple(FeeDefinition.from_record(r) for r in records)


def get_fee(db: Session, fee_id: str) -> Optional[FeeDefinition]:
    record = db.query(Fee).filter(Fee.fee_id == fee_id).first()
    return FeeDefinition.from_record(record) if record else None


def parse_fee_rows(rows: Sequence[Union[FeeIn, Mapping[str, Any]]]) -> List[FeeIn]:
    """
    Sanitize and validate every row of a save request.

    Raises:
        FeeValidationError: listing each (row index, field) that failed.
    """
    parsed: List[FeeIn] = []
    errors: List[FieldError] = []
    seen_ids = set()

    for index, row in enumerate(rows):
        if isinstance(row, FeeIn):
            fee_in = row
        elif not isinstance(row, Mapping):
            errors.append(FieldError(index, "__root__", "Fee must be an object."))
            continue
        else:
            try:
                fee_in = FeeIn.model_validate(dict(row))
            except ValidationError as exc:
                for err in exc.errors():
                    field = ".".join(str(part) for part in err["loc"]) or "__root__"
                    errors.append(FieldError(index, field, err["msg"]))
                continue

        if fee_in.id is not None:
            if fee_in.id in seen_ids:
                errors.append(FieldError(index, "id", "Duplicate fee id."))
                continue
            seen_ids.add(fee_in.id)

        parsed.append(fee_in)

    if errors:
        raise FeeValidationError(errors)
    return parsed


def _unique_fee_id(taken: set) -> str:
    while True:
        fee_id = generate_fee_id()
        if fee_id not in taken:
            return fee_id


def save_fees(
    db: Session,
    rows: Sequence[Union[FeeIn, Mapping[str, Any]]],
) -> Tuple[FeeDefinition, ...]:
    """
    Replace the fee configuration with `rows`, in the given order.

    Args:
        db: Database session
        rows: Raw row dicts (as posted by the editor) or FeeIn objects

    Returns:
        The new snapshot.

    Raises:
        FeeValidationError: when any row fails validation; nothing is saved.
    """
    parsed = parse_fee_rows(rows)

    existing: Dict[str, Fee] = {f.fee_id: f for f in db.query(Fee).all()}
    taken = set(existing) | {f.id for f in parsed if f.id}
    kept = set()
    created = 0

    for position, fee_in in enumerate(parsed):
        fee_id = fee_in.id or _unique_fee_id(taken)
        taken.add(fee_id)

        record = existing.get(fee_id)
        if record is None:
            record = Fee(fee_id=fee_id)
            db.add(record)
            created += 1

        record.internal_name = fee_in.internal_name
        record.public_name = fee_in.public_name
        record.price = fee_in.price
        record.tax_class = fee_in.tax_class
        record.type = fee_in.type.value
        record.checkbox_text = fee_in.checkbox_text
        record.help_text = fee_in.help_text
        record.condition = fee_in.condition.value
        record.condition_minimum = fee_in.condition_minimum
        record.order = position
        record.active = fee_in.active
        kept.add(fee_id)

    removed = 0
    for fee_id, record in existing.items():
        if fee_id not in kept:
            db.delete(record)
            removed += 1

    db.commit()
    logger.info(
        "Saved fee configuration: %d fees (%d new, %d removed)",
        len(parsed), created, removed,
    )
    return load_fee_snapshot(db)


def get_tax_classes(db: Session) -> Dict[str, str]:
    """
    Tax classes for the fee editor, as {slug: display name}.

    The standard rate ("") is always offered first; other classes are the
    ones the tax rate table knows about.
    """
    classes = {"": "Standard"}
    slugs = db.query(distinct(TaxRate.tax_class)).order_by(TaxRate.tax_class).all()
    for (slug,) in slugs:
        if slug:
            classes[slug] = slug.replace("-", " ").replace("_", " ").title()
    return classes
