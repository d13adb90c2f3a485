"""
Domain errors raised by the cart fees services.

Routes translate these into HTTPException responses; nothing here is fatal
to the surrounding application.
"""

from typing import List, Optional


class CartFeesError(Exception):
    """Base class for all cart fees errors."""


class FieldError:
    """One failed field of one row in a fee save request."""

    __slots__ = ("index", "field", "message")

    def __init__(self, index: Optional[int], field: str, message: str):
        self.index = index
        self.field = field
        self.message = message

    def as_dict(self) -> dict:
        return {"index": self.index, "field": self.field, "message": self.message}

    def __repr__(self) -> str:
        return f"FieldError(index={self.index!r}, field={self.field!r}, message={self.message!r})"


class FeeValidationError(CartFeesError):
    """
    A fee save request contained rows that failed validation.

    Nothing is persisted when this is raised. `errors` lists every failing
    (row index, field) pair so the caller can point at the exact input.
    """

    def __init__(self, errors: List[FieldError]):
        self.errors = errors
        summary = ", ".join(f"fees[{e.index}].{e.field}" for e in errors)
        super().__init__(f"Invalid fee configuration: {summary}")


class AppliedFeesAlreadyRecordedError(CartFeesError):
    """Applied fee records are write-once per order."""

    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Applied fees already recorded for order {order_id}")
