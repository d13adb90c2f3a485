"""
Optional Fee Selection
======================

Customers opt into optional fees from one of two checkout surfaces:

- **Classic checkout**: a form-submit style page that posts
  `{fee_id, checked: "true"|"false"}` on every checkbox change.
- **Block checkout**: a fetch-based checkout that sends Store-API style
  update callbacks `{"namespace": "cart-fees", "data": {"fee_id", "checked"}}`.

Both surfaces are thin adapters over one SelectionStore keyed by cart session
id, so a toggle made on one surface is visible to the other on the next read.

Consistency:
------------
A toggle is a set union/difference, never a full overwrite of the selection.
Each read-modify-write runs under its session's lock and starts from the
stored row rather than the cache, so concurrent toggles of different fee ids
on the same cart both survive. Locks are process-local and striped: a fixed
pool is shared by hash of the session id.

Toggles for unknown, non-optional or inactive fees are accepted and ignored
(ToggleResult.applied is False) so the endpoints do not reveal which fee ids
exist.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from .engine import list_optional_fees
from .fee_rules import FeeDefinition
from .session import SessionBackend


logger = logging.getLogger(__name__)

SESSION_KEY = "selected_fees"

# Fixed pool of striped locks; session ids are client-chosen, so the pool
# must not grow with them.
LOCK_STRIPES = 64
_session_locks: Tuple[threading.Lock, ...] = tuple(threading.Lock() for _ in range(LOCK_STRIPES))


def _lock_for(session_id: str) -> threading.Lock:
    return _session_locks[hash(session_id) % LOCK_STRIPES]


class SelectionStore:
    """Set of selected optional fee ids per cart session."""

    def __init__(self, backend: SessionBackend):
        self.backend = backend

    def _read(self, session_id: str, for_update: bool = False) -> List[str]:
        if for_update:
            stored = self.backend.get_for_update(session_id, SESSION_KEY, [])
        else:
            stored = self.backend.get(session_id, SESSION_KEY, [])
        if not isinstance(stored, list):
            return []
        return [fee_id for fee_id in stored if isinstance(fee_id, str)]

    def get(self, session_id: str) -> FrozenSet[str]:
        """Current selection; empty when nothing was recorded."""
        return frozenset(self._read(session_id))

    def toggle(self, session_id: str, fee_id: str, checked: bool) -> FrozenSet[str]:
        """
        Add (checked) or remove (unchecked) one fee id.

        Idempotent: adding a present id or removing an absent one writes
        nothing. Returns the selection after the change.
        """
        with _lock_for(session_id):
            selected = self._read(session_id, for_update=True)
            if checked and fee_id not in selected:
                selected.append(fee_id)
            elif not checked and fee_id in selected:
                selected = [f for f in selected if f != fee_id]
            else:
                return frozenset(selected)
            self.backend.set(session_id, SESSION_KEY, selected)
            return frozenset(selected)

    def clear(self, session_id: str) -> None:
        """Empty the selection (called once fees are committed to an order)."""
        with _lock_for(session_id):
            self.backend.set(session_id, SESSION_KEY, [])


def find_fee(fees: Iterable[FeeDefinition], fee_id: str) -> Optional[FeeDefinition]:
    for fee in fees:
        if fee.id == fee_id:
            return fee
    return None


@dataclass(frozen=True)
class ToggleResult:
    applied: bool
    selection: FrozenSet[str]


class CheckoutSurface:
    """Shared toggle validation for both checkout surfaces."""

    name = "checkout"

    def __init__(self, store: SelectionStore, fees: Sequence[FeeDefinition]):
        self.store = store
        self.fees = fees

    def _toggle(self, session_id: str, fee_id: Any, checked: bool) -> ToggleResult:
        fee_id = str(fee_id).strip() if fee_id is not None else ""
        fee = find_fee(self.fees, fee_id) if fee_id else None

        if fee is None or not fee.is_optional or not fee.active:
            logger.debug("Ignoring %s toggle for non-selectable fee %r", self.name, fee_id)
            return ToggleResult(applied=False, selection=self.store.get(session_id))

        selection = self.store.toggle(session_id, fee.id, checked)
        logger.info(
            "Fee %s %s via %s checkout",
            fee.id, "selected" if checked else "deselected", self.name,
        )
        return ToggleResult(applied=True, selection=selection)

    def optional_fees(self, session_id: str, subtotal: Any) -> List[Dict[str, Any]]:
        return list_optional_fees(self.fees, subtotal, self.store.get(session_id))


def _form_checked(value: Any) -> bool:
    # Form posts carry the literal string "true" for a ticked box.
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


def _not_empty(value: Any) -> bool:
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value not in ("", "0")
    if isinstance(value, (int, float)):
        return value != 0
    return bool(value)


class ClassicCheckoutSurface(CheckoutSurface):
    name = "classic"

    def handle_toggle(self, session_id: str, fee_id: Any, checked: Any) -> ToggleResult:
        return self._toggle(session_id, fee_id, _form_checked(checked))


class BlockCheckoutSurface(CheckoutSurface):
    name = "block"
    NAMESPACE = "cart-fees"

    def handle_update(self, session_id: str, data: Any) -> ToggleResult:
        """Store-API update callback; payloads without a fee_id are ignored."""
        if not isinstance(data, Mapping) or "fee_id" not in data:
            return ToggleResult(applied=False, selection=self.store.get(session_id))
        return self._toggle(session_id, data["fee_id"], _not_empty(data.get("checked")))

    def checkout_data(self, session_id: str, subtotal: Any) -> Dict[str, Any]:
        """Data the block checkout reads under the `cart-fees` extension key."""
        return {"optional_fees": self.optional_fees(session_id, subtotal)}
