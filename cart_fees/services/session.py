"""
Cart Session Storage
====================

This module stores small per-session values (the customer's optional fee
selection) with a two-tier strategy:
1. **In-Memory Cache**: Fast access for active carts
2. **Database Persistence**: Durable storage in the `cart_sessions` table

Architecture Overview:
----------------------
The session store uses a write-through cache pattern:
- Reads check the cache first, then fall back to the database
- Writes update both the cache and database
- Cache entries have TTL and LRU eviction to bound memory usage

Session Data Structure:
-----------------------
Each session holds a JSON object, e.g.:

    {"selected_fees": ["fee_abc12345", "fee_def67890"]}

Cache Eviction Strategy:
------------------------
1. **TTL-based**: Sessions not accessed within SESSION_TTL_SECONDS are evicted.
   Checked probabilistically (~1% of reads) to avoid overhead.

2. **LRU-based**: When the cache reaches SESSION_MAX_CACHE_SIZE, the oldest 10%
   of sessions (by last access time) are evicted to make room.

Thread Safety:
--------------
All cache operations are protected by a threading.Lock. FastAPI runs sync
routes in a thread pool, so concurrent requests for one cart can reach this
module at the same time. Read-modify-write sequences on one session are
serialized one level up, by SelectionStore.

Plain reads that miss the cache never replace an entry a writer has put there
in the meantime (_cache_fill). Writers read the row from the database, not the
cache, before modifying it (load_session_data_for_update), so a cache left
stale by another worker process is never written back.

Backends:
---------
SelectionStore talks to a SessionBackend rather than to this module directly:
- InMemorySessionBackend: process-local dict, used by tests and tooling
- DatabaseSessionBackend: the write-through cache + `cart_sessions` table
"""

import copy
import logging
import random
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from .. import config
from ..models import CartSession


logger = logging.getLogger(__name__)


# =============================================================================
# Session Cache
# =============================================================================
# {session_id: {"data": {...session_data...}, "last_access": timestamp}}

SESSION_CACHE: Dict[str, Dict[str, Any]] = {}
_cache_lock = threading.Lock()


# =============================================================================
# Cache Maintenance Functions
# =============================================================================

def _cleanup_expired_sessions() -> int:
    """
    Remove expired sessions from the cache.

    Returns:
        int: Number of sessions removed from cache

    Note:
        Only the in-memory cache is affected; the rows remain in the database
        and are restored on next access.
    """
    now = time.time()
    expired = []

    with _cache_lock:
        for sid, entry in SESSION_CACHE.items():
            if now - entry.get("last_access", 0) > config.SESSION_TTL_SECONDS:
                expired.append(sid)

        for sid in expired:
            del SESSION_CACHE[sid]

    if expired:
        logger.debug("Cleaned up %d expired sessions from cache", len(expired))

    return len(expired)


def _evict_oldest_sessions(count: int) -> None:
    """
    Evict the `count` least recently used sessions. Caller holds _cache_lock.
    """
    sorted_sessions = sorted(
        SESSION_CACHE.items(),
        key=lambda x: x[1].get("last_access", 0)
    )

    to_remove = sorted_sessions[:max(count, 1)]
    for sid, _ in to_remove:
        del SESSION_CACHE[sid]

    logger.debug("Evicted %d oldest sessions from cache", len(to_remove))


def _cache_put(session_id: str, session_data: Dict[str, Any]) -> None:
    with _cache_lock:
        if len(SESSION_CACHE) >= config.SESSION_MAX_CACHE_SIZE and session_id not in SESSION_CACHE:
            _evict_oldest_sessions(config.SESSION_MAX_CACHE_SIZE // 10)

        SESSION_CACHE[session_id] = {
            "data": copy.deepcopy(session_data),
            "last_access": time.time(),
        }


def _cache_fill(session_id: str, session_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Cache data loaded by a plain read, unless a writer cached the session first.

    Returns the data now held in the cache. A read never replaces an entry,
    since only writers hold the session lock.
    """
    with _cache_lock:
        entry = SESSION_CACHE.get(session_id)
        if entry is not None:
            entry["last_access"] = time.time()
            return copy.deepcopy(entry["data"])

        if len(SESSION_CACHE) >= config.SESSION_MAX_CACHE_SIZE:
            _evict_oldest_sessions(config.SESSION_MAX_CACHE_SIZE // 10)

        SESSION_CACHE[session_id] = {
            "data": copy.deepcopy(session_data),
            "last_access": time.time(),
        }
        return session_data


# =============================================================================
# Public Session Functions
# =============================================================================

def get_session_data(db: Session, session_id: str) -> Optional[Dict[str, Any]]:
    """
    Get session data from cache or database.

    Args:
        db: SQLAlchemy database session for queries
        session_id: Cart session identifier

    Returns:
        A copy of the stored data, or None if the session was never saved.
    """
    if random.randint(1, 100) == 1:
        _cleanup_expired_sessions()

    with _cache_lock:
        entry = SESSION_CACHE.get(session_id)
        if entry is not None:
            entry["last_access"] = time.time()
            return copy.deepcopy(entry["data"])

    db_session = db.query(CartSession).filter(
        CartSession.session_id == session_id
    ).first()

    if db_session is None:
        return None

    return _cache_fill(session_id, dict(db_session.data or {}))


def load_session_data_for_update(db: Session, session_id: str) -> Optional[Dict[str, Any]]:
    """
    Read session data straight from the database, bypassing the cache.

    Used by writers before a read-modify-write. The row is locked where the
    database supports SELECT ... FOR UPDATE, and the cache is refreshed with
    what was read, so a stale entry (left by another worker process) is never
    the base of a write.
    """
    db_session = (
        db.query(CartSession)
        .filter(CartSession.session_id == session_id)
        .with_for_update()
        .populate_existing()
        .first()
    )

    if db_session is None:
        return None

    session_data = dict(copy.deepcopy(db_session.data) or {})
    _cache_put(session_id, session_data)
    return session_data


def save_session_data(db: Session, session_id: str, session_data: Dict[str, Any]) -> None:
    """
    Save session data to both cache and database (upsert).

    Note:
        flag_modified() is needed so SQLAlchemy detects changes to the
        mutable JSON column.
    """
    _cache_put(session_id, session_data)

    db_session = db.query(CartSession).filter(
        CartSession.session_id == session_id
    ).first()

    if db_session:
        db_session.data = copy.deepcopy(session_data)
        flag_modified(db_session, "data")
    else:
        db_session = CartSession(
            session_id=session_id,
            data=copy.deepcopy(session_data),
        )
        db.add(db_session)

    db.commit()


def clear_cache() -> int:
    """
    Clear all sessions from the in-memory cache. Database rows are untouched.

    Returns:
        int: Number of sessions that were in cache before clearing
    """
    with _cache_lock:
        count = len(SESSION_CACHE)
        SESSION_CACHE.clear()
        logger.info("Cleared %d sessions from cache", count)
        return count


def get_cache_stats() -> Dict[str, Any]:
    """Size, limits and access-time bounds of the session cache."""
    with _cache_lock:
        access_times = [entry["last_access"] for entry in SESSION_CACHE.values()]
        return {
            "size": len(SESSION_CACHE),
            "max_size": config.SESSION_MAX_CACHE_SIZE,
            "ttl_seconds": config.SESSION_TTL_SECONDS,
            "oldest_access": min(access_times) if access_times else None,
            "newest_access": max(access_times) if access_times else None,
        }


# =============================================================================
# Session Backends
# =============================================================================

class SessionBackend(ABC):
    """get/set of a small JSON-serializable value keyed by session id."""

    @abstractmethod
    def get(self, session_id: str, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    @abstractmethod
    def set(self, session_id: str, key: str, value: Any) -> None:
        raise NotImplementedError

    def get_for_update(self, session_id: str, key: str, default: Any = None) -> Any:
        """Authoritative read for a read-modify-write; defaults to get()."""
        return self.get(session_id, key, default)


class InMemorySessionBackend(SessionBackend):
    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str, key: str, default: Any = None) -> Any:
        with self._lock:
            value = self._data.get(session_id, {}).get(key, default)
            return copy.deepcopy(value)

    def set(self, session_id: str, key: str, value: Any) -> None:
        with self._lock:
            self._data.setdefault(session_id, {})[key] = copy.deepcopy(value)


class DatabaseSessionBackend(SessionBackend):
    """Backend over the write-through cache and the `cart_sessions` table."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, session_id: str, key: str, default: Any = None) -> Any:
        data = get_session_data(self.db, session_id)
        if data is None:
            return default
        return data.get(key, default)

    def get_for_update(self, session_id: str, key: str, default: Any = None) -> Any:
        data = load_session_data_for_update(self.db, session_id)
        if data is None:
            return default
        return data.get(key, default)

    def set(self, session_id: str, key: str, value: Any) -> None:
        data = load_session_data_for_update(self.db, session_id) or {}
        data[key] = value
        save_session_data(self.db, session_id, data)
