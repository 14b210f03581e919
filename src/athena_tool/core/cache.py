"""Process-lifetime cache of completed named-query executions.

Entries are keyed by the named query's identifier (not its human name) and
hold the execution id whose results can be fetched again until the entry
expires. One lock guards the map; per-identity locks let the dispatcher run
at most one fresh execution per named query at a time.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

CACHE_TTL = timedelta(hours=12)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class CacheEntry:
    query_name: str
    execution_id: str
    expires_at: datetime
    work_group: str = ""

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class CacheStore:
    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or _utcnow
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._key_locks: dict[str, threading.Lock] = {}

    def now(self) -> datetime:
        return self._clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, query_id: object) -> bool:
        with self._lock:
            return query_id in self._entries

    def get(self, query_id: str) -> CacheEntry | None:
        """Return the entry for query_id, expired or not; None on a miss."""
        with self._lock:
            return self._entries.get(query_id)

    def get_fresh(self, query_id: str) -> CacheEntry | None:
        entry = self.get(query_id)
        if entry is None or entry.is_expired(self.now()):
            return None
        return entry

    def put(self, query_id: str, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[query_id] = entry

    def new_entry(
        self,
        query_name: str,
        execution_id: str,
        work_group: str = "",
        ttl: timedelta = CACHE_TTL,
    ) -> CacheEntry:
        return CacheEntry(
            query_name=query_name,
            execution_id=execution_id,
            expires_at=self.now() + ttl,
            work_group=work_group,
        )

    def sweep(self) -> list[str]:
        """Drop every entry whose expiration is strictly before now."""
        now = self.now()
        with self._lock:
            expired = [k for k, v in self._entries.items() if v.expires_at < now]
            for key in expired:
                del self._entries[key]
        if expired:
            structlog.get_logger().debug("cache sweep", removed=len(expired))
        return expired

    def reconcile(self, work_group: str, live_ids: Iterable[str]) -> list[str]:
        """Drop entries of work_group whose named query no longer exists."""
        live = set(live_ids)
        with self._lock:
            orphans = [
                k
                for k, v in self._entries.items()
                if v.work_group == work_group and k not in live
            ]
            for key in orphans:
                del self._entries[key]
        if orphans:
            structlog.get_logger().debug(
                "cache orphans removed", work_group=work_group, removed=len(orphans)
            )
        return orphans

    @contextmanager
    def hold(self, query_id: str) -> Iterator[None]:
        """Serialize lookup-then-execute for one named query identity."""
        with self._lock:
            lock = self._key_locks.setdefault(query_id, threading.Lock())
        with lock:
            yield
