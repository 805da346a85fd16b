"""Client-side query cache.

Holds the last known result of each query key and keeps at most one fetch
in flight per key. Entries move through a small state machine:

    ABSENT ──fetch──► LOADING ──settle──► SETTLED
                         ▲                   │
                         └──────refetch──────┘

A settled entry holds either data or an error (the previous data is kept
when a refetch fails). Invalidation only flags the entry as stale; the next
read, or the automatic refetch for observed keys, brings it back in line
with the server. Entries are replaced wholesale on every transition.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

import structlog

from catalog_manager.exceptions import CacheStateError

logger = structlog.get_logger()

QueryKey = tuple[str, ...]
Fetcher = Callable[[], Awaitable[Any]]


class QueryStatus(str, Enum):
    """Cache entry lifecycle states."""

    ABSENT = "absent"
    LOADING = "loading"
    SETTLED = "settled"

    def can_transition_to(self, target: "QueryStatus") -> bool:
        """Check if transition to target state is valid.

        Args:
            target: Target state to transition to.

        Returns:
            True if transition is valid.
        """
        return target in _QUERY_TRANSITIONS.get(self, set())


_QUERY_TRANSITIONS: dict[QueryStatus, set[QueryStatus]] = {
    QueryStatus.ABSENT: {QueryStatus.LOADING},
    QueryStatus.LOADING: {QueryStatus.SETTLED},
    QueryStatus.SETTLED: {QueryStatus.LOADING},
}


@dataclass(frozen=True)
class QueryState:
    """Immutable snapshot of a cache entry."""

    status: QueryStatus = QueryStatus.ABSENT
    data: Any = None
    error: Exception | None = None
    is_stale: bool = False

    @property
    def is_loading(self) -> bool:
        """True while the first fetch is in flight (no data to show yet)."""
        return self.status is QueryStatus.LOADING and self.data is None

    @property
    def is_fetching(self) -> bool:
        """True while any fetch is in flight."""
        return self.status is QueryStatus.LOADING

    @property
    def is_error(self) -> bool:
        """True when the last fetch failed."""
        return self.status is QueryStatus.SETTLED and self.error is not None

    @property
    def is_success(self) -> bool:
        """True when the last fetch succeeded."""
        return self.status is QueryStatus.SETTLED and self.error is None


Listener = Callable[[QueryState], None]

_ABSENT = QueryState()


class QueryCache:
    """Cache of query results keyed by tuples.

    Must be used from within a running event loop: fetches run as tasks so
    that concurrent readers can share them.
    """

    def __init__(self) -> None:
        self._states: dict[QueryKey, QueryState] = {}
        self._fetchers: dict[QueryKey, Fetcher] = {}
        self._in_flight: dict[QueryKey, asyncio.Task[QueryState]] = {}
        self._refetch_requested: set[QueryKey] = set()
        self._listeners: dict[QueryKey, list[Listener]] = {}

    # =========================================================================
    # Observation
    # =========================================================================

    def get_state(self, key: QueryKey) -> QueryState:
        """Get the current state of a key (ABSENT if never fetched)."""
        return self._states.get(key, _ABSENT)

    def subscribe(self, key: QueryKey, listener: Listener) -> Callable[[], None]:
        """Register a listener called synchronously on every transition of key.

        Args:
            key: Query key to observe.
            listener: Callback receiving the new state.

        Returns:
            Function that removes the listener.
        """
        self._listeners.setdefault(key, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(key, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def has_observers(self, key: QueryKey) -> bool:
        """Check whether any listener observes key."""
        return bool(self._listeners.get(key))

    def is_fetching(self, key: QueryKey) -> bool:
        """Check whether a fetch for key is in flight."""
        return key in self._in_flight

    # =========================================================================
    # Reads
    # =========================================================================

    async def ensure(self, key: QueryKey, fetcher: Fetcher) -> QueryState:
        """Read key, fetching when it is absent or stale.

        Concurrent callers share the in-flight fetch.

        Args:
            key: Query key.
            fetcher: Coroutine function producing the data for key.

        Returns:
            The settled state.
        """
        self._fetchers[key] = fetcher

        task = self._in_flight.get(key)
        if task is not None:
            return await task

        state = self.get_state(key)
        if state.status is QueryStatus.ABSENT or state.is_stale:
            return await self._start_fetch(key)
        return state

    async def refetch(self, key: QueryKey, fetcher: Fetcher | None = None) -> QueryState:
        """Force a fetch of key, joining one already in flight.

        Args:
            key: Query key.
            fetcher: Fetcher to use; defaults to the last one registered.

        Returns:
            The settled state.
        """
        if fetcher is not None:
            self._fetchers[key] = fetcher
        if key not in self._fetchers:
            raise KeyError(f"No fetcher registered for query {key!r}")

        task = self._in_flight.get(key)
        if task is not None:
            return await task
        return await self._start_fetch(key)

    async def wait_until_idle(self, key: QueryKey) -> QueryState:
        """Wait until no fetch for key is in flight."""
        while (task := self._in_flight.get(key)) is not None:
            await task
        return self.get_state(key)

    # =========================================================================
    # Invalidation
    # =========================================================================

    def invalidate(self, key: QueryKey) -> None:
        """Mark key as stale and refetch it if it is observed.

        A fetch already in flight may have read the server before the write
        that caused this invalidation, so one follow-up fetch is queued
        behind it instead of starting a concurrent one.

        Args:
            key: Query key.
        """
        state = self.get_state(key)
        if state.status is QueryStatus.ABSENT:
            return

        logger.debug("Invalidating query", query_key=key)
        self._set_state(key, replace(state, is_stale=True))

        if key in self._in_flight:
            self._refetch_requested.add(key)
            return

        if self.has_observers(key) and key in self._fetchers:
            self._start_fetch(key)

    # =========================================================================
    # Internals
    # =========================================================================

    def _start_fetch(self, key: QueryKey) -> asyncio.Task[QueryState]:
        task = asyncio.get_running_loop().create_task(self._run_fetch(key))
        self._in_flight[key] = task
        return task

    async def _run_fetch(self, key: QueryKey) -> QueryState:
        try:
            while True:
                self._refetch_requested.discard(key)
                state = await self._fetch_once(key)
                if key not in self._refetch_requested:
                    return state
        finally:
            self._in_flight.pop(key, None)

    async def _fetch_once(self, key: QueryKey) -> QueryState:
        previous = self.get_state(key)
        self._transition(
            key,
            replace(previous, status=QueryStatus.LOADING, error=None, is_stale=False),
        )

        logger.debug("Fetching query", query_key=key)
        try:
            data = await self._fetchers[key]()
        except Exception as e:
            logger.warning(
                "Query fetch failed",
                query_key=key,
                error_type=type(e).__name__,
                error=str(e),
            )
            settled = QueryState(
                status=QueryStatus.SETTLED,
                data=previous.data,
                error=e,
                is_stale=key in self._refetch_requested,
            )
        else:
            settled = QueryState(
                status=QueryStatus.SETTLED,
                data=data,
                is_stale=key in self._refetch_requested,
            )

        self._transition(key, settled)
        return settled

    def _transition(self, key: QueryKey, new_state: QueryState) -> None:
        current = self.get_state(key).status
        if not current.can_transition_to(new_state.status):
            raise CacheStateError(key, current.value, new_state.status.value)
        self._set_state(key, new_state)

    def _set_state(self, key: QueryKey, new_state: QueryState) -> None:
        self._states[key] = new_state
        for listener in list(self._listeners.get(key, [])):
            listener(new_state)
