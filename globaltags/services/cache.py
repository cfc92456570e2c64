"""In-memory player info cache keyed by player UUID."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from uuid import UUID

from globaltags.api.models import PlayerInfo
from globaltags.config import FIVE_MINUTES_MS, THIRTY_MINUTES_MS
from globaltags.errors import SelfKeyMissingError
from globaltags.services.coordinator import Continuation, FetchCoordinator, FetchFn
from globaltags.services.scheduler import Scheduler

log = logging.getLogger(__name__)


class PlayerCache:
    """Player info cache with single-flight fetching and background upkeep.

    ``resolve`` returns the cached entry or starts a fetch; ``renew`` always
    fetches. Continuations receive the fetched ``PlayerInfo`` or ``None`` if the
    fetch failed. A call made while the same key is already being fetched is
    dropped and its continuation is never invoked.

    Two periodic jobs are registered on ``scheduler``: a full clear (followed
    by re-resolving the self key) every ``clear_interval`` ms and a renewal of
    every cached key every ``renew_interval`` ms. Pass -1 to disable either.
    """

    def __init__(
        self,
        fetch: FetchFn,
        self_key: Callable[[], UUID | None] = lambda: None,
        clear_interval: int = THIRTY_MINUTES_MS,
        renew_interval: int = FIVE_MINUTES_MS,
        scheduler: Scheduler | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._entries: dict[UUID, PlayerInfo] = {}
        self._self_key = self_key
        self._coordinator = FetchCoordinator(
            fetch, self._lock, self._entries.__setitem__, loop=loop
        )
        self.scheduler = scheduler or Scheduler()
        self.scheduler.every(clear_interval, self._clear_cycle, name="cache-clear")
        self.scheduler.every(renew_interval, self.renew_all, name="cache-renew")
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            log.debug("No running loop, scheduler starts when the API client starts")
        else:
            self.scheduler.start()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def keys(self) -> list[UUID]:
        with self._lock:
            return list(self._entries)

    def has(self, key: UUID) -> bool:
        return key in self

    def get(self, key: UUID) -> PlayerInfo | None:
        with self._lock:
            return self._entries.get(key)

    def is_resolving(self, key: UUID) -> bool:
        return self._coordinator.is_in_flight(key)

    def add(self, key: UUID, info: PlayerInfo) -> None:
        with self._lock:
            self._entries[key] = info

    def remove(self, key: UUID) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def remove_self(self) -> None:
        self.remove(self._require_self_key())

    def resolve(self, key: UUID, on_done: Continuation | None = None) -> None:
        """Deliver the cached entry, fetching it first if it is not cached."""
        info = self.get(key)
        if info is not None:
            if on_done is not None:
                try:
                    on_done(info)
                except Exception:
                    log.exception("Player info callback for %s failed", key)
            return
        self._coordinator.fetch(key, on_done)

    def resolve_self(self, on_done: Continuation | None = None) -> None:
        self.resolve(self._require_self_key(), on_done)

    def renew(self, key: UUID, on_done: Continuation | None = None) -> None:
        """Fetch ``key`` again, replacing the cached entry on success."""
        self._coordinator.fetch(key, on_done)

    def renew_self(self, on_done: Continuation | None = None) -> None:
        self.renew(self._require_self_key(), on_done)

    def renew_all(self) -> None:
        keys = self.keys()
        log.debug("Renewing %d cached player(s)", len(keys))
        for key in keys:
            self.renew(key)

    def clear(self) -> None:
        """Drop all entries and in-flight markers.

        Fetches already running still store their result when they finish.
        """
        with self._lock:
            self._entries.clear()
        self._coordinator.discard_all()

    async def join(self) -> None:
        """Wait for all outstanding fetches."""
        await self._coordinator.join()

    def _require_self_key(self) -> UUID:
        key = self._self_key()
        if key is None:
            raise SelfKeyMissingError()
        return key

    def _clear_cycle(self) -> None:
        self.clear()
        if self._self_key() is not None:
            self.resolve_self()
