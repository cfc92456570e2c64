"""At-most-one-in-flight fetch coordination per player UUID."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable
from uuid import UUID

from globaltags.api.models import PlayerInfo

log = logging.getLogger(__name__)

FetchFn = Callable[[UUID], Awaitable["PlayerInfo | None"]]
Continuation = Callable[["PlayerInfo | None"], None]


class FetchCoordinator:
    """Runs the external fetch for a key unless one is already outstanding.

    The in-flight table and the store writer share ``lock`` with the owning
    cache. ``on_result`` is called with the lock held.

    A ``fetch`` for a key that is already in flight returns without ever
    calling its continuation; only the caller that started the fetch hears
    back.
    """

    def __init__(
        self,
        fetch: FetchFn,
        lock: threading.Lock,
        on_result: Callable[[UUID, PlayerInfo], None],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._fetch = fetch
        self._lock = lock
        self._on_result = on_result
        self._loop = loop or _running_loop()
        # key -> token of the fetch that owns the marker
        self._in_flight: dict[UUID, object] = {}
        # task -> (key, token) it was started for
        self._tasks: dict[asyncio.Task, tuple[UUID, object]] = {}
        # token -> key for fetches handed to the loop but not yet started
        self._handoffs: dict[object, UUID] = {}

    def is_in_flight(self, key: UUID) -> bool:
        with self._lock:
            return key in self._in_flight

    def in_flight(self) -> set[UUID]:
        with self._lock:
            return set(self._in_flight)

    def fetch(self, key: UUID, on_done: Continuation | None = None) -> bool:
        """Dispatch a fetch for ``key``. Returns False if one was already running."""
        token = object()
        with self._lock:
            if key in self._in_flight:
                log.debug("Fetch for %s already in flight, dropping request", key)
                return False
            self._in_flight[key] = token
        try:
            self._dispatch(key, token, on_done)
        except RuntimeError:
            self._release(key, token)
            raise
        return True

    def discard_all(self) -> None:
        """Forget every in-flight marker. Running fetches are not cancelled."""
        with self._lock:
            self._in_flight.clear()

    async def join(self) -> None:
        """Wait until every fetch dispatched to this loop, chained ones included, is done."""
        loop = asyncio.get_running_loop()
        while True:
            with self._lock:
                tasks = [t for t in self._tasks if t.get_loop() is loop and not t.done()]
                handed_off = bool(self._handoffs) and self._loop is loop
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)
            elif handed_off:
                await asyncio.sleep(0)
            else:
                return

    def _release(self, key: UUID, token: object) -> None:
        with self._lock:
            if self._in_flight.get(key) is token:
                del self._in_flight[key]

    def _dispatch(self, key: UUID, token: object, on_done: Continuation | None) -> None:
        running = _running_loop()
        if running is not None:
            if running is not self._loop:
                self._rebind(running)
            self._spawn(running, key, token, on_done)
            return

        loop = self._loop
        if loop is None or loop.is_closed() or not loop.is_running():
            raise RuntimeError("PlayerCache needs a running event loop to fetch")
        with self._lock:
            self._handoffs[token] = key
        try:
            loop.call_soon_threadsafe(self._spawn_handoff, key, token, on_done)
        except RuntimeError:
            with self._lock:
                self._handoffs.pop(token, None)
            raise

    def _rebind(self, loop: asyncio.AbstractEventLoop) -> None:
        old, self._loop = self._loop, loop
        if old is None or old.is_running():
            return
        log.debug("Event loop changed, dropping fetches left on the old loop")
        with self._lock:
            stale = [(t, k) for t, k in self._tasks.items() if t.get_loop() is old]
            for task, (key, token) in stale:
                del self._tasks[task]
                if self._in_flight.get(key) is token:
                    del self._in_flight[key]
            for token, key in self._handoffs.items():
                if self._in_flight.get(key) is token:
                    del self._in_flight[key]
            self._handoffs.clear()

    def _spawn(
        self,
        loop: asyncio.AbstractEventLoop,
        key: UUID,
        token: object,
        on_done: Continuation | None,
    ) -> None:
        task = loop.create_task(self._run(key, token, on_done))
        with self._lock:
            self._tasks[task] = (key, token)
        task.add_done_callback(self._forget)

    def _spawn_handoff(self, key: UUID, token: object, on_done: Continuation | None) -> None:
        loop = asyncio.get_running_loop()
        with self._lock:
            # Released by a rebind while queued.
            if self._handoffs.pop(token, None) is None:
                return
            task = loop.create_task(self._run(key, token, on_done))
            self._tasks[task] = (key, token)
        task.add_done_callback(self._forget)

    def _forget(self, task: asyncio.Task) -> None:
        with self._lock:
            self._tasks.pop(task, None)

    async def _run(self, key: UUID, token: object, on_done: Continuation | None) -> None:
        value: PlayerInfo | None = None
        try:
            value = await self._fetch(key)
        except asyncio.CancelledError:
            self._release(key, token)
            raise
        except Exception as exc:
            log.warning("Failed to fetch player info for %s: %s", key, exc)

        with self._lock:
            if value is not None:
                self._on_result(key, value)
            if self._in_flight.get(key) is token:
                del self._in_flight[key]

        if on_done is None:
            return
        try:
            on_done(value)
        except Exception:
            log.exception("Player info callback for %s failed", key)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
