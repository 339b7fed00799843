"""Process-wide audio resources shared by every segment."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, TypeVar

T = TypeVar("T")

_LOGGER = logging.getLogger("segment_player.audio")


class AudioContext:
    """Clock, decode workers and native handles with an explicit lifecycle.

    Created once inside the running event loop. Output is "unlocked" lazily on
    the first user gesture via resume(), and everything is released by close().
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        clock: Callable[[], float] = time.monotonic,
        decode_workers: int = 4,
        output_probe: Callable[[], str] | None = None,
        logger=None,
    ) -> None:
        self.loop = loop if loop is not None else asyncio.get_running_loop()
        self.logger = logger or _LOGGER
        self._clock = clock
        self._origin = clock()
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, int(decode_workers)),
            thread_name_prefix="segment-decode",
        )
        self._output_probe = output_probe
        self._resources: dict[str, tuple[Any, Callable[[Any], None] | None]] = {}
        self._resources_lock = threading.Lock()
        self.unlocked = False
        self.closed = False

    @property
    def current_time(self) -> float:
        """Seconds since the context was created."""
        return self._clock() - self._origin

    def resume(self) -> None:
        if self.unlocked or self.closed:
            return
        self.unlocked = True
        if self._output_probe is None:
            self.logger.debug("Audio output unlocked")
            return
        try:
            device = self._output_probe()
        except Exception:
            self.logger.exception("Failed to query audio output device")
            return
        self.logger.info("Audio output unlocked: %s", device)

    async def run_blocking(self, func: Callable[..., T], *args: Any) -> T:
        if self.closed:
            raise RuntimeError("Audio context is closed")
        return await self.loop.run_in_executor(self._executor, func, *args)

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        """Schedule callback on the loop thread; safe from audio threads."""
        if self.closed or self.loop.is_closed():
            return
        self.loop.call_soon_threadsafe(callback, *args)

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, float(delay)), callback, *args)

    def resource(
        self,
        key: str,
        factory: Callable[[], Any],
        release: Callable[[Any], None] | None = None,
    ) -> Any:
        """Return the shared native handle for key, creating it once."""
        if self.closed:
            raise RuntimeError("Audio context is closed")
        with self._resources_lock:
            entry = self._resources.get(key)
            if entry is None:
                entry = (factory(), release)
                self._resources[key] = entry
                self.logger.debug("Created shared audio resource: %s", key)
        return entry[0]

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        for key, (handle, release) in list(self._resources.items()):
            if release is None:
                continue
            try:
                release(handle)
            except Exception:
                self.logger.exception("Failed to release audio resource %s", key)
        self._resources.clear()
        self._executor.shutdown(wait=False, cancel_futures=True)
        self.logger.debug("Audio context closed")
