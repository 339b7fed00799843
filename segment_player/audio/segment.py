"""Segment capability contract and the bookkeeping shared by all backends."""

from __future__ import annotations

import asyncio
import logging
import os
from enum import Enum
from typing import TYPE_CHECKING, Callable, Protocol

from ..errors import LoadError
from ..utils import clamp

if TYPE_CHECKING:
    from .context import AudioContext

COMPLETION_EPSILON = 0.01

_LOGGER = logging.getLogger("segment_player.audio")


class LoadState(Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class PlayState(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


class Segment(Protocol):
    """What the player needs from one playable clip."""

    source: str
    load_state: LoadState
    play_state: PlayState
    start_offset: float

    async def load(self) -> LoadState: ...

    def is_loaded(self) -> bool: ...

    def duration(self) -> float: ...

    def play(self, from_offset: float | None = None) -> None: ...

    def pause(self) -> None: ...

    def stop(self) -> None: ...

    def seek(self, position: float) -> None: ...

    def current_time(self) -> float: ...

    def is_playing(self) -> bool: ...

    def on_completion(self, callback: Callable[[], None]) -> "Segment": ...

    def close(self) -> None: ...


class BaseSegment:
    """State machine common to every backend.

    Subclasses provide the native pieces: _load_resource() decodes or opens the
    clip and returns its duration, _start_output()/_stop_output() drive the
    device, and the backend reports the end of the clip through
    _signal_end(generation) from whatever thread its engine uses.
    """

    backend_name = "base"

    def __init__(self, source, context: "AudioContext", *, logger=None) -> None:
        self.source = os.fspath(source)
        self.context = context
        self.logger = logger or _LOGGER
        self.load_state = LoadState.UNLOADED
        self.play_state = PlayState.STOPPED
        self.start_offset = 0.0
        self.anchor_time = 0.0
        self.error: Exception | None = None
        self._duration = 0.0
        self._load_task: asyncio.Future | None = None
        self._generation = 0
        self._completion_listeners: list[Callable[[], None]] = []
        self._cues: list[tuple[float, Callable[[], None]]] = []
        self._cue_handles: list[asyncio.TimerHandle] = []
        self._closed = False

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.name!r}, load={self.load_state.value}, "
            f"play={self.play_state.value})"
        )

    @property
    def name(self) -> str:
        return os.path.basename(self.source) or self.source

    # -- loading ---------------------------------------------------------

    async def load(self) -> LoadState:
        if self.load_state in (LoadState.READY, LoadState.FAILED):
            return self.load_state
        if self._load_task is None:
            self.load_state = LoadState.LOADING
            self._load_task = asyncio.ensure_future(self._run_load())
        # Shielded so one cancelled waiter does not abort the shared load.
        return await asyncio.shield(self._load_task)

    async def _run_load(self) -> LoadState:
        self.logger.debug("Loading segment %s (%s)", self.source, self.backend_name)
        try:
            duration = float(await self._load_resource())
            if duration <= 0:
                raise LoadError(self.source, "clip has no audio")
        except asyncio.CancelledError:
            self.load_state = LoadState.FAILED
            raise
        except Exception as exc:
            self.logger.exception("Failed to load segment %s", self.source)
            self.error = exc if isinstance(exc, LoadError) else LoadError(self.source, exc)
            self.load_state = LoadState.FAILED
            return self.load_state
        self._duration = duration
        self.load_state = LoadState.READY
        self.logger.debug("Loaded segment %s (%.3fs)", self.source, duration)
        return self.load_state

    async def _load_resource(self) -> float:
        raise NotImplementedError

    def is_loaded(self) -> bool:
        return self.load_state is LoadState.READY and not self._closed

    def duration(self) -> float:
        if self.load_state is not LoadState.READY:
            return 0.0
        return self._duration

    # -- transport -------------------------------------------------------

    def play(self, from_offset: float | None = None) -> None:
        if not self.is_loaded() or self.play_state is PlayState.PLAYING:
            return
        offset = self.start_offset if from_offset is None else float(from_offset)
        offset = clamp(offset, 0.0, self._duration)
        self._generation += 1
        generation = self._generation
        try:
            self._start_output(offset, generation)
        except Exception:
            self.logger.exception("Failed to start playback of %s", self.source)
            self._generation += 1
            return
        self.start_offset = offset
        self.anchor_time = self.context.current_time
        self.play_state = PlayState.PLAYING
        self._arm_cues(offset, generation)
        self.logger.debug("Playing %s from %.3fs", self.name, offset)

    def pause(self) -> None:
        if self.play_state is not PlayState.PLAYING:
            return
        position = self.current_time()
        self._invalidate()
        try:
            self._pause_output()
        except Exception:
            self.logger.exception("Failed to pause playback of %s", self.source)
        self.start_offset = position
        self.play_state = PlayState.PAUSED
        self.logger.debug("Paused %s at %.3fs", self.name, position)

    def stop(self) -> None:
        if self.play_state is not PlayState.STOPPED:
            self._invalidate()
            self._release_output()
        self.start_offset = 0.0
        self.play_state = PlayState.STOPPED

    def seek(self, position: float) -> None:
        self.stop()
        if self.is_loaded():
            self.start_offset = clamp(float(position), 0.0, self._duration)

    def current_time(self) -> float:
        if not self.is_loaded():
            return 0.0
        if self.play_state is PlayState.PLAYING:
            value = self._playing_position()
        else:
            value = self.start_offset
        return clamp(value, 0.0, self._duration)

    def is_playing(self) -> bool:
        return self.play_state is PlayState.PLAYING

    def _playing_position(self) -> float:
        return self.context.current_time - self.anchor_time + self.start_offset

    # -- callbacks -------------------------------------------------------

    def on_completion(self, callback: Callable[[], None]) -> "BaseSegment":
        """Call callback each time playback reaches the end of the clip."""
        self._completion_listeners.append(callback)
        return self

    then = on_completion

    def add_cue(self, at_seconds: float, callback: Callable[[], None]) -> "BaseSegment":
        """Call callback when playback passes at_seconds into the clip."""
        self._cues.append((max(0.0, float(at_seconds)), callback))
        return self

    def _arm_cues(self, offset: float, generation: int) -> None:
        for at_seconds, callback in self._cues:
            if at_seconds < offset or at_seconds > self._duration:
                continue
            handle = self.context.call_later(
                at_seconds - offset, self._fire_cue, generation, callback
            )
            self._cue_handles.append(handle)

    def _fire_cue(self, generation: int, callback: Callable[[], None]) -> None:
        if generation != self._generation or self.play_state is not PlayState.PLAYING:
            return
        try:
            callback()
        except Exception:
            self.logger.exception("Cue callback failed for %s", self.source)

    def _invalidate(self) -> None:
        """Retire the current play() run: pending cues and end signals go stale."""
        self._generation += 1
        for handle in self._cue_handles:
            handle.cancel()
        self._cue_handles.clear()

    def _signal_end(self, generation: int) -> None:
        """Backend end-of-playback notification; callable from any thread."""
        self.context.call_soon(self._handle_end, generation)

    def _handle_end(self, generation: int) -> None:
        if generation != self._generation or self.play_state is not PlayState.PLAYING:
            self.logger.debug("Ignoring stale end signal for %s", self.name)
            return
        position = self._end_position()
        if abs(position - self._duration) >= COMPLETION_EPSILON:
            self.logger.debug(
                "End signal for %s at %.3fs before clip end %.3fs",
                self.name,
                position,
                self._duration,
            )
            return
        self._invalidate()
        self._release_output()
        self.start_offset = 0.0
        self.play_state = PlayState.STOPPED
        self.logger.debug("Segment completed: %s", self.name)
        for listener in list(self._completion_listeners):
            try:
                listener()
            except Exception:
                self.logger.exception("Completion callback failed for %s", self.source)

    def _end_position(self) -> float:
        return self.current_time()

    # -- backend hooks ---------------------------------------------------

    def _start_output(self, offset: float, generation: int) -> None:
        raise NotImplementedError

    def _stop_output(self) -> None:
        raise NotImplementedError

    def _pause_output(self) -> None:
        self._stop_output()

    def _release_output(self) -> None:
        try:
            self._stop_output()
        except Exception:
            self.logger.exception("Failed to stop playback of %s", self.source)

    def close(self) -> None:
        if self._closed:
            return
        self.stop()
        self._invalidate()
        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()
        self._closed = True
        self._close_resources()

    def _close_resources(self) -> None:
        pass
