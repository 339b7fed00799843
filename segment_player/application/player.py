"""Sequential segment player: sequencing, load barrier, layout and drawing."""

from __future__ import annotations

import asyncio
import functools
import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable, Sequence

from ..audio.segment import LoadState, Segment
from ..domain.layout import (
    PlayerGeometry,
    SegmentSpan,
    calc_segment_positions,
    segment_at,
    time_in_span,
)
from ..domain.theme import PlayerTheme
from .ports import DrawingSurface

if TYPE_CHECKING:
    from ..audio.context import AudioContext

_LOGGER = logging.getLogger("segment_player.player")

SPACE_KEYS = {" ", "space"}


class PlayerState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    EXHAUSTED = "exhausted"


class SegmentPlayer:
    """Plays segments one after another behind a play button and progress bar.

    update() and draw() are called once per frame and never wait. Loading runs
    as one task per segment joined by a single barrier task; play() awaits that
    barrier when it has not settled yet. Segment completion arrives through
    the segment's own end signal and is applied as one synchronous transition.
    """

    def __init__(
        self,
        surface: DrawingSurface,
        segments: Sequence[Segment],
        *,
        context: "AudioContext",
        geometry: PlayerGeometry | None = None,
        theme: PlayerTheme | None = None,
        auto_advance: bool = False,
        on_finished: Callable[[], None] | None = None,
        logger=None,
    ) -> None:
        self.surface = surface
        self.segments = tuple(segments)
        self.context = context
        self.geometry = geometry or PlayerGeometry()
        self.theme = theme or PlayerTheme()
        self.auto_advance = bool(auto_advance)
        self.on_finished = on_finished
        self.logger = logger or _LOGGER

        self.active_index = 0
        self.playing = False
        self.all_loaded = False
        self.pending_seek_offset: float | None = None
        self.last_known_width = int(surface.width)
        self.layout: list[SegmentSpan] = []
        self._barrier_settled = False
        self._finished_fired = False
        self._closed = False
        self._loaded_event = asyncio.Event()

        for index, segment in enumerate(self.segments):
            segment.on_completion(functools.partial(self._on_segment_completed, index))
        self._recompute_layout()
        self._load_task = context.loop.create_task(self._load_all())

    # -- derived state ---------------------------------------------------

    @property
    def state(self) -> PlayerState:
        if self.active_index >= len(self.segments):
            return PlayerState.EXHAUSTED
        return PlayerState.ACTIVE if self.playing else PlayerState.IDLE

    @property
    def has_failures(self) -> bool:
        return any(segment.load_state is LoadState.FAILED for segment in self.segments)

    @property
    def active_segment(self) -> Segment | None:
        if self.active_index >= len(self.segments):
            return None
        return self.segments[self.active_index]

    def has_playable(self) -> bool:
        return any(segment.is_loaded() for segment in self.segments)

    def _next_playable(self, start: int) -> int:
        for index in range(max(0, start), len(self.segments)):
            if self.segments[index].is_loaded():
                return index
        return len(self.segments)

    # -- loading ---------------------------------------------------------

    async def _load_all(self) -> None:
        self.logger.debug("Loading %d segments", len(self.segments))
        results = await asyncio.gather(
            *(segment.load() for segment in self.segments),
            return_exceptions=True,
        )
        for segment, result in zip(self.segments, results):
            if isinstance(result, BaseException):
                self.logger.error("Segment %s failed to settle: %r", segment.source, result)
        self.all_loaded = True
        self._barrier_settled = True
        self._loaded_event.set()
        ready = sum(1 for segment in self.segments if segment.is_loaded())
        if ready == len(self.segments):
            self.logger.info("All %d segments loaded", ready)
        else:
            self.logger.warning(
                "Loaded %d of %d segments; %d failed",
                ready,
                len(self.segments),
                len(self.segments) - ready,
            )

    async def wait_loaded(self) -> None:
        await self._loaded_event.wait()

    # -- transport -------------------------------------------------------

    async def play(self) -> None:
        if self._closed:
            return
        if not self.all_loaded:
            self.logger.debug("Play requested while loading; waiting for segments")
            await self._loaded_event.wait()
            if self._closed:
                return
        if self.playing:
            return
        if self.active_index >= len(self.segments):
            for segment in self.segments:
                segment.stop()
            self.active_index = 0
            self.pending_seek_offset = None
            self._finished_fired = False
        self._start_active()

    def _start_active(self) -> bool:
        index = self._next_playable(self.active_index)
        if index >= len(self.segments):
            index = self._next_playable(0)
            self._finished_fired = False
            if index >= len(self.segments):
                self.logger.warning("No playable segments")
                return False
        if index != self.active_index:
            self.pending_seek_offset = None
        self.active_index = index
        segment = self.segments[index]
        offset = self.pending_seek_offset
        self.pending_seek_offset = None
        segment.play(offset)
        self.playing = segment.is_playing()
        if not self.playing:
            self.logger.warning("Segment %s did not start", segment.source)
        return self.playing

    def pause(self) -> None:
        if not self.playing:
            return
        segment = self.active_segment
        if segment is not None:
            segment.pause()
        self.playing = False

    async def toggle_play(self) -> None:
        if self.playing:
            self.pause()
        else:
            await self.play()

    def _on_segment_completed(self, index: int) -> None:
        if self._closed or index != self.active_index:
            self.logger.debug("Ignoring completion of inactive segment %d", index)
            return
        self.active_index = self._next_playable(index + 1)
        self.playing = False
        self.pending_seek_offset = None
        if self.active_index >= len(self.segments):
            self._fire_finished()
            return
        if self.auto_advance:
            self._start_active()

    def _fire_finished(self) -> None:
        if self._finished_fired:
            return
        self._finished_fired = True
        self.logger.info("Finished playing all segments")
        if self.on_finished is None:
            return
        try:
            self.on_finished()
        except Exception:
            self.logger.exception("on_finished callback failed")

    # -- input -----------------------------------------------------------

    async def handle_click(self, x: float, y: float) -> None:
        self.context.resume()
        if self._closed:
            return
        width, height = self.surface.width, self.surface.height
        if self.geometry.hits_play_button(x, y, height):
            # play() waits for the load barrier
            await self.toggle_play()
            return
        if not self.all_loaded:
            return
        if not self.geometry.hits_progress_bar(x, y, width, height):
            return
        index = segment_at(self.layout, x)
        if index is None:
            return
        segment = self.segments[index]
        if not segment.is_loaded():
            return
        jump_time = time_in_span(self.layout[index], x, segment.duration())

        active = self.active_segment
        if active is not None:
            active.stop()
        self.active_index = index
        self._finished_fired = False
        segment.seek(jump_time)
        self.logger.debug("Seek to segment %d at %.3fs", index, jump_time)
        if self.playing:
            self.pending_seek_offset = None
            segment.play(jump_time)
            self.playing = segment.is_playing()
        else:
            self.pending_seek_offset = jump_time

    async def key_typed(self, key: str) -> None:
        if key not in SPACE_KEYS:
            return
        self.context.resume()
        await self.toggle_play()

    # -- frame -----------------------------------------------------------

    def update(self) -> None:
        if self._closed:
            return
        width = int(self.surface.width)
        if width != self.last_known_width:
            self.last_known_width = width
            self._recompute_layout()
        if self._barrier_settled:
            self._barrier_settled = False
            self._recompute_layout()

    def _recompute_layout(self) -> None:
        durations = [segment.duration() for segment in self.segments]
        self.layout = calc_segment_positions(durations, self.last_known_width, self.geometry)

    def draw(self) -> None:
        surface = self.surface
        geometry = self.geometry
        theme = self.theme
        cx, cy = geometry.button_center(surface.height)

        surface.circle(
            cx,
            cy,
            geometry.play_button_diameter,
            fill=theme.button_fill,
            outline=theme.button_outline,
            outline_width=2,
        )
        if not self.all_loaded:
            surface.text(cx, cy, "...", fill=theme.glyph)
            return
        if not self.has_playable():
            surface.text(cx, cy, "!", fill=theme.error_glyph)
        elif not self.playing:
            surface.triangle(
                [(cx - 6, cy - 10), (cx - 6, cy + 10), (cx + 8, cy)],
                fill=theme.glyph,
            )
        else:
            surface.rect(cx - 8, cy - 10, 6, 20, fill=theme.glyph)
            surface.rect(cx + 2, cy - 10, 6, 20, fill=theme.glyph)

        bar_x, bar_y, bar_width, bar_height = geometry.progress_bar_rect(
            surface.width, surface.height
        )
        surface.rect(bar_x, bar_y, bar_width, bar_height, fill=theme.bar_background, radius=5)
        last = len(self.segments) - 1
        for index, (segment, span) in enumerate(zip(self.segments, self.layout)):
            surface.rect(
                span.x,
                bar_y,
                span.width,
                bar_height,
                fill=self._segment_fill(index, segment),
                radius=5,
            )
            if index == self.active_index and segment.is_loaded():
                progress = segment.current_time() / segment.duration()
                surface.rect(
                    span.x,
                    bar_y,
                    span.width * progress,
                    bar_height,
                    fill=theme.progress,
                    radius=5,
                )
            if index < last:
                surface.line(
                    span.end,
                    bar_y,
                    span.end,
                    bar_y + bar_height,
                    color=theme.separator,
                    width=1,
                )

    def _segment_fill(self, index: int, segment: Segment) -> str:
        if segment.load_state is LoadState.FAILED:
            return self.theme.failed
        if index < self.active_index:
            return self.theme.completed
        if index == self.active_index:
            return self.theme.current
        return self.theme.future

    # -- teardown --------------------------------------------------------

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.playing = False
        if not self._load_task.done():
            self._load_task.cancel()
        for segment in self.segments:
            try:
                segment.stop()
                segment.close()
            except Exception:
                self.logger.exception("Failed to close segment %s", segment.source)
        self._loaded_event.set()
        self.logger.debug("Player closed")
