"""Shared fakes for the audio and player tests.

Nothing here touches an audio device: segment position comes from a manual
clock and the end of a clip is signalled by the test itself.
"""

from __future__ import annotations

import pytest

from segment_player.audio.context import AudioContext
from segment_player.audio.segment import BaseSegment


class ManualClock:
    def __init__(self, start: float = 100.0):
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += float(seconds)


class Logger:
    def __init__(self):
        self.debugs = []
        self.infos = []
        self.warnings = []
        self.errors = []
        self.exceptions = []

    def debug(self, message, *args, **_kwargs):
        self.debugs.append(message % args if args else message)

    def info(self, message, *args, **_kwargs):
        self.infos.append(message % args if args else message)

    def warning(self, message, *args, **_kwargs):
        self.warnings.append(message % args if args else message)

    def error(self, message, *args, **_kwargs):
        self.errors.append(message % args if args else message)

    def exception(self, message, *args, **_kwargs):
        self.exceptions.append(message % args if args else message)


class RecordingSurface:
    def __init__(self, width: int = 400, height: int = 300):
        self.width = width
        self.height = height
        self.calls = []

    def clear(self, color):
        self.calls.append(("clear", color))

    def rect(self, x, y, width, height, *, fill, radius=0):
        self.calls.append(("rect", x, y, width, height, fill, radius))

    def circle(self, cx, cy, diameter, *, fill, outline=None, outline_width=1):
        self.calls.append(("circle", cx, cy, diameter, fill, outline))

    def triangle(self, points, *, fill):
        self.calls.append(("triangle", tuple(points), fill))

    def line(self, x1, y1, x2, y2, *, color, width=1):
        self.calls.append(("line", x1, y1, x2, y2, color))

    def text(self, x, y, value, *, fill):
        self.calls.append(("text", x, y, value, fill))

    def arc(self, cx, cy, diameter, start, extent, *, outline, width=1):
        self.calls.append(("arc", cx, cy, diameter, start, extent, outline))

    def of(self, kind):
        return [call for call in self.calls if call[0] == kind]


class FakeSegment(BaseSegment):
    backend_name = "fake"

    def __init__(
        self,
        source,
        context,
        *,
        duration: float = 1.0,
        error: Exception | None = None,
        gate=None,
        logger=None,
    ):
        super().__init__(source, context, logger=logger)
        self.fake_duration = duration
        self.fake_error = error
        self.gate = gate
        self.load_calls = 0
        self.output_log = []
        self.output_generation = None
        self.reported_end = None

    async def _load_resource(self) -> float:
        self.load_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fake_error is not None:
            raise self.fake_error
        return self.fake_duration

    def _start_output(self, offset, generation):
        self.output_log.append(("start", offset))
        self.output_generation = generation

    def _pause_output(self):
        self.output_log.append(("pause",))

    def _stop_output(self):
        self.output_log.append(("stop",))

    def _end_position(self) -> float:
        if self.reported_end is not None:
            return self.reported_end
        return super()._end_position()

    def finish(self, position: float | None = None) -> None:
        """Raise the backend end signal as if playback stopped at position."""
        self.reported_end = self.duration() if position is None else float(position)
        self._signal_end(self.output_generation)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def logger():
    return Logger()


@pytest.fixture
def make_context(clock):
    contexts = []

    def _make(**kwargs):
        kwargs.setdefault("clock", clock)
        context = AudioContext(**kwargs)
        contexts.append(context)
        return context

    yield _make
    for context in contexts:
        context.close()


@pytest.fixture
def make_segment():
    def _make(context, source="clip.mp3", **kwargs):
        return FakeSegment(source, context, **kwargs)

    return _make


@pytest.fixture
def surface():
    return RecordingSurface()
