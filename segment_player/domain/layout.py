"""Progress bar geometry: segment spans proportional to clip duration."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class PlayerGeometry:
    """Pixel constants of the player strip at the bottom of the canvas."""

    left_margin: int = 70
    right_margin: int = 30
    bar_height: int = 60
    progress_bar_height: int = 20
    play_button_diameter: int = 40
    play_button_x: int = 30

    def bar_width(self, canvas_width: float) -> float:
        return max(0.0, float(canvas_width) - self.left_margin - self.right_margin)

    def bar_top(self, canvas_height: float) -> float:
        return float(canvas_height) - self.bar_height

    def button_center(self, canvas_height: float) -> tuple[float, float]:
        return float(self.play_button_x), self.bar_top(canvas_height) + self.bar_height / 2

    def progress_bar_rect(
        self, canvas_width: float, canvas_height: float
    ) -> tuple[float, float, float, float]:
        """Return (x, y, width, height) of the progress bar."""
        y = (
            self.bar_top(canvas_height)
            + self.bar_height / 2
            - self.progress_bar_height / 2
        )
        return (
            float(self.left_margin),
            y,
            self.bar_width(canvas_width),
            float(self.progress_bar_height),
        )

    def hits_play_button(self, x: float, y: float, canvas_height: float) -> bool:
        cx, cy = self.button_center(canvas_height)
        return math.hypot(x - cx, y - cy) < self.play_button_diameter / 2

    def hits_progress_bar(
        self, x: float, y: float, canvas_width: float, canvas_height: float
    ) -> bool:
        bx, by, bw, bh = self.progress_bar_rect(canvas_width, canvas_height)
        return bx <= x <= bx + bw and by <= y <= by + bh


@dataclass(frozen=True)
class SegmentSpan:
    x: float
    width: float

    @property
    def end(self) -> float:
        return self.x + self.width


def calc_segment_positions(
    durations: Sequence[float],
    canvas_width: float,
    geometry: PlayerGeometry,
) -> list[SegmentSpan]:
    """Lay segments out left to right, each as wide as its share of the total.

    When the durations sum to zero (nothing decoded yet, or every clip failed)
    the bar is split into equal parts instead.
    """
    count = len(durations)
    if count == 0:
        return []
    bar_width = geometry.bar_width(canvas_width)
    clean = [max(0.0, float(value)) for value in durations]
    total = sum(clean)

    spans: list[SegmentSpan] = []
    current_x = float(geometry.left_margin)
    for duration in clean:
        if total > 0:
            width = (duration / total) * bar_width
        else:
            width = bar_width / count
        spans.append(SegmentSpan(current_x, width))
        current_x += width
    return spans


def segment_at(layout: Sequence[SegmentSpan], x: float) -> int | None:
    """Index of the span containing x, or None.

    Spans are half-open so a shared boundary belongs to the right-hand span;
    the last non-empty span also owns the right edge of the bar.
    """
    last_index = None
    for index, span in enumerate(layout):
        if span.width > 0:
            last_index = index
    if last_index is None:
        return None
    for index, span in enumerate(layout):
        if span.width <= 0:
            continue
        if span.x <= x < span.end:
            return index
        if index == last_index and x == span.end:
            return index
    return None


def time_in_span(span: SegmentSpan, x: float, duration: float) -> float:
    """Convert an x coordinate inside span into seconds within the segment."""
    if span.width <= 0 or duration <= 0:
        return 0.0
    ratio = max(0.0, min(1.0, (float(x) - span.x) / span.width))
    return ratio * float(duration)
