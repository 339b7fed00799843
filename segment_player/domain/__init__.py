"""Pure geometry and styling used by the player."""

from .layout import (
    PlayerGeometry,
    SegmentSpan,
    calc_segment_positions,
    segment_at,
    time_in_span,
)
from .theme import PlayerTheme

__all__ = [
    "PlayerGeometry",
    "PlayerTheme",
    "SegmentSpan",
    "calc_segment_positions",
    "segment_at",
    "time_in_span",
]
