"""Application layer orchestration."""

from .player import PlayerState, SegmentPlayer
from .ports import DrawingSurface

__all__ = ["DrawingSurface", "PlayerState", "SegmentPlayer"]
