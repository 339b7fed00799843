"""Colour palette for the player strip."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PlayerTheme:
    background: str = "#1e1e1e"
    grid: str = "#3f3f3f"
    accent: str = "#00ff64"
    button_fill: str = "#646464"
    button_outline: str = "#323232"
    glyph: str = "#ffffff"
    error_glyph: str = "#ff6b6b"
    bar_background: str = "#969696"
    completed: str = "#64c864"
    current: str = "#6496ff"
    future: str = "#c8c8c8"
    failed: str = "#c85050"
    progress: str = "#3264c8"
    separator: str = "#646464"
