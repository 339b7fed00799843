"""Ports the player core talks to."""

from __future__ import annotations

from typing import Protocol, Sequence


class DrawingSurface(Protocol):
    """Immediate-mode 2-D canvas in pixel coordinates, origin top-left."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def clear(self, color: str) -> None: ...

    def rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        fill: str,
        radius: float = 0,
    ) -> None: ...

    def circle(
        self,
        cx: float,
        cy: float,
        diameter: float,
        *,
        fill: str | None,
        outline: str | None = None,
        outline_width: float = 1,
    ) -> None: ...

    def triangle(self, points: Sequence[tuple[float, float]], *, fill: str) -> None: ...

    def line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        *,
        color: str,
        width: float = 1,
    ) -> None: ...

    def text(self, x: float, y: float, value: str, *, fill: str) -> None: ...

    def arc(
        self,
        cx: float,
        cy: float,
        diameter: float,
        start: float,
        extent: float,
        *,
        outline: str,
        width: float = 1,
    ) -> None:
        """Stroke an arc; angles in degrees, counter-clockwise from 3 o'clock."""
