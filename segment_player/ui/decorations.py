"""Background decoration drawn behind the player strip."""

from __future__ import annotations

import math

from ..application.ports import DrawingSurface


def draw_grid(surface: DrawingSurface, spacing: int, *, color: str) -> None:
    if spacing <= 0:
        return
    width, height = surface.width, surface.height
    for x in range(0, width, spacing):
        surface.line(x, 0, x, height, color=color)
    for y in range(0, height, spacing):
        surface.line(0, y, width, y, color=color)


class Shield:
    """Half-circle arc that turns a little every frame."""

    def __init__(
        self,
        x: float,
        y: float,
        diameter: float,
        *,
        color: str,
        step: float = 0.02,
    ) -> None:
        self.x = float(x)
        self.y = float(y)
        self.diameter = float(diameter)
        self.color = color
        self.step = float(step)
        self.angle = 0.0

    def display(self, surface: DrawingSurface) -> None:
        # Screen y grows downwards, so a positive rotation turns clockwise.
        start = -math.degrees(self.angle) % 360.0
        surface.arc(self.x, self.y, self.diameter, start, -180.0, outline=self.color)
        self.angle += self.step
