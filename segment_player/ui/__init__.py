"""User interface layer."""

from .decorations import Shield, draw_grid
from .desktop_types import DesktopApp
from .tkinter_app import APP_TITLE, TkCanvasSurface, create_tkinter_app

__all__ = [
    "APP_TITLE",
    "DesktopApp",
    "Shield",
    "TkCanvasSurface",
    "create_tkinter_app",
    "draw_grid",
]
