"""Tkinter host: a canvas redrawn every frame from an asyncio loop."""
from __future__ import annotations

import asyncio
import tkinter as tk
from typing import Any, Callable, Coroutine, Sequence

from ..application.player import SegmentPlayer
from ..audio import create_audio_context, create_segment
from ..config import AppConfig
from ..domain.theme import PlayerTheme
from ..errors import BackendUnavailableError
from .decorations import Shield, draw_grid
from .desktop_types import DesktopApp

APP_TITLE = "Segment Player"


class TkCanvasSurface:
    """DrawingSurface over a tkinter Canvas; clear() drops every item."""

    def __init__(self, canvas: tk.Canvas) -> None:
        self.canvas = canvas

    @property
    def width(self) -> int:
        return self._size("width", self.canvas.winfo_width())

    @property
    def height(self) -> int:
        return self._size("height", self.canvas.winfo_height())

    def _size(self, option: str, measured: int) -> int:
        # Before the window is mapped Tk reports 1x1; fall back to the requested size.
        if int(measured) > 1:
            return int(measured)
        try:
            return max(1, int(float(self.canvas.cget(option))))
        except (tk.TclError, ValueError):
            return 1

    def clear(self, color: str) -> None:
        self.canvas.delete("all")
        self.canvas.create_rectangle(0, 0, self.width, self.height, fill=color, outline="")

    def rect(self, x, y, width, height, *, fill: str, radius: float = 0) -> None:
        if width <= 0 or height <= 0:
            return
        radius = min(float(radius), width / 2.0, height / 2.0)
        if radius <= 0:
            self.canvas.create_rectangle(x, y, x + width, y + height, fill=fill, outline="")
            return
        right = x + width
        bottom = y + height
        points = [
            x + radius, y,
            right - radius, y,
            right, y,
            right, y + radius,
            right, bottom - radius,
            right, bottom,
            right - radius, bottom,
            x + radius, bottom,
            x, bottom,
            x, bottom - radius,
            x, y + radius,
            x, y,
        ]
        self.canvas.create_polygon(points, smooth=True, fill=fill, outline="")

    def circle(self, cx, cy, diameter, *, fill, outline=None, outline_width=1) -> None:
        r = diameter / 2.0
        self.canvas.create_oval(
            cx - r,
            cy - r,
            cx + r,
            cy + r,
            fill=fill or "",
            outline=outline or "",
            width=outline_width if outline else 0,
        )

    def triangle(self, points: Sequence[tuple[float, float]], *, fill: str) -> None:
        flat = [coordinate for point in points for coordinate in point]
        self.canvas.create_polygon(flat, fill=fill, outline="")

    def line(self, x1, y1, x2, y2, *, color: str, width: float = 1) -> None:
        self.canvas.create_line(x1, y1, x2, y2, fill=color, width=width)

    def text(self, x, y, value: str, *, fill: str) -> None:
        self.canvas.create_text(x, y, text=value, fill=fill, anchor="center")

    def arc(self, cx, cy, diameter, start, extent, *, outline: str, width: float = 1) -> None:
        r = diameter / 2.0
        self.canvas.create_arc(
            cx - r,
            cy - r,
            cx + r,
            cy + r,
            start=start,
            extent=extent,
            style=tk.ARC,
            outline=outline,
            width=width,
        )


class TkinterSegmentPlayerApp(DesktopApp):
    """Window with the decorated canvas and the segment player strip."""

    def __init__(
        self,
        *,
        config: AppConfig,
        logger,
        theme: PlayerTheme | None = None,
        segment_factory: Callable[..., Any] | None = None,
        context_factory: Callable[..., Any] | None = None,
    ) -> None:
        self.title = APP_TITLE
        self.config = config
        self.logger = logger
        self.theme = theme or PlayerTheme()
        self.segment_factory = segment_factory or create_segment
        self.context_factory = context_factory or create_audio_context

        self.root: tk.Tk | None = None
        self.canvas: tk.Canvas | None = None
        self.surface: TkCanvasSurface | None = None
        self.context = None
        self.player: SegmentPlayer | None = None
        self.shield: Shield | None = None
        self.running = False
        self._tasks: set[asyncio.Task] = set()

    def launch(self) -> None:
        asyncio.run(self.run())

    async def run(self) -> None:
        self._ensure_root()
        self.setup()
        self.running = True
        try:
            while self.running:
                self.frame()
                await asyncio.sleep(self.config.frame_interval)
        finally:
            self.teardown()

    def build_for_test(self) -> tk.Tk:
        """Build root/widgets without entering the frame loop (for tests)."""
        self._ensure_root()
        assert self.root is not None
        return self.root

    def _ensure_root(self) -> None:
        if self.root is not None:
            return
        root = tk.Tk()
        root.title(APP_TITLE)
        root.geometry(f"{self.config.window_width}x{self.config.window_height}")
        canvas = tk.Canvas(
            root,
            width=self.config.window_width,
            height=self.config.window_height,
            highlightthickness=0,
            background=self.theme.background,
        )
        canvas.pack(fill=tk.BOTH, expand=True)
        root.bind("<KeyPress>", self._on_key)
        canvas.bind("<Button-1>", self._on_click)
        root.protocol("WM_DELETE_WINDOW", self._on_close)
        self.root = root
        self.canvas = canvas
        self.surface = TkCanvasSurface(canvas)
        self.logger.debug("Tkinter UI wiring complete")

    def setup(self) -> None:
        """Create the audio context, segments and player; needs a running loop."""
        assert self.surface is not None
        try:
            self.context = self.context_factory(
                self.config.audio_backend,
                logger=self.logger,
                decode_workers=self.config.decode_workers,
            )
            segments = [
                self.segment_factory(
                    path,
                    self.context,
                    backend=self.config.audio_backend,
                    logger=self.logger,
                )
                for path in self.config.segment_files
            ]
        except BackendUnavailableError:
            self.logger.exception("Audio backend %s unavailable", self.config.audio_backend)
            raise
        for segment in segments:
            segment.on_completion(
                lambda segment=segment: self.logger.info("Segment played: %s", segment.name)
            )
        self.player = SegmentPlayer(
            self.surface,
            segments,
            context=self.context,
            geometry=self.config.geometry,
            theme=self.theme,
            auto_advance=self.config.auto_advance,
            on_finished=self._on_sequence_finished,
            logger=self.logger,
        )
        self.shield = Shield(200, 200, 50, color=self.theme.accent)
        self.logger.info(
            "Player ready: %d segments, backend=%s",
            len(segments),
            self.config.audio_backend,
        )

    def frame(self) -> None:
        assert self.root is not None and self.surface is not None
        try:
            self.root.update()
        except tk.TclError:
            self.running = False
            return
        if not self.running or self.player is None:
            return
        self.surface.clear(self.theme.background)
        draw_grid(self.surface, self.config.grid_spacing, color=self.theme.grid)
        if self.shield is not None:
            self.shield.display(self.surface)
        self.player.update()
        self.player.draw()
        self.root.update_idletasks()

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.logger.error("Tkinter UI action failed", exc_info=exc)

    def _on_key(self, event: tk.Event) -> None:
        if self.player is None:
            return
        key = event.char or str(event.keysym).lower()
        self._spawn(self.player.key_typed(key))

    def _on_click(self, event: tk.Event) -> None:
        if self.player is None:
            return
        self._spawn(self.player.handle_click(event.x, event.y))

    def _on_sequence_finished(self) -> None:
        self.logger.info("All segments played")

    def _on_close(self) -> None:
        self.running = False

    def teardown(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        if self.player is not None:
            self.player.close()
            self.player = None
        if self.context is not None:
            self.context.close()
            self.context = None
        if self.root is not None:
            try:
                self.root.destroy()
            except tk.TclError:
                pass
            self.root = None
        self.logger.debug("Tkinter UI torn down")


def create_tkinter_app(
    *,
    config: AppConfig,
    logger,
    theme: PlayerTheme | None = None,
    segment_factory: Callable[..., Any] | None = None,
    context_factory: Callable[..., Any] | None = None,
) -> DesktopApp:
    """Create the Tkinter desktop app instance."""
    return TkinterSegmentPlayerApp(
        config=config,
        logger=logger,
        theme=theme,
        segment_factory=segment_factory,
        context_factory=context_factory,
    )
