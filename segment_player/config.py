"""Configuration loading from environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .audio import DEFAULT_BACKEND, normalize_backend
from .domain.layout import PlayerGeometry
from .utils import parse_int_env, resolve_path, split_path_list

DEFAULT_SEGMENT_FILES = "assets/01_intro.mp3,assets/02_zwei_zahlen.mp3"


@dataclass(frozen=True)
class AppConfig:
    log_level: str
    file_log_level: str
    log_dir: str
    log_file: str
    segment_files: tuple[str, ...]
    audio_backend: str = DEFAULT_BACKEND
    auto_advance: bool = False
    frame_rate: int = 60
    window_width: int = 800
    window_height: int = 800
    grid_spacing: int = 40
    decode_workers: int = 4
    geometry: PlayerGeometry = field(default_factory=PlayerGeometry)

    @property
    def frame_interval(self) -> float:
        return 1.0 / float(max(1, self.frame_rate))


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def load_geometry() -> PlayerGeometry:
    defaults = PlayerGeometry()
    return PlayerGeometry(
        left_margin=parse_int_env("BAR_LEFT_MARGIN", defaults.left_margin, min_value=0),
        right_margin=parse_int_env("BAR_RIGHT_MARGIN", defaults.right_margin, min_value=0),
        bar_height=parse_int_env("BAR_HEIGHT", defaults.bar_height, min_value=1),
        progress_bar_height=parse_int_env(
            "PROGRESS_BAR_HEIGHT", defaults.progress_bar_height, min_value=1
        ),
        play_button_diameter=parse_int_env(
            "PLAY_BUTTON_DIAMETER", defaults.play_button_diameter, min_value=1
        ),
        play_button_x=parse_int_env("PLAY_BUTTON_X", defaults.play_button_x, min_value=0),
    )


def load_config() -> AppConfig:
    base_dir = str(Path(__file__).resolve().parents[1])
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    file_log_level = os.getenv("FILE_LOG_LEVEL", "DEBUG").upper()
    log_dir = resolve_path(os.getenv("LOG_DIR", "logs"), base_dir)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(
        log_dir, f"player_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}.log"
    )
    segment_files = tuple(
        resolve_path(item, base_dir)
        for item in split_path_list(os.getenv("SEGMENT_FILES", DEFAULT_SEGMENT_FILES))
    )
    audio_backend = normalize_backend(os.getenv("AUDIO_BACKEND", DEFAULT_BACKEND))
    auto_advance = _env_flag("AUTO_ADVANCE", "0")
    frame_rate = parse_int_env("FRAME_RATE", 60, min_value=1, max_value=240)
    window_width = parse_int_env("WINDOW_WIDTH", 800, min_value=200, max_value=4000)
    window_height = parse_int_env("WINDOW_HEIGHT", 800, min_value=200, max_value=4000)
    grid_spacing = parse_int_env("GRID_SPACING", 40, min_value=0, max_value=1000)
    decode_workers = parse_int_env("DECODE_WORKERS", 4, min_value=1, max_value=32)
    return AppConfig(
        log_level=log_level,
        file_log_level=file_log_level,
        log_dir=log_dir,
        log_file=log_file,
        segment_files=segment_files,
        audio_backend=audio_backend,
        auto_advance=auto_advance,
        frame_rate=frame_rate,
        window_width=window_width,
        window_height=window_height,
        grid_spacing=grid_spacing,
        decode_workers=decode_workers,
        geometry=load_geometry(),
    )
