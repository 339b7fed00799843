"""Desktop entrypoint for the segment player."""

from __future__ import annotations

import os
import platform
import sys

from segment_player.config import AppConfig, load_config
from segment_player.logging_config import setup_logging
from segment_player.ui import DesktopApp, create_tkinter_app

CONFIG = load_config()
logger = setup_logging(CONFIG)


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


SKIP_APP_INIT = _env_flag("SEGMENT_PLAYER_SKIP_APP_INIT")

logger.info("Starting app")
logger.info("Log file: %s", CONFIG.log_file)
logger.debug(
    "Log config: LOG_LEVEL=%s FILE_LOG_LEVEL=%s LOG_DIR=%s AUDIO_BACKEND=%s "
    "AUTO_ADVANCE=%s FRAME_RATE=%s WINDOW_WIDTH=%s WINDOW_HEIGHT=%s "
    "GRID_SPACING=%s DECODE_WORKERS=%s SEGMENT_FILES=%s",
    CONFIG.log_level,
    CONFIG.file_log_level,
    CONFIG.log_dir,
    CONFIG.audio_backend,
    CONFIG.auto_advance,
    CONFIG.frame_rate,
    CONFIG.window_width,
    CONFIG.window_height,
    CONFIG.grid_spacing,
    CONFIG.decode_workers,
    ",".join(CONFIG.segment_files),
)
logger.debug(
    "Python %s on %s (%s)",
    sys.version.split()[0],
    platform.system(),
    platform.machine(),
)


def build_desktop_app(config: AppConfig = CONFIG) -> DesktopApp:
    return create_tkinter_app(config=config, logger=logger)


def launch() -> None:
    if SKIP_APP_INIT:
        logger.info("SEGMENT_PLAYER_SKIP_APP_INIT enabled; launch skipped")
        return
    desktop_app = build_desktop_app()
    logger.info("Launching desktop app")
    desktop_app.launch()


if __name__ == "__main__":
    launch()
