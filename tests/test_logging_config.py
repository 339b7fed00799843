import logging
from pathlib import Path

from segment_player.config import AppConfig
from segment_player.logging_config import LOGGER_NAME, setup_logging


def _build_config(tmp_path: Path) -> AppConfig:
    log_dir = tmp_path / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return AppConfig(
        log_level="WARNING",
        file_log_level="DEBUG",
        log_dir=str(log_dir),
        log_file=str(log_dir / "player.log"),
        segment_files=(),
    )


def _close_handlers(*loggers):
    for logger in loggers:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()


def test_setup_logging_replaces_handlers(tmp_path):
    config = _build_config(tmp_path)
    logger = setup_logging(config)
    logger_again = setup_logging(config)

    try:
        assert logger is logger_again
        assert logger.name == LOGGER_NAME
        assert len(logger.handlers) == 2
        assert not logger.propagate
        assert Path(config.log_file).exists()
        console, file_handler = logger.handlers
        assert console.level == logging.WARNING
        assert file_handler.level == logging.DEBUG
    finally:
        _close_handlers(
            logger, logging.getLogger("py.warnings"), logging.getLogger("asyncio")
        )


def test_child_loggers_and_warnings_reach_log_file(tmp_path):
    config = _build_config(tmp_path)
    logger = setup_logging(config)

    try:
        logging.getLogger(f"{LOGGER_NAME}.audio").debug("decoded %s", "intro.mp3")
        logging.getLogger("py.warnings").warning("device busy")
        logging.getLogger("asyncio").warning("slow callback")
        for handler in logger.handlers:
            handler.flush()
        content = Path(config.log_file).read_text(encoding="utf-8")
    finally:
        _close_handlers(
            logger, logging.getLogger("py.warnings"), logging.getLogger("asyncio")
        )

    assert "decoded intro.mp3" in content
    assert "device busy" in content
    assert "slow callback" in content
