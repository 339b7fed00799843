import os

os.environ.setdefault("SEGMENT_PLAYER_SKIP_APP_INIT", "1")

import app
from segment_player import main as app_main
from segment_player.ui import APP_TITLE


class _Logger:
    def __init__(self):
        self.infos = []

    def info(self, message, *args):
        self.infos.append(message % args if args else message)


class _DesktopApp:
    title = APP_TITLE

    def __init__(self):
        self.launched = 0

    def launch(self):
        self.launched += 1


def test_launch_respects_skip_flag(monkeypatch):
    logger = _Logger()
    built = []
    monkeypatch.setattr(app, "logger", logger)
    monkeypatch.setattr(app, "SKIP_APP_INIT", True)
    monkeypatch.setattr(app, "build_desktop_app", lambda: built.append(True))

    app.launch()

    assert built == []
    assert logger.infos == ["SEGMENT_PLAYER_SKIP_APP_INIT enabled; launch skipped"]


def test_launch_runs_desktop_app(monkeypatch):
    logger = _Logger()
    desktop_app = _DesktopApp()
    monkeypatch.setattr(app, "logger", logger)
    monkeypatch.setattr(app, "SKIP_APP_INIT", False)
    monkeypatch.setattr(app, "build_desktop_app", lambda: desktop_app)

    app.launch()

    assert desktop_app.launched == 1
    assert logger.infos == ["Launching desktop app"]


def test_build_desktop_app_uses_loaded_config():
    desktop_app = app.build_desktop_app()

    assert desktop_app.title == APP_TITLE
    assert desktop_app.config is app.CONFIG


def test_module_main_delegates_to_app_launch(monkeypatch):
    calls = []
    monkeypatch.setattr(app, "launch", lambda: calls.append("launch"))

    app_main.main()

    assert calls == ["launch"]
