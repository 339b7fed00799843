"""libVLC playback: the engine keeps its own clock and reports end of media."""

from __future__ import annotations

import os
import sys

from ..errors import BackendUnavailableError, LoadError
from .segment import BaseSegment

try:
    import vlc as _vlc
except Exception:  # pragma: no cover - dependency optional at import time
    _vlc = None

_VLC_RESOURCE_KEY = "vlc-instance"
# VLC may ignore a seek issued before its playback thread is ready.
_SEEK_RETRY_SECONDS = 0.14


def create_vlc_instance(vlc_module, platform_name: str | None = None):
    platform_value = platform_name if platform_name is not None else sys.platform
    args = ["--no-xlib"] if str(platform_value).startswith("linux") else []
    args.append("--no-video")
    return vlc_module.Instance(args)


def release_vlc_instance(instance) -> None:
    instance.release()


class VlcSegment(BaseSegment):
    """One media player per clip on the context's shared libVLC instance."""

    backend_name = "vlc"

    def __init__(
        self,
        source,
        context,
        *,
        logger=None,
        vlc_module=None,
        platform_name: str | None = None,
    ) -> None:
        super().__init__(source, context, logger=logger)
        self._vlc = vlc_module if vlc_module is not None else _vlc
        if self._vlc is None:
            raise BackendUnavailableError("python-vlc is not available")
        self._platform_name = platform_name
        self.player = None
        self.media = None
        self._playing_generation = 0

    def _instance(self):
        return self.context.resource(
            _VLC_RESOURCE_KEY,
            lambda: create_vlc_instance(self._vlc, self._platform_name),
            release_vlc_instance,
        )

    async def _load_resource(self) -> float:
        return await self.context.run_blocking(self._open_media)

    def _open_media(self) -> float:
        if not os.path.isfile(self.source):
            raise FileNotFoundError(self.source)
        instance = self._instance()
        media = instance.media_new(os.path.abspath(self.source))
        media.parse()
        length_ms = int(media.get_duration() or 0)
        if length_ms <= 0:
            media.release()
            raise LoadError(self.source, "libVLC reported no duration")
        player = instance.media_player_new()
        player.set_media(media)
        events = player.event_manager()
        events.event_attach(self._vlc.EventType.MediaPlayerEndReached, self._on_end_reached)
        self.media = media
        self.player = player
        return float(length_ms) / 1000.0

    def _on_end_reached(self, _event) -> None:
        # libVLC event thread: no libvlc calls allowed here, only hand off.
        self._signal_end(self._playing_generation)

    def _start_output(self, offset: float, generation: int) -> None:
        if self.player is None:
            raise RuntimeError("VLC media is not loaded.")
        target_ms = int(max(0.0, offset * 1000.0))
        self._playing_generation = generation
        if self.player.get_state() == self._vlc.State.Paused:
            self.player.set_time(target_ms)
            self.player.set_pause(0)
            return
        rc = int(self.player.play())
        if rc == -1:
            raise RuntimeError("VLC failed to start playback.")
        if target_ms > 0:
            self.player.set_time(target_ms)
            self.context.call_later(
                _SEEK_RETRY_SECONDS, self._retry_seek, generation, target_ms
            )

    def _retry_seek(self, generation: int, target_ms: int) -> None:
        if generation != self._generation or self.player is None:
            return
        try:
            if int(self.player.get_time() or 0) < target_ms:
                self.player.set_time(int(target_ms))
        except Exception:
            self.logger.exception("Failed to seek VLC player")

    def _pause_output(self) -> None:
        if self.player is not None:
            self.player.set_pause(1)

    def _stop_output(self) -> None:
        if self.player is not None:
            self.player.stop()

    def _playing_position(self) -> float:
        if self.player is not None:
            try:
                current_ms = int(self.player.get_time())
            except Exception:
                current_ms = -1
            if current_ms >= 0:
                return float(current_ms) / 1000.0
        return super()._playing_position()

    def _end_position(self) -> float:
        # A late EndReached from an earlier run finds the engine replaying.
        if self.player is not None and self.player.get_state() == self._vlc.State.Ended:
            return self.duration()
        return self.current_time()

    def _close_resources(self) -> None:
        if self.player is not None:
            try:
                self.player.event_manager().event_detach(
                    self._vlc.EventType.MediaPlayerEndReached
                )
            except Exception:
                self.logger.exception("Failed to detach VLC events")
            try:
                self.player.release()
            except Exception:
                self.logger.exception("Failed to release VLC player")
            self.player = None
        if self.media is not None:
            try:
                self.media.release()
            except Exception:
                self.logger.exception("Failed to release VLC media")
            self.media = None
