"""Decode-and-buffer playback through a sounddevice output stream."""

from __future__ import annotations

import os
import threading

import numpy as np

from ..errors import BackendUnavailableError, LoadError
from .segment import BaseSegment

try:
    import sounddevice as sd
except Exception:  # pragma: no cover - dependency optional at import time
    sd = None

try:
    import soundfile as sf
except Exception:  # pragma: no cover - dependency optional at import time
    sf = None


def probe_output_device(sd_module=None) -> str:
    """Describe the default output device; raises when PortAudio has none."""
    module = sd_module if sd_module is not None else sd
    if module is None:
        raise BackendUnavailableError("sounddevice is not available")
    info = module.query_devices(kind="output")
    name = info.get("name", "unknown") if isinstance(info, dict) else str(info)
    rate = info.get("default_samplerate") if isinstance(info, dict) else None
    return f"{name} ({int(rate)} Hz)" if rate else str(name)


class BufferedSegment(BaseSegment):
    """Whole clip decoded to float32 PCM, streamed from a frame cursor.

    Position while playing is wall-clock bookkeeping against the context
    clock; the end of the clip is the stream's own finished callback after the
    callback has drained the buffer.
    """

    backend_name = "buffered"

    def __init__(
        self,
        source,
        context,
        *,
        logger=None,
        sd_module=None,
        sf_module=None,
        blocksize: int = 1024,
    ) -> None:
        super().__init__(source, context, logger=logger)
        self._sd = sd_module if sd_module is not None else sd
        self._sf = sf_module if sf_module is not None else sf
        if self._sd is None or self._sf is None:
            raise BackendUnavailableError(
                "Buffered playback needs sounddevice and soundfile installed."
            )
        self.blocksize = int(blocksize)
        self.pcm_data: np.ndarray | None = None
        self.sample_rate = 0
        self.total_frames = 0
        self._cursor = 0
        self._cursor_lock = threading.Lock()
        self._stream = None

    async def _load_resource(self) -> float:
        audio, sample_rate = await self.context.run_blocking(self._decode)
        self.pcm_data = audio
        self.sample_rate = sample_rate
        self.total_frames = int(audio.shape[0])
        return float(self.total_frames) / float(sample_rate)

    def _decode(self) -> tuple[np.ndarray, int]:
        if not os.path.isfile(self.source):
            raise FileNotFoundError(self.source)
        audio, sample_rate = self._sf.read(self.source, dtype="float32", always_2d=True)
        audio_np = np.asarray(audio, dtype=np.float32)
        if audio_np.ndim != 2:
            raise LoadError(self.source, "unsupported audio shape")
        if int(sample_rate) <= 0:
            raise LoadError(self.source, "invalid sample rate")
        return np.ascontiguousarray(audio_np), int(sample_rate)

    def _start_output(self, offset: float, generation: int) -> None:
        if self.pcm_data is None:
            raise RuntimeError("Audio data is not loaded.")
        start_frame = int(round(offset * float(self.sample_rate)))
        with self._cursor_lock:
            self._cursor = max(0, min(self.total_frames, start_frame))
        stream = self._sd.OutputStream(
            samplerate=self.sample_rate,
            channels=int(self.pcm_data.shape[1]),
            dtype="float32",
            blocksize=self.blocksize,
            callback=self._stream_callback,
            finished_callback=lambda generation=generation: self._signal_end(generation),
        )
        self._stream = stream
        stream.start()

    def _stream_callback(self, outdata, frames, time_info, status) -> None:
        # Runs on the PortAudio thread.
        pcm = self.pcm_data
        if pcm is None:
            outdata[:] = 0
            raise self._sd.CallbackStop()
        with self._cursor_lock:
            start = self._cursor
            end = min(start + int(frames), self.total_frames)
            count = end - start
            if count > 0:
                outdata[:count] = pcm[start:end]
            if count < frames:
                outdata[count:] = 0
            self._cursor = end
        if count < frames:
            raise self._sd.CallbackStop()

    def _stop_output(self) -> None:
        stream = self._stream
        self._stream = None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()

    def _end_position(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        with self._cursor_lock:
            cursor = self._cursor
        return float(cursor) / float(self.sample_rate)

    def _close_resources(self) -> None:
        self.pcm_data = None
