"""Audio backends implementing the segment contract."""

from __future__ import annotations

from .buffered_segment import BufferedSegment, probe_output_device
from .context import AudioContext
from .segment import COMPLETION_EPSILON, BaseSegment, LoadState, PlayState, Segment
from .vlc_segment import VlcSegment

BACKENDS: dict[str, type[BaseSegment]] = {
    BufferedSegment.backend_name: BufferedSegment,
    VlcSegment.backend_name: VlcSegment,
}
DEFAULT_BACKEND = BufferedSegment.backend_name


def normalize_backend(name: str | None) -> str:
    value = (name or DEFAULT_BACKEND).strip().lower()
    return value if value in BACKENDS else DEFAULT_BACKEND


def create_audio_context(backend: str | None = None, *, logger=None, **kwargs) -> AudioContext:
    """Build the shared context for backend; must run inside the event loop."""
    if normalize_backend(backend) == BufferedSegment.backend_name:
        kwargs.setdefault("output_probe", probe_output_device)
    return AudioContext(logger=logger, **kwargs)


def create_segment(
    source,
    context: AudioContext,
    *,
    backend: str | None = None,
    logger=None,
    **kwargs,
) -> BaseSegment:
    segment_cls = BACKENDS[normalize_backend(backend)]
    return segment_cls(source, context, logger=logger, **kwargs)


__all__ = [
    "AudioContext",
    "BACKENDS",
    "BaseSegment",
    "BufferedSegment",
    "COMPLETION_EPSILON",
    "DEFAULT_BACKEND",
    "LoadState",
    "PlayState",
    "Segment",
    "VlcSegment",
    "create_audio_context",
    "create_segment",
    "normalize_backend",
]
