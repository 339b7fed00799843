"""Exception types raised by the segment player."""

from __future__ import annotations


class SegmentPlayerError(Exception):
    """Base class for segment player failures."""


class LoadError(SegmentPlayerError):
    """A clip could not be fetched or decoded."""

    def __init__(self, source: str, cause: object = None) -> None:
        self.source = str(source)
        self.cause = cause
        message = f"Failed to load {self.source}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class BackendUnavailableError(SegmentPlayerError, RuntimeError):
    """The selected audio backend library is missing or failed to initialise."""
