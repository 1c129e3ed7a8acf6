"""
Exception hierarchy for the rendering and encoding pipeline.

All failures are local to a single pipeline invocation. Nothing is
retried here; the caller decides whether to try again.
"""

from typing import Any, Optional


class SuncoreError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class RenderError(SuncoreError):
    """Errors raised while building or running the effects graph."""
    pass


class SourceNotLoaded(RenderError):
    """The source buffer is missing or has no frames."""
    pass


class InvalidParameters(RenderError, ValueError):
    """Render or synthesis parameters are outside their valid range."""
    pass


class RenderCancelled(SuncoreError):
    """A cooperative cancellation request stopped the pipeline."""
    pass


class ChannelLengthMismatch(SuncoreError, ValueError):
    """Channels of one buffer do not share a frame count."""
    pass


class EncodeError(SuncoreError):
    """Errors raised by the WAV or MP3 encoders."""
    pass


class EmptyBuffer(EncodeError):
    """Encoding was requested for a buffer without frames."""
    pass


class UnsupportedFormat(EncodeError):
    """The codec cannot handle the requested format or configuration."""
    pass
