"""
Utility module for suncore.

Contains helpers for human-readable output.
"""

from .formatting import (
    format_duration,
    format_sample_rate,
    format_channels,
    format_size,
    describe_buffer,
)

__all__ = [
    "format_duration",
    "format_sample_rate",
    "format_channels",
    "format_size",
    "describe_buffer",
]
