"""
Formatting functions for display.

Converts numerical values to readable strings.
"""


def format_duration(seconds: float) -> str:
    """
    Format a duration for display.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (e.g. "3:45.20" or "0:01.50")
    """
    minutes = int(seconds // 60)
    secs = seconds % 60
    return f"{minutes}:{secs:05.2f}"


def format_sample_rate(sr: int) -> str:
    """
    Format sample rate.

    Args:
        sr: Sample rate in Hz

    Returns:
        Formatted string (e.g. "44.1 kHz" or "48 kHz")
    """
    if sr % 1000 == 0:
        return f"{sr // 1000} kHz"
    else:
        return f"{sr / 1000:.1f} kHz"


def format_channels(num_channels: int) -> str:
    """
    Format channel count.

    Returns:
        "Mono", "Stereo" or "X channels"
    """
    if num_channels == 1:
        return "Mono"
    elif num_channels == 2:
        return "Stereo"
    else:
        return f"{num_channels} channels"


def format_size(num_bytes: int) -> str:
    """
    Format a byte count.

    Returns:
        Formatted string (e.g. "512 B", "1.5 KB", "3.2 MB")
    """
    if num_bytes < 1024:
        return f"{num_bytes} B"
    elif num_bytes < 1024 ** 2:
        return f"{num_bytes / 1024:.1f} KB"
    else:
        return f"{num_bytes / 1024 ** 2:.1f} MB"


def describe_buffer(num_channels: int, sample_rate: int, duration_seconds: float) -> str:
    """One-line summary, e.g. "Stereo, 44.1 kHz, 0:03.00"."""
    return (
        f"{format_channels(num_channels)}, {format_sample_rate(sample_rate)}, "
        f"{format_duration(duration_seconds)}"
    )
