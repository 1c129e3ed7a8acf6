"""
Audio buffer containers.

Technical assumptions:
- Sample data is float32, shape (channels, frames), nominal range -1.0 to 1.0
  (values may transiently exceed it, nothing here clips)
- Buffers are immutable once produced: the array is copied on construction
  and marked read-only, every processing stage allocates a new buffer
- Encoded output is an opaque byte blob plus MIME type and a suggested name
"""

from dataclasses import dataclass
from pathlib import PurePath
from typing import Sequence
import numpy as np

from .errors import ChannelLengthMismatch, InvalidParameters


def _stack_channels(channels: Sequence[Sequence[float]]) -> np.ndarray:
    """Stack per-channel sequences, rejecting unequal lengths."""
    lengths = {len(ch) for ch in channels}
    if len(lengths) > 1:
        raise ChannelLengthMismatch(
            "All channels must have the same number of frames",
            details={"lengths": [len(ch) for ch in channels]},
        )
    return np.array([np.asarray(ch, dtype=np.float32) for ch in channels], dtype=np.float32)


@dataclass(frozen=True, eq=False)
class AudioBuffer:
    """
    Multichannel sample data with a fixed sample rate.

    Attributes:
        data: Samples as float32 array, Shape: (channels, frames).
            A 1D array is treated as mono.
        sample_rate: Sample rate in Hz
    """
    data: np.ndarray
    sample_rate: int

    def __post_init__(self):
        """Copy, validate and freeze the sample data."""
        raw = self.data
        if isinstance(raw, (list, tuple)) and raw and all(hasattr(ch, "__len__") for ch in raw):
            data = _stack_channels(raw)
        else:
            data = np.array(raw, dtype=np.float32)

        if data.ndim == 1:
            data = data[np.newaxis, :]
        elif data.ndim != 2:
            raise ValueError("Audio array must be 1D or 2D")

        if data.shape[0] < 1:
            raise ValueError("Audio buffer needs at least one channel")
        if int(self.sample_rate) <= 0:
            raise InvalidParameters(
                f"Sample rate must be positive, got: {self.sample_rate}"
            )

        data.setflags(write=False)
        object.__setattr__(self, "data", data)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @classmethod
    def from_channels(cls, channels: Sequence[Sequence[float]], sample_rate: int) -> "AudioBuffer":
        """
        Build a buffer from one sequence per channel.

        Raises:
            ChannelLengthMismatch: Channels differ in length
        """
        if not channels:
            raise ValueError("Audio buffer needs at least one channel")
        return cls(_stack_channels(channels), sample_rate)

    @classmethod
    def silence(cls, num_channels: int, num_frames: int, sample_rate: int) -> "AudioBuffer":
        """Create a buffer of digital silence."""
        return cls(np.zeros((num_channels, num_frames), dtype=np.float32), sample_rate)

    @property
    def num_channels(self) -> int:
        return self.data.shape[0]

    @property
    def num_frames(self) -> int:
        """Number of frames per channel."""
        return self.data.shape[1]

    def __len__(self) -> int:
        return self.num_frames

    @property
    def duration_seconds(self) -> float:
        return self.num_frames / self.sample_rate

    @property
    def is_empty(self) -> bool:
        return self.num_frames == 0

    def get_channel(self, channel: int) -> np.ndarray:
        """
        Read-only view of a single channel.

        Args:
            channel: Channel index, 0 for left/mono

        Returns:
            1D float32 array
        """
        if not 0 <= channel < self.num_channels:
            raise ValueError(
                f"Channel {channel} out of range for {self.num_channels}-channel buffer"
            )
        return self.data[channel]

    def concatenate(self, other: "AudioBuffer") -> "AudioBuffer":
        """
        Append another buffer, e.g. a lead-in of silence followed by music.

        Both buffers must share channel count and sample rate.
        """
        if other.sample_rate != self.sample_rate:
            raise InvalidParameters(
                "Cannot concatenate buffers with different sample rates",
                details={"sample_rates": [self.sample_rate, other.sample_rate]},
            )
        if other.num_channels != self.num_channels:
            raise ChannelLengthMismatch(
                "Cannot concatenate buffers with different channel counts",
                details={"channels": [self.num_channels, other.num_channels]},
            )
        return AudioBuffer(np.concatenate([self.data, other.data], axis=1), self.sample_rate)


def processed_file_name(source_name: str, extension: str) -> str:
    """
    Suggested download name: "<basename>_processed.<ext>".

    The basename drops any directory and everything from the first dot,
    so "track.final.mp3" becomes "track_processed.wav".
    """
    base = PurePath(source_name).name.split(".")[0] if source_name else ""
    return f"{base or 'audio'}_processed.{extension}"


@dataclass(frozen=True)
class EncodedAudio:
    """
    Encoded audio ready for download.

    Attributes:
        data: Encoded file contents
        mime_type: "audio/wav" or "audio/mp3"
        file_name: Suggested file name
    """
    data: bytes
    mime_type: str
    file_name: str

    @property
    def size_bytes(self) -> int:
        return len(self.data)
