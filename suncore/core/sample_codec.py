"""
Sample Codec

Numeric helpers shared by the encoders: float to int16 quantisation and
channel (de)interleaving.

Technical assumptions:
- Quantisation scales by 32767 and clamps to [-32768, 32767], so +1.0 maps
  to 32767 and -1.0 to -32767
- Rounding is half-up (floor(x + 0.5)), not numpy's round-half-even
- Interleaved layout is frame-major: index i*N + c holds channel c, frame i
"""

from typing import Sequence, Union
import numpy as np

from .errors import ChannelLengthMismatch

INT16_SCALE = 32767
INT16_MIN = -32768
INT16_MAX = 32767


def to_int16(samples: Union[float, np.ndarray]) -> Union[np.int16, np.ndarray]:
    """
    Quantise float samples to int16 with clipping.

    round(clamp(sample * 32767, -32768, 32767)), NaN is mapped to 0.

    Args:
        samples: Scalar or array of float samples

    Returns:
        np.int16 scalar or int16 array of the same shape
    """
    scaled = np.nan_to_num(np.asarray(samples, dtype=np.float64) * INT16_SCALE, nan=0.0)
    clamped = np.clip(scaled, INT16_MIN, INT16_MAX)
    quantized = np.floor(clamped + 0.5).astype(np.int16)

    if quantized.ndim == 0:
        return quantized[()]
    return quantized


def interleave(channels: Sequence[np.ndarray]) -> np.ndarray:
    """
    Interleave N equally long channels into one flat array.

    Args:
        channels: Sequence of 1D arrays (or a 2D array of shape (channels, frames))

    Returns:
        1D array of length N*L, output[i*N + c] == channels[c][i]

    Raises:
        ChannelLengthMismatch: Channels differ in length
    """
    if len(channels) == 0:
        raise ValueError("Need at least one channel to interleave")

    lengths = [len(ch) for ch in channels]
    if len(set(lengths)) != 1:
        raise ChannelLengthMismatch(
            "Cannot interleave channels of different lengths",
            details={"lengths": lengths},
        )

    return np.stack([np.asarray(ch) for ch in channels], axis=1).reshape(-1)


def deinterleave(samples: np.ndarray, num_channels: int) -> np.ndarray:
    """
    Split an interleaved array back into channels.

    Args:
        samples: Flat interleaved samples
        num_channels: Number of channels N

    Returns:
        Array of shape (N, len(samples) // N)

    Raises:
        ChannelLengthMismatch: Length is not a multiple of num_channels
    """
    if num_channels < 1:
        raise ValueError(f"Channel count must be at least 1, got: {num_channels}")

    samples = np.asarray(samples)
    if samples.ndim != 1 or len(samples) % num_channels != 0:
        raise ChannelLengthMismatch(
            f"{len(samples)} samples cannot be split into {num_channels} channels",
            details={"samples": len(samples), "channels": num_channels},
        )

    return samples.reshape(-1, num_channels).T.copy()


def normalize_blocks(
    samples: np.ndarray,
    noise_threshold: float = 0.01,
    noise_floor: float = 0.001,
    block_size: int = 1024,
) -> np.ndarray:
    """
    Quantise to int16 with per-block peak normalisation and a noise gate.

    Each block is scaled so its own peak reaches full scale. Blocks whose
    peak stays below noise_threshold are left unscaled, and individual
    samples below noise_floor are set to zero before scaling.

    This trades the original dynamics for loudness, so it is opt-in.

    Args:
        samples: 1D float samples
        noise_threshold: Blocks quieter than this are not amplified
        noise_floor: Gate threshold for single samples
        block_size: Block length in samples

    Returns:
        int16 array of the same length
    """
    samples = np.asarray(samples, dtype=np.float64)
    result = np.empty(len(samples), dtype=np.int16)

    for start in range(0, len(samples), block_size):
        block = samples[start:start + block_size]

        peak = np.max(np.abs(block))
        if peak < noise_threshold:
            peak = 0.0
        scale = INT16_SCALE / peak if peak > 0 else 1.0

        gated = np.where(np.abs(block) < noise_floor, 0.0, block)
        scaled = np.clip(gated * scale, -INT16_SCALE, INT16_SCALE)
        result[start:start + block_size] = np.floor(scaled + 0.5).astype(np.int16)

    return result
