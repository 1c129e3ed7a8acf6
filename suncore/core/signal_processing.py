"""
Signal Processing Primitives

Building blocks for the render graph. Every function takes a
(channels, frames) float array and returns a new array; inputs are never
modified.

Technical assumptions:
- Playback-rate change is tape-style resampling with linear interpolation:
  tempo and pitch move together, no time-stretching
- Reads past the end of the source return silence
- The bass boost is a low shelf built from a 2nd order Butterworth low-pass
  blended back onto the signal (causal, SOS form)
- Reverb convolution runs through FFT convolution per channel
- Fades are exponential, so they start and end at a small non-zero floor
"""

import math
from typing import Callable, Optional
import numpy as np
from scipy import signal

DEFAULT_SHELF_FREQUENCY = 400.0
DEFAULT_FADE_SECONDS = 0.1
DEFAULT_ENVELOPE_FLOOR = 1e-3


def rendered_length(num_frames: int, playback_rate: float) -> int:
    """Number of output frames when playing num_frames at playback_rate."""
    return int(math.floor(num_frames / playback_rate))


def playback_rate_resample(
    data: np.ndarray,
    playback_rate: float,
    num_frames: Optional[int] = None,
) -> np.ndarray:
    """
    Read the source at a different rate.

    Output frame j reads source position j * playback_rate, interpolating
    linearly between neighbouring frames.

    Args:
        data: Audio data, Shape: (channels, frames)
        playback_rate: Read-rate multiplier (>1 = faster and higher)
        num_frames: Output length, defaults to floor(frames / playback_rate)

    Returns:
        Resampled audio, Shape: (channels, num_frames)
    """
    if num_frames is None:
        num_frames = rendered_length(data.shape[1], playback_rate)

    if playback_rate == 1.0 and num_frames == data.shape[1]:
        return data.astype(np.float64)

    positions = np.arange(num_frames, dtype=np.float64) * playback_rate
    # one trailing zero so the last interval fades into silence
    grid = np.arange(data.shape[1] + 1, dtype=np.float64)

    result = np.zeros((data.shape[0], num_frames), dtype=np.float64)
    for ch in range(data.shape[0]):
        padded = np.append(data[ch].astype(np.float64), 0.0)
        result[ch] = np.interp(positions, grid, padded, right=0.0)
    return result


def apply_low_shelf(
    data: np.ndarray,
    sample_rate: int,
    gain_db: float,
    frequency: float = DEFAULT_SHELF_FREQUENCY,
) -> np.ndarray:
    """
    Boost frequencies below the shelf frequency.

    Args:
        data: Audio data, Shape: (channels, frames)
        sample_rate: Sample rate in Hz
        gain_db: Shelf gain in dB (0 = bypass)
        frequency: Shelf corner frequency in Hz

    Returns:
        Filtered copy of the data
    """
    if gain_db == 0 or data.shape[-1] == 0:
        return data.astype(np.float64)

    nyquist = sample_rate / 2.0
    normalized_freq = max(0.01, min(0.99, frequency / nyquist))
    sos = signal.butter(2, normalized_freq, btype='low', output='sos')

    lows = signal.sosfilt(sos, data, axis=-1)
    linear_gain = 10 ** (gain_db / 20.0)
    return data + lows * (linear_gain - 1.0)


def convolve_with_impulse(
    data: np.ndarray,
    impulse: np.ndarray,
    check_cancelled: Optional[Callable[[], None]] = None,
) -> np.ndarray:
    """
    Convolve every channel with a stereo impulse response.

    Channel mapping:
    - Mono input: convolved with the average of both impulse channels,
      i.e. the stereo reverb down-mixed to mono
    - Multichannel input: channel c uses impulse channel c % 2

    The kernel is scaled by 1/sqrt(kernel length). The gain only depends on
    the length, so a harder decay still yields less wet energy.

    Args:
        data: Audio data, Shape: (channels, frames)
        impulse: Impulse response, Shape: (2, ir_frames)
        check_cancelled: Called before each channel, may raise to abort

    Returns:
        Wet signal truncated to the input length
    """
    num_channels, num_frames = data.shape
    result = np.zeros((num_channels, num_frames), dtype=np.float64)
    if num_frames == 0 or impulse.shape[1] == 0:
        return result

    kernels = impulse.astype(np.float64) / np.sqrt(impulse.shape[1])
    if num_channels == 1:
        kernels = kernels.mean(axis=0, keepdims=True)

    for ch in range(num_channels):
        if check_cancelled is not None:
            check_cancelled()
        kernel = kernels[ch % kernels.shape[0]]
        result[ch] = signal.fftconvolve(data[ch], kernel, mode='full')[:num_frames]
    return result


def gain_envelope(
    num_frames: int,
    sample_rate: int,
    gain: float,
    fade_seconds: float = DEFAULT_FADE_SECONDS,
    floor: float = DEFAULT_ENVELOPE_FLOOR,
) -> np.ndarray:
    """
    Fade-in / hold / fade-out gain curve.

    Starts at floor * gain, rises exponentially to gain over fade_seconds,
    holds, then falls back to floor * gain on the last frame. Each fade is
    clamped to half the buffer so short buffers never invert.

    Args:
        num_frames: Envelope length
        sample_rate: Sample rate in Hz
        gain: Hold level (linear)
        fade_seconds: Length of each fade
        floor: Start/end level relative to gain

    Returns:
        1D gain curve, never above gain
    """
    if gain <= 0:
        return np.zeros(num_frames, dtype=np.float64)

    envelope = np.full(num_frames, gain, dtype=np.float64)
    fade_frames = min(int(round(fade_seconds * sample_rate)), num_frames // 2)

    if fade_frames > 0:
        ramp = np.geomspace(floor * gain, gain, fade_frames)
        envelope[:fade_frames] = ramp
        envelope[num_frames - fade_frames:] = ramp[::-1]
    return envelope


def compute_rms(data: np.ndarray, as_db: bool = False) -> float:
    """
    Compute RMS (Root Mean Square) of the signal.

    For multi-channel audio, RMS is computed over all channels.

    Args:
        data: Audio data
        as_db: If True, return in dB (reference: 1.0)

    Returns:
        RMS value (linear or dB)
    """
    if data.size == 0:
        return -np.inf if as_db else 0.0

    rms = np.sqrt(np.mean(np.asarray(data, dtype=np.float64) ** 2))

    if as_db:
        if rms == 0:
            return -np.inf
        return 20 * np.log10(rms)

    return rms


def compute_peak(data: np.ndarray, as_db: bool = False) -> float:
    """
    Compute peak value (absolute maximum) of the signal.

    Args:
        data: Audio data
        as_db: If True, return in dB (reference: 1.0)

    Returns:
        Peak value (linear or dB)
    """
    if data.size == 0:
        return -np.inf if as_db else 0.0

    peak = np.max(np.abs(data))

    if as_db:
        if peak == 0:
            return -np.inf
        return 20 * np.log10(peak)

    return peak
