"""
Synthetic Reverb Impulse Responses

Generates the convolution kernel for the reverb path.

Technical assumptions:
- The impulse is exponentially shaped noise, not a measured room:
  h[i] = uniform(-1, 1) * (1 - n/length)^decay with n = i (or length - i
  when reversed)
- Always stereo; both channels draw independent noise
- Randomness is intentional. Only length, channel count and the decay
  envelope are guaranteed; pass a seeded numpy Generator for repeatable output
"""

import logging
from typing import Optional
import numpy as np

from .buffers import AudioBuffer
from .errors import InvalidParameters

logger = logging.getLogger(__name__)

IMPULSE_CHANNELS = 2
DEFAULT_DURATION_SECONDS = 2.0


class ImpulseResponseSynthesizer:
    """
    Decaying-noise impulse response generator.

    Usage:
        synth = ImpulseResponseSynthesizer(rng=np.random.default_rng(1))
        ir = synth.synthesize(sample_rate=44100, decay=2.0)

    A synthesizer owns its random generator; create one per render when
    renders may run concurrently.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()

    def synthesize(
        self,
        sample_rate: int,
        decay: float,
        duration_seconds: float = DEFAULT_DURATION_SECONDS,
        reverse: bool = False,
    ) -> AudioBuffer:
        """
        Create a stereo impulse response.

        Args:
            sample_rate: Sample rate in Hz
            decay: Envelope exponent. Near 0 gives an almost flat noise tail,
                large values cut the tail off sharply
            duration_seconds: Impulse length in seconds
            reverse: Build a swelling (reversed) envelope instead

        Returns:
            AudioBuffer with 2 channels and int(sample_rate * duration_seconds) frames

        Raises:
            InvalidParameters: Non-positive sample rate, decay or duration
        """
        if sample_rate <= 0:
            raise InvalidParameters(f"Sample rate must be positive, got: {sample_rate}")
        if not np.isfinite(decay) or decay <= 0:
            raise InvalidParameters(f"Reverb decay must be positive, got: {decay}")
        if not np.isfinite(duration_seconds) or duration_seconds <= 0:
            raise InvalidParameters(
                f"Impulse duration must be positive, got: {duration_seconds}"
            )

        length = int(sample_rate * duration_seconds)
        n = np.arange(length, dtype=np.float64)
        if reverse:
            n = length - n

        envelope = (1.0 - n / length) ** decay
        noise = self.rng.uniform(-1.0, 1.0, size=(IMPULSE_CHANNELS, length))

        logger.debug(
            f"Synthesized {duration_seconds}s impulse at {sample_rate} Hz "
            f"(decay={decay}, reverse={reverse})"
        )
        return AudioBuffer(noise * envelope, sample_rate)


def synthesize_impulse_response(
    sample_rate: int,
    decay: float,
    duration_seconds: float = DEFAULT_DURATION_SECONDS,
    reverse: bool = False,
    rng: Optional[np.random.Generator] = None,
) -> AudioBuffer:
    """Shortcut for ImpulseResponseSynthesizer(rng).synthesize(...)."""
    return ImpulseResponseSynthesizer(rng).synthesize(
        sample_rate, decay, duration_seconds, reverse
    )
