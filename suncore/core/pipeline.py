"""
Processing Pipeline

Single entry point that turns a decoded source buffer into a downloadable
blob: impulse synthesis -> effects render -> WAV or MP3 encoding.

Technical assumptions:
- Every call allocates its own synthesizer, renderer and encoder; calls
  with different sources can run concurrently without shared state
- Errors from any stage propagate unchanged, and no partial blob is returned
- With the same seeded generator, WAV output is byte-identical across calls.
  MP3 output depends on the LAME build and is not guaranteed to be
"""

from enum import Enum
import logging
import threading
import time
from typing import Optional, Union
import numpy as np

from .buffers import AudioBuffer, EncodedAudio
from .errors import RenderCancelled, UnsupportedFormat
from .impulse_response import ImpulseResponseSynthesizer
from .mp3_encoder import Mp3Encoder
from .render import EffectsRenderer, RenderParameters
from .wav_encoder import WavEncoder

logger = logging.getLogger(__name__)


class AudioFormat(Enum):
    """Output container."""
    WAV = "wav"
    MP3 = "mp3"

    @classmethod
    def parse(cls, value: Union["AudioFormat", str]) -> "AudioFormat":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnsupportedFormat(
                f"Unsupported output format: {value}",
                details={"supported": [fmt.value for fmt in cls]},
            ) from None


class PipelineOrchestrator:
    """
    Sequences impulse synthesis, rendering and encoding.

    Args:
        normalize_mp3: Use block peak normalisation when quantising MP3
    """

    def __init__(self, normalize_mp3: bool = False):
        self.normalize_mp3 = normalize_mp3

    def _create_encoder(
        self,
        fmt: AudioFormat,
        cancel_event: Optional[threading.Event],
    ) -> Union[WavEncoder, Mp3Encoder]:
        if fmt is AudioFormat.WAV:
            return WavEncoder()
        return Mp3Encoder(normalize=self.normalize_mp3, cancel_event=cancel_event)

    def process(
        self,
        source: Optional[AudioBuffer],
        params: RenderParameters,
        format: Union[AudioFormat, str] = AudioFormat.WAV,
        source_name: str = "audio",
        rng: Optional[np.random.Generator] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> EncodedAudio:
        """
        Render and encode one source.

        Args:
            source: Decoded input buffer (left untouched)
            params: Render settings
            format: "wav" or "mp3"
            source_name: Original file name for the suggested output name
            rng: Random generator for the reverb tail (fresh entropy if None)
            cancel_event: Cooperative cancellation flag

        Returns:
            Encoded blob with MIME type and suggested file name

        Raises:
            SourceNotLoaded, InvalidParameters: From rendering
            EmptyBuffer, UnsupportedFormat, ChannelLengthMismatch: From encoding
            RenderCancelled: cancel_event was set
        """
        fmt = AudioFormat.parse(format)
        started = time.perf_counter()

        renderer = EffectsRenderer(
            synthesizer=ImpulseResponseSynthesizer(rng),
            cancel_event=cancel_event,
        )
        rendered = renderer.render(source, params)

        if cancel_event is not None and cancel_event.is_set():
            raise RenderCancelled("Pipeline cancelled before encoding")

        encoded = self._create_encoder(fmt, cancel_event).encode(rendered, source_name)

        logger.info(
            f"Processed '{source_name}' -> {encoded.file_name} "
            f"({encoded.size_bytes} bytes, {time.perf_counter() - started:.2f}s)"
        )
        return encoded


def process_audio(
    source: Optional[AudioBuffer],
    params: RenderParameters,
    format: Union[AudioFormat, str] = AudioFormat.WAV,
    source_name: str = "audio",
    rng: Optional[np.random.Generator] = None,
    cancel_event: Optional[threading.Event] = None,
) -> EncodedAudio:
    """Shortcut for PipelineOrchestrator().process(...)."""
    return PipelineOrchestrator().process(
        source, params, format, source_name, rng=rng, cancel_event=cancel_event
    )
