"""
MP3 Encoder

Drives the LAME frame encoder (via lameenc) block by block.

Technical assumptions:
- Constant bitrate 128 kbps, no ID3 tags
- Mono buffers encode one channel; anything else encodes two channels
  from channels 0 and 1 (channel 0 stands in for a missing channel 1).
  Extra channels are dropped, unlike the WAV path which keeps all of them
- Samples are consumed in blocks of 1152 frames (one MPEG-1 Layer III
  frame), quantised to int16, encoded, and the encoder is flushed at the end
- Encoder instances are never reused: each encode() creates its own
"""

import logging
import threading
from typing import Optional
import numpy as np
import lameenc

from .buffers import AudioBuffer, EncodedAudio, processed_file_name
from .errors import EmptyBuffer, RenderCancelled, UnsupportedFormat
from .sample_codec import interleave, normalize_blocks, to_int16

logger = logging.getLogger(__name__)

MP3_MIME_TYPE = "audio/mp3"
MP3_BITRATE_KBPS = 128
MP3_BLOCK_FRAMES = 1152

# MPEG-1, MPEG-2 and MPEG-2.5 sample rates
MP3_SAMPLE_RATES = frozenset({8000, 11025, 12000, 16000, 22050, 24000, 32000, 44100, 48000})


class Mp3Encoder:
    """
    Block-based CBR MP3 encoder.

    Args:
        bitrate_kbps: Constant bitrate
        normalize: Quantise with per-block peak normalisation and a noise
            gate instead of plain clipping (louder, not level-preserving)
        cancel_event: Checked between blocks, aborts with RenderCancelled
    """

    mime_type = MP3_MIME_TYPE
    extension = "mp3"

    def __init__(
        self,
        bitrate_kbps: int = MP3_BITRATE_KBPS,
        normalize: bool = False,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.bitrate_kbps = bitrate_kbps
        self.normalize = normalize
        self.cancel_event = cancel_event

    def _create_encoder(self, sample_rate: int, channels: int) -> lameenc.Encoder:
        if sample_rate not in MP3_SAMPLE_RATES:
            raise UnsupportedFormat(
                f"MP3 does not support a sample rate of {sample_rate} Hz",
                details={"sample_rate": sample_rate, "supported": sorted(MP3_SAMPLE_RATES)},
            )
        try:
            encoder = lameenc.Encoder()
            encoder.set_bit_rate(self.bitrate_kbps)
            encoder.set_in_sample_rate(sample_rate)
            encoder.set_channels(channels)
        except (RuntimeError, ValueError) as e:
            raise UnsupportedFormat(
                f"MP3 encoder initialisation failed: {e}",
                details={"sample_rate": sample_rate, "channels": channels},
            ) from e
        return encoder

    @staticmethod
    def _run_codec(call, *args) -> bytes:
        # lameenc initialises lazily on the first encode() call
        try:
            return call(*args)
        except (RuntimeError, ValueError) as e:
            raise UnsupportedFormat(f"MP3 encoding failed: {e}") from e

    def _quantize(self, block: np.ndarray) -> np.ndarray:
        if self.normalize:
            return normalize_blocks(block)
        return to_int16(block)

    def encode(self, buffer: AudioBuffer, source_name: str = "audio") -> EncodedAudio:
        """
        Encode a buffer as 128 kbps CBR MP3.

        Args:
            buffer: Audio to encode
            source_name: Original file name, used for the suggested name

        Returns:
            EncodedAudio with MIME type audio/mp3

        Raises:
            EmptyBuffer: Buffer has no frames
            UnsupportedFormat: Codec cannot handle the sample rate/channel setup
            RenderCancelled: The cancel event was set while encoding
        """
        if buffer.is_empty:
            raise EmptyBuffer("Cannot encode an empty buffer to MP3")

        channels = 1 if buffer.num_channels == 1 else 2
        encoder = self._create_encoder(buffer.sample_rate, channels)

        # Quantise whole channels so normalisation blocks run across MP3 frames
        left = self._quantize(buffer.get_channel(0))
        right = self._quantize(buffer.get_channel(1)) if buffer.num_channels > 1 else left
        chunks: list[bytes] = []

        for start in range(0, buffer.num_frames, MP3_BLOCK_FRAMES):
            if self.cancel_event is not None and self.cancel_event.is_set():
                raise RenderCancelled("MP3 encoding cancelled")

            left_block = left[start:start + MP3_BLOCK_FRAMES]
            if channels == 2:
                pcm = interleave([left_block, right[start:start + MP3_BLOCK_FRAMES]])
            else:
                pcm = left_block

            encoded = self._run_codec(encoder.encode, pcm.astype(np.int16).tobytes())
            if encoded:
                chunks.append(bytes(encoded))

        tail = self._run_codec(encoder.flush)
        if tail:
            chunks.append(bytes(tail))

        data = b"".join(chunks)
        logger.debug(
            f"Encoded MP3: {buffer.num_frames} frames x {channels} ch "
            f"@ {buffer.sample_rate} Hz, {self.bitrate_kbps} kbps -> {len(data)} bytes"
        )
        return EncodedAudio(
            data=data,
            mime_type=self.mime_type,
            file_name=processed_file_name(source_name, self.extension),
        )
