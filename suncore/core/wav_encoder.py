"""
WAV Encoder

Serialises a buffer as an IEEE float WAV file in memory.

Technical assumptions:
- Sample format is 32-bit float (format tag 3), no quantisation, so the
  WAV path is lossless with respect to the float32 buffer
- All channels are written, in buffer order
- Layout: RIFF/WAVE, "fmt " (18 bytes incl. cbSize), "fact", "data"
"""

import io
import logging
import numpy as np
from scipy.io import wavfile

from .buffers import AudioBuffer, EncodedAudio, processed_file_name
from .sample_codec import interleave

logger = logging.getLogger(__name__)

WAV_MIME_TYPE = "audio/wav"


class WavEncoder:
    """Float32 WAV encoder."""

    mime_type = WAV_MIME_TYPE
    extension = "wav"

    def encode(self, buffer: AudioBuffer, source_name: str = "audio") -> EncodedAudio:
        """
        Encode a buffer as 32-bit float WAV.

        Args:
            buffer: Audio to encode
            source_name: Original file name, used for the suggested name

        Returns:
            EncodedAudio with MIME type audio/wav

        Raises:
            ChannelLengthMismatch: Buffer channels differ in length
        """
        num_channels = buffer.num_channels
        interleaved = interleave(list(buffer.data)).astype(np.float32)

        # scipy expects (frames, channels); mono stays 1D
        frames = interleaved if num_channels == 1 else interleaved.reshape(-1, num_channels)

        out = io.BytesIO()
        wavfile.write(out, buffer.sample_rate, frames)
        data = out.getvalue()

        logger.debug(
            f"Encoded WAV: {buffer.num_frames} frames x {num_channels} ch "
            f"@ {buffer.sample_rate} Hz -> {len(data)} bytes"
        )
        return EncodedAudio(
            data=data,
            mime_type=self.mime_type,
            file_name=processed_file_name(source_name, self.extension),
        )
