"""
Audio I/O Module

Decodes source files into AudioBuffer objects and writes encoded results
to disk. This is the file-system side of the pipeline; the core itself
only sees buffers and byte blobs.

Technical assumptions:
- WAV, FLAC and OGG are decoded with soundfile (libsndfile), no conversion
- MP3 files are decoded with pydub, which needs ffmpeg on the PATH
- Sample rate and channel count are kept as found in the file
"""

import logging
from pathlib import Path
import numpy as np
import soundfile as sf

from .buffers import AudioBuffer, EncodedAudio

logger = logging.getLogger(__name__)

SOUNDFILE_SUFFIXES = (".wav", ".flac", ".ogg")
SUPPORTED_SUFFIXES = SOUNDFILE_SUFFIXES + (".mp3",)


def load_audio(file_path: str | Path) -> AudioBuffer:
    """
    Load an audio file without implicit conversion.

    Supported formats:
    - WAV, FLAC, OGG (via soundfile)
    - MP3 (via pydub/ffmpeg)

    Args:
        file_path: Path to audio file

    Returns:
        AudioBuffer, Shape: (channels, frames)

    Raises:
        FileNotFoundError: File does not exist
        ValueError: Unsupported format
        RuntimeError: The file could not be decoded (soundfile.LibsndfileError,
            or ffmpeg failures for MP3)
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"Audio file not found: {path}")

    suffix = path.suffix.lower()

    if suffix in SOUNDFILE_SUFFIXES:
        buffer = _load_soundfile(path)
    elif suffix == ".mp3":
        buffer = _load_mp3(path)
    else:
        raise ValueError(f"Unsupported format: {suffix}")

    logger.info(
        f"Loaded {path.name}: {buffer.num_channels} ch, {buffer.sample_rate} Hz, "
        f"{buffer.duration_seconds:.2f}s"
    )
    return buffer


def _load_soundfile(path: Path) -> AudioBuffer:
    """Load with soundfile; always_2d gives (frames, channels)."""
    data, sample_rate = sf.read(path, dtype='float32', always_2d=True)
    return AudioBuffer(data.T, sample_rate)


def _load_mp3(path: Path) -> AudioBuffer:
    """
    Load MP3 file with pydub.

    Requires ffmpeg in system PATH for decoding.
    """
    from pydub import AudioSegment

    try:
        audio = AudioSegment.from_mp3(path)
    except Exception as e:
        raise RuntimeError(
            f"MP3 could not be loaded: {e}\n"
            "Please ensure ffmpeg is installed:\n"
            "  macOS: brew install ffmpeg\n"
            "  Windows: https://ffmpeg.org/download.html"
        ) from e

    samples = np.array(audio.get_array_of_samples())

    # pydub returns integer PCM
    if audio.sample_width == 2:  # 16-bit
        samples = samples.astype(np.float32) / 32768.0
    elif audio.sample_width == 4:  # 32-bit
        samples = samples.astype(np.float32) / 2147483648.0
    else:  # 8-bit
        samples = (samples.astype(np.float32) - 128) / 128.0

    channels = samples.reshape(-1, audio.channels).T
    return AudioBuffer(channels, audio.frame_rate)


def save_encoded(encoded: EncodedAudio, directory: str | Path) -> Path:
    """
    Write an encoded blob under its suggested file name.

    Args:
        encoded: Encoded audio
        directory: Target directory (created if missing)

    Returns:
        Path of the written file
    """
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)

    path = target_dir / encoded.file_name
    path.write_bytes(encoded.data)
    logger.debug(f"Wrote {encoded.size_bytes} bytes to {path}")
    return path
