"""
Core rendering module - fully testable without any UI.

This module contains the offline processing chain:
- Reverb impulse synthesis
- Effects rendering (speed, bass boost, reverb, gain envelope)
- Sample quantisation and interleaving
- WAV and MP3 encoding
- Pipeline orchestration and file I/O
"""

from .audio_io import load_audio, save_encoded
from .buffers import AudioBuffer, EncodedAudio, processed_file_name
from .errors import (
    SuncoreError,
    RenderError,
    SourceNotLoaded,
    InvalidParameters,
    RenderCancelled,
    ChannelLengthMismatch,
    EncodeError,
    EmptyBuffer,
    UnsupportedFormat,
)
from .impulse_response import ImpulseResponseSynthesizer, synthesize_impulse_response
from .mp3_encoder import Mp3Encoder
from .pipeline import AudioFormat, PipelineOrchestrator, process_audio
from .render import EffectsRenderer, RenderGraph, RenderParameters
from .sample_codec import deinterleave, interleave, normalize_blocks, to_int16
from .wav_encoder import WavEncoder

__all__ = [
    "AudioBuffer",
    "EncodedAudio",
    "processed_file_name",
    "load_audio",
    "save_encoded",
    "SuncoreError",
    "RenderError",
    "SourceNotLoaded",
    "InvalidParameters",
    "RenderCancelled",
    "ChannelLengthMismatch",
    "EncodeError",
    "EmptyBuffer",
    "UnsupportedFormat",
    "ImpulseResponseSynthesizer",
    "synthesize_impulse_response",
    "EffectsRenderer",
    "RenderGraph",
    "RenderParameters",
    "to_int16",
    "interleave",
    "deinterleave",
    "normalize_blocks",
    "WavEncoder",
    "Mp3Encoder",
    "AudioFormat",
    "PipelineOrchestrator",
    "process_audio",
]
