"""
Tests for the audio buffer containers.
"""

import pytest
import numpy as np

from suncore.core.buffers import AudioBuffer, EncodedAudio, processed_file_name
from suncore.core.errors import ChannelLengthMismatch, InvalidParameters


class TestAudioBuffer:
    """Tests for AudioBuffer."""

    def test_mono_from_1d(self):
        """1D data becomes a single channel."""
        buffer = AudioBuffer(np.ones(100), 44100)

        assert buffer.num_channels == 1
        assert buffer.num_frames == 100
        assert len(buffer) == 100
        assert buffer.data.dtype == np.float32

    def test_stereo_shape(self):
        """Shape is (channels, frames)."""
        buffer = AudioBuffer(np.zeros((2, 44100)), 44100)

        assert buffer.num_channels == 2
        assert buffer.duration_seconds == pytest.approx(1.0)
        assert buffer.get_channel(1).shape == (44100,)

    def test_from_channels_length_mismatch(self):
        """Channels of different lengths are rejected."""
        with pytest.raises(ChannelLengthMismatch):
            AudioBuffer.from_channels([np.zeros(10), np.zeros(11)], 44100)

    def test_ragged_list_rejected(self):
        """Ragged nested lists raise the same error."""
        with pytest.raises(ChannelLengthMismatch):
            AudioBuffer([[0.0, 0.1], [0.2]], 8000)

    def test_invalid_sample_rate(self):
        """Sample rate must be positive."""
        with pytest.raises(InvalidParameters):
            AudioBuffer(np.zeros(10), 0)

    def test_data_is_read_only(self):
        """Buffer data cannot be written."""
        buffer = AudioBuffer(np.zeros(10), 8000)

        with pytest.raises(ValueError):
            buffer.data[0, 0] = 1.0

    def test_no_aliasing_with_input(self):
        """Changing the source array does not change the buffer."""
        original = np.zeros(10)
        buffer = AudioBuffer(original, 8000)

        original[0] = 1.0
        assert buffer.data[0, 0] == 0.0

    def test_invalid_channel(self):
        """Out of range channel index."""
        buffer = AudioBuffer(np.zeros(10), 8000)

        with pytest.raises(ValueError):
            buffer.get_channel(1)

    def test_empty_buffer(self):
        """Zero frames is a valid, empty buffer."""
        buffer = AudioBuffer(np.zeros((2, 0)), 44100)

        assert buffer.is_empty
        assert buffer.num_channels == 2


class TestConcatenate:
    """Tests for silence and concatenation."""

    def test_silence_then_music(self):
        """Lead-in silence followed by signal."""
        silence = AudioBuffer.silence(2, 50, 8000)
        music = AudioBuffer(np.ones((2, 100)), 8000)

        merged = silence.concatenate(music)

        assert merged.num_frames == 150
        np.testing.assert_array_equal(merged.data[:, :50], 0.0)
        np.testing.assert_array_equal(merged.data[:, 50:], 1.0)

    def test_channel_mismatch(self):
        with pytest.raises(ChannelLengthMismatch):
            AudioBuffer.silence(1, 10, 8000).concatenate(AudioBuffer.silence(2, 10, 8000))

    def test_sample_rate_mismatch(self):
        with pytest.raises(InvalidParameters):
            AudioBuffer.silence(1, 10, 8000).concatenate(AudioBuffer.silence(1, 10, 16000))


class TestFileNames:
    """Tests for the suggested output file name."""

    def test_simple_name(self):
        assert processed_file_name("song.mp3", "wav") == "song_processed.wav"

    def test_multiple_dots(self):
        """Everything from the first dot is dropped."""
        assert processed_file_name("track.final.flac", "mp3") == "track_processed.mp3"

    def test_directory_stripped(self):
        assert processed_file_name("/music/album/song.wav", "mp3") == "song_processed.mp3"

    def test_empty_name(self):
        assert processed_file_name("", "wav") == "audio_processed.wav"

    def test_encoded_audio_size(self):
        encoded = EncodedAudio(b"abc", "audio/wav", "x_processed.wav")
        assert encoded.size_bytes == 3
