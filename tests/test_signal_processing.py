"""
Tests for the signal processing primitives.
"""

import pytest
import numpy as np

from suncore.core.signal_processing import (
    apply_low_shelf,
    compute_peak,
    compute_rms,
    convolve_with_impulse,
    gain_envelope,
    playback_rate_resample,
    rendered_length,
)


def sine(freq: float, sample_rate: int, seconds: float = 1.0) -> np.ndarray:
    t = np.arange(int(sample_rate * seconds)) / sample_rate
    return np.sin(2 * np.pi * freq * t)


class TestPlaybackRate:
    """Tests for tape-style resampling."""

    @pytest.mark.parametrize("rate", [0.5, 0.75, 1.0, 1.1, 1.5, 2.0])
    def test_output_length(self, rate):
        """Output has floor(frames / rate) frames."""
        data = np.random.randn(2, 44100)
        result = playback_rate_resample(data, rate)

        assert result.shape == (2, int(np.floor(44100 / rate)))

    def test_identity(self):
        """Rate 1 returns an equal copy."""
        data = np.random.randn(1, 1000)
        result = playback_rate_resample(data, 1.0)

        np.testing.assert_array_equal(result, data)
        assert result is not data

    def test_double_speed_takes_every_other_frame(self):
        data = np.arange(10, dtype=np.float64)[np.newaxis, :]
        result = playback_rate_resample(data, 2.0)

        np.testing.assert_array_equal(result[0], [0, 2, 4, 6, 8])

    def test_half_speed_interpolates(self):
        """Slow playback interpolates linearly and fades into silence."""
        data = np.array([[0.0, 1.0, 2.0]])
        result = playback_rate_resample(data, 0.5)

        np.testing.assert_allclose(result[0], [0.0, 0.5, 1.0, 1.5, 2.0, 1.0])

    def test_pitch_shifts_with_speed(self):
        """Doubling the rate doubles the frequency."""
        sr = 8000
        result = playback_rate_resample(sine(440, sr)[np.newaxis, :], 2.0)[0]

        spectrum = np.abs(np.fft.rfft(result))
        freqs = np.fft.rfftfreq(len(result), 1 / sr)
        assert abs(freqs[np.argmax(spectrum)] - 880) < 10

    def test_rendered_length(self):
        assert rendered_length(44100, 2.0) == 22050
        assert rendered_length(10, 3.0) == 3


class TestLowShelf:
    """Tests for the bass boost."""

    def test_zero_gain_is_bypass(self):
        data = np.random.randn(2, 1000)
        np.testing.assert_array_equal(apply_low_shelf(data, 44100, 0.0), data)

    def test_empty_input(self):
        """No frames in, no frames out, with the shelf active."""
        result = apply_low_shelf(np.zeros((2, 0)), 44100, 6.0)

        assert result.shape == (2, 0)
        assert result.dtype == np.float64

    def test_boosts_lows(self):
        """A 60 Hz tone gets close to the full shelf gain."""
        sr = 44100
        tone = sine(60, sr)[np.newaxis, :]
        boosted = apply_low_shelf(tone, sr, 12.0)

        # skip the filter settling time
        gain_db = 20 * np.log10(compute_rms(boosted[:, sr // 2:]) / compute_rms(tone[:, sr // 2:]))
        assert gain_db > 9.0

    def test_leaves_highs(self):
        """A 5 kHz tone stays within 1 dB."""
        sr = 44100
        tone = sine(5000, sr)[np.newaxis, :]
        boosted = apply_low_shelf(tone, sr, 12.0)

        gain_db = 20 * np.log10(compute_rms(boosted[:, sr // 2:]) / compute_rms(tone[:, sr // 2:]))
        assert abs(gain_db) < 1.0

    def test_input_unchanged(self):
        data = np.random.randn(1, 500)
        copy = data.copy()
        apply_low_shelf(data, 44100, 6.0)

        np.testing.assert_array_equal(data, copy)


class TestConvolution:
    """Tests for the reverb convolution."""

    def test_unit_impulse_passthrough(self):
        """A delta kernel scaled by 1/sqrt(len) reproduces the input."""
        impulse = np.zeros((2, 4))
        impulse[:, 0] = 2.0  # 1/sqrt(4) scaling -> unit gain
        data = np.random.randn(2, 100)

        result = convolve_with_impulse(data, impulse)

        np.testing.assert_allclose(result, data, atol=1e-9)

    def test_truncated_to_input_length(self):
        result = convolve_with_impulse(np.ones((1, 50)), np.ones((2, 200)))
        assert result.shape == (1, 50)

    def test_mono_uses_average_kernel(self):
        """Mono input hears both impulse channels down-mixed."""
        impulse = np.zeros((2, 1))
        impulse[0, 0] = 1.0
        impulse[1, 0] = 0.0
        data = np.ones((1, 10))

        result = convolve_with_impulse(data, impulse)

        np.testing.assert_allclose(result, 0.5)

    def test_stereo_channel_mapping(self):
        """Left uses impulse channel 0, right uses channel 1."""
        impulse = np.array([[1.0], [-1.0]])
        data = np.ones((2, 5))

        result = convolve_with_impulse(data, impulse)

        np.testing.assert_allclose(result[0], 1.0)
        np.testing.assert_allclose(result[1], -1.0)

    def test_cancellation_hook_called_per_channel(self):
        calls = []
        convolve_with_impulse(np.ones((3, 10)), np.ones((2, 4)), lambda: calls.append(1))
        assert len(calls) == 3


class TestGainEnvelope:
    """Tests for the fade-in/hold/fade-out curve."""

    def test_endpoints_at_floor(self):
        """First and last frames sit at floor * gain."""
        env = gain_envelope(44100, 44100, 0.8)

        assert env[0] == pytest.approx(0.8e-3)
        assert env[-1] == pytest.approx(0.8e-3)

    def test_hold_level(self):
        env = gain_envelope(44100, 44100, 0.8)

        np.testing.assert_allclose(env[4410:-4410], 0.8)

    def test_never_exceeds_gain(self):
        for gain in (0.1, 0.5, 1.0):
            env = gain_envelope(20000, 44100, gain)
            assert env.max() <= gain + 1e-12

    def test_fade_is_monotonic(self):
        env = gain_envelope(44100, 44100, 1.0)

        assert np.all(np.diff(env[:4410]) > 0)
        assert np.all(np.diff(env[-4410:]) < 0)

    def test_short_buffer_fades_clamped(self):
        """Under 200 ms each fade takes at most half the buffer."""
        env = gain_envelope(1000, 44100, 1.0)

        assert len(env) == 1000
        assert np.argmax(env) in (499, 500)
        assert np.all(np.diff(env[:500]) > 0)
        assert np.all(np.diff(env[500:]) < 0)

    def test_zero_gain_is_silence(self):
        np.testing.assert_array_equal(gain_envelope(100, 8000, 0.0), 0.0)


class TestLevelMeasurement:
    """Tests for level measurement."""

    def test_rms_sine(self):
        """RMS of a sine = peak/sqrt(2)."""
        rms = compute_rms(sine(440, 44100))
        assert rms == pytest.approx(1.0 / np.sqrt(2), rel=0.01)

    def test_rms_db(self):
        data = np.ones(100) * 0.1  # -20 dB
        assert compute_rms(data, as_db=True) == pytest.approx(-20.0, rel=0.01)

    def test_peak(self):
        assert compute_peak(np.array([0.3, -0.8, 0.5])) == 0.8

    def test_empty(self):
        assert compute_rms(np.array([])) == 0.0
        assert compute_peak(np.array([]), as_db=True) == -np.inf
