"""Unit tests for ring buffer, spectral transform and per-frame features."""

from __future__ import annotations

import math
import unittest

import numpy as np

from breath_screen.audio.features import (
    RingBuffer,
    dominant_frequency_bin,
    extract_frame_features,
    frame_energy,
    frame_rms,
    spectrum,
    zero_crossing_rate,
)


class TestRingBuffer(unittest.TestCase):
    """Tests for RingBuffer."""

    def test_zero_capacity_rejected(self) -> None:
        with self.assertRaises(ValueError):
            RingBuffer(0)

    def test_partial_fill_keeps_order(self) -> None:
        ring = RingBuffer(5)
        for v in (1.0, 2.0, 3.0):
            ring.push(v)
        np.testing.assert_array_equal(ring.get_all(), [1.0, 2.0, 3.0])
        self.assertEqual(len(ring), 3)
        self.assertFalse(ring.is_full)

    def test_overflow_keeps_last_capacity_values(self) -> None:
        """After more pushes than capacity, the last C values remain in push order."""
        ring = RingBuffer(4)
        for v in range(11):
            ring.push(float(v))
            out = ring.get_all()
            self.assertLessEqual(len(out), 4)
            np.testing.assert_array_equal(out, np.arange(max(0, v - 3), v + 1))
        self.assertTrue(ring.is_full)

    def test_push_batch_matches_single_pushes(self) -> None:
        rng = np.random.default_rng(7)
        data = rng.standard_normal(23).astype(np.float32)
        single = RingBuffer(6)
        batched = RingBuffer(6)
        for v in data:
            single.push(v)
        batched.push_batch(data[:4])
        batched.push_batch(data[4:9])
        batched.push_batch(data[9:])
        np.testing.assert_array_equal(single.get_all(), batched.get_all())
        np.testing.assert_array_equal(batched.get_all(), data[-6:])

    def test_batch_larger_than_capacity(self) -> None:
        ring = RingBuffer(3)
        ring.push(9.0)
        ring.push_batch(np.arange(10, dtype=np.float32))
        np.testing.assert_array_equal(ring.get_all(), [7.0, 8.0, 9.0])

    def test_get_all_is_a_copy(self) -> None:
        ring = RingBuffer(3)
        ring.push_batch(np.array([1.0, 2.0, 3.0, 4.0]))
        out = ring.get_all()
        out[:] = 0
        np.testing.assert_array_equal(ring.get_all(), [2.0, 3.0, 4.0])

    def test_clear_keeps_capacity(self) -> None:
        ring = RingBuffer(3)
        ring.push_batch(np.array([1.0, 2.0, 3.0, 4.0]))
        ring.clear()
        self.assertEqual(len(ring), 0)
        self.assertEqual(ring.capacity, 3)
        self.assertEqual(ring.get_all().size, 0)
        ring.push(5.0)
        np.testing.assert_array_equal(ring.get_all(), [5.0])


class TestSpectrum(unittest.TestCase):
    """Tests for the zero-padded spectral transform."""

    def test_empty_and_single_sample(self) -> None:
        self.assertEqual(len(spectrum(np.array([])).magnitudes), 0)
        self.assertEqual(len(spectrum(np.array([0.5])).magnitudes), 0)

    def test_bin_count_uses_next_power_of_two(self) -> None:
        self.assertEqual(len(spectrum(np.ones(5)).magnitudes), 4)
        self.assertEqual(len(spectrum(np.ones(8)).magnitudes), 4)
        self.assertEqual(len(spectrum(np.ones(8000)).magnitudes), 4096)

    def test_direct_matches_fft(self) -> None:
        rng = np.random.default_rng(3)
        x = rng.standard_normal(100)
        fast = spectrum(x, method="fft")
        direct = spectrum(x, method="direct")
        np.testing.assert_allclose(fast.real, direct.real, atol=1e-9)
        np.testing.assert_allclose(fast.imag, direct.imag, atol=1e-9)
        np.testing.assert_allclose(fast.magnitudes, direct.magnitudes, atol=1e-9)

    def test_sign_convention(self) -> None:
        """imag = -sum x sin(...): a sine at bin 1 has negative imaginary part."""
        t = np.arange(16)
        s = spectrum(np.sin(2 * np.pi * t / 16))
        self.assertAlmostEqual(s.real[1], 0.0, places=9)
        self.assertAlmostEqual(s.imag[1], -8.0, places=9)
        self.assertAlmostEqual(s.magnitudes[1], 8.0, places=9)

    def test_unknown_method(self) -> None:
        with self.assertRaises(ValueError):
            spectrum(np.ones(4), method="wavelet")

    def test_pure_sine_peak_bin(self) -> None:
        """Global max bin (excluding DC) maps back to the tone within one bin."""
        sample_rate = 16_000
        n = 4096
        for freq in (250.0, 1000.0, 3137.0):
            x = np.sin(2 * np.pi * freq * np.arange(n) / sample_rate)
            mags = spectrum(x).magnitudes
            k = dominant_frequency_bin(mags)
            resolution = sample_rate / n
            self.assertLessEqual(abs(k * resolution - freq), resolution)


class TestFrameFeatures(unittest.TestCase):
    """Tests for energy, RMS, ZCR and dominant frequency."""

    def test_zcr_alternating_is_one(self) -> None:
        x = np.array([1.0, -1.0] * 50)
        self.assertEqual(zero_crossing_rate(x), 1.0)

    def test_zcr_constant_non_negative_is_zero(self) -> None:
        self.assertEqual(zero_crossing_rate(np.zeros(100)), 0.0)
        self.assertEqual(zero_crossing_rate(np.full(100, 0.3)), 0.0)

    def test_zcr_degenerate_frames(self) -> None:
        self.assertEqual(zero_crossing_rate(np.array([])), 0.0)
        self.assertEqual(zero_crossing_rate(np.array([-0.5])), 0.0)

    def test_zcr_zero_counts_as_non_negative(self) -> None:
        self.assertAlmostEqual(zero_crossing_rate(np.array([-1.0, 0.0, 1.0, 0.0])), 1 / 3)

    def test_energy_and_rms(self) -> None:
        rng = np.random.default_rng(11)
        x = rng.uniform(-1, 1, 500)
        self.assertAlmostEqual(frame_rms(x), math.sqrt(frame_energy(x)))
        self.assertEqual(frame_energy(np.zeros(64)), 0.0)
        self.assertEqual(frame_energy(np.array([])), 0.0)
        self.assertAlmostEqual(frame_energy(np.array([1.0, -1.0, 0.0, 0.0])), 0.5)

    def test_dominant_frequency_uses_frame_length(self) -> None:
        """Bin-to-Hz uses sample_rate / (2 * frame length), not the padded length."""
        sample_rate = 16_000
        n = 8000
        x = np.sin(2 * np.pi * 500.0 * np.arange(n) / sample_rate)
        feats = extract_frame_features(x, 0, sample_rate)
        k = dominant_frequency_bin(spectrum(x).magnitudes)
        self.assertAlmostEqual(feats.dominant_freq, k * sample_rate / (n * 2))

    def test_silent_frame(self) -> None:
        feats = extract_frame_features(np.zeros(800), 1600, 16_000)
        self.assertEqual(feats.energy, 0.0)
        self.assertEqual(feats.rms, 0.0)
        self.assertEqual(feats.zcr, 0.0)
        self.assertEqual(feats.dominant_freq, 0.0)
        self.assertAlmostEqual(feats.timestamp, 0.1)
        self.assertEqual(feats.start_sample, 1600)

    def test_magnitudes_read_only(self) -> None:
        feats = extract_frame_features(np.ones(16), 0, 16_000)
        with self.assertRaises(ValueError):
            feats.magnitudes[0] = 1.0

    def test_to_dict_keys(self) -> None:
        record = extract_frame_features(np.ones(16), 0, 16_000).to_dict()
        self.assertEqual(
            set(record),
            {"startSample", "energy", "rms", "zcr", "dominantFreq", "fftMagnitudes", "timestamp"},
        )
        self.assertNotIn(
            "fftMagnitudes",
            extract_frame_features(np.ones(16), 0, 16_000).to_dict(include_spectrum=False),
        )


if __name__ == "__main__":
    unittest.main(verbosity=2)
