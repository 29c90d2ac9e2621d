"""Unit tests for the noise gate and sliding-window segmentation."""

from __future__ import annotations

import unittest

import numpy as np

from breath_screen.pipeline.sliding_window import remove_noise, sliding_window_analysis


class TestRemoveNoise(unittest.TestCase):
    """Tests for the fixed-threshold noise gate."""

    def test_gate_zeroes_small_samples(self) -> None:
        x = np.array([0.01, -0.015, 0.5, -0.3, 0.0199, 0.021])
        out = remove_noise(x)
        np.testing.assert_array_equal(out, [0.0, 0.0, 0.5, -0.3, 0.0, 0.021])

    def test_gate_does_not_modify_input(self) -> None:
        x = np.array([0.01, 0.5])
        remove_noise(x)
        np.testing.assert_array_equal(x, [0.01, 0.5])

    def test_custom_threshold(self) -> None:
        out = remove_noise(np.array([0.1, 0.3, -0.25]), noise_threshold=0.2)
        np.testing.assert_array_equal(out, [0.0, 0.3, -0.25])


class TestSlidingWindow(unittest.TestCase):
    """Tests for sliding_window_analysis."""

    def test_frame_offsets_drop_partial_tail(self) -> None:
        frames = sliding_window_analysis(np.ones(1000), 400, 200, 1000)
        self.assertEqual([f.start_sample for f in frames], [0, 200, 400, 600])
        self.assertEqual([f.timestamp for f in frames], [0.0, 0.2, 0.4, 0.6])

    def test_exact_fit_includes_last_frame(self) -> None:
        frames = sliding_window_analysis(np.ones(800), 400, 200, 1000)
        self.assertEqual([f.start_sample for f in frames], [0, 200, 400])

    def test_signal_equal_to_window(self) -> None:
        frames = sliding_window_analysis(np.ones(400), 400, 200, 1000)
        self.assertEqual(len(frames), 1)

    def test_short_signal_yields_no_frames(self) -> None:
        self.assertEqual(sliding_window_analysis(np.ones(399), 400, 200, 1000), [])
        self.assertEqual(sliding_window_analysis(np.array([]), 400, 200, 1000), [])

    def test_frame_features_follow_signal(self) -> None:
        x = np.concatenate([np.zeros(400), np.full(400, 0.5)])
        frames = sliding_window_analysis(x, 400, 400, 1000)
        self.assertEqual(frames[0].energy, 0.0)
        self.assertAlmostEqual(frames[1].energy, 0.25)
        self.assertAlmostEqual(frames[1].rms, 0.5)

    def test_invalid_hop(self) -> None:
        with self.assertRaises(ValueError):
            sliding_window_analysis(np.ones(10), 4, 0, 1000)


if __name__ == "__main__":
    unittest.main(verbosity=2)
