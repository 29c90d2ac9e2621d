"""Noise gate and overlapping-frame segmentation."""

from __future__ import annotations

import logging
from typing import List

import numpy as np

from breath_screen.audio.features import FrameFeatures, extract_frame_features

logger = logging.getLogger(__name__)


def remove_noise(signal: np.ndarray, noise_threshold: float = 0.02) -> np.ndarray:
    """Zero every sample with |x| <= noise_threshold; others pass unchanged."""
    x = np.asarray(signal, dtype=np.float64)
    return np.where(np.abs(x) > noise_threshold, x, 0.0)


def sliding_window_analysis(
    signal: np.ndarray,
    window_size: int,
    hop_size: int,
    sample_rate: int,
    method: str = "fft",
) -> List[FrameFeatures]:
    """Extract features for frames starting at 0, hop, 2*hop, ...

    Only whole frames (start + window_size <= len(signal)) are analyzed; the
    trailing partial frame is dropped. A signal shorter than one window
    returns an empty list.
    """
    if window_size < 1 or hop_size < 1:
        raise ValueError("window_size and hop_size must be >= 1")
    x = np.asarray(signal, dtype=np.float64)
    frames: List[FrameFeatures] = []
    for start in range(0, len(x) - window_size + 1, hop_size):
        window = x[start : start + window_size]
        frames.append(extract_frame_features(window, start, sample_rate, method=method))
    logger.debug(
        "Analyzed %d frames (window=%d, hop=%d, samples=%d)",
        len(frames), window_size, hop_size, len(x),
    )
    return frames
