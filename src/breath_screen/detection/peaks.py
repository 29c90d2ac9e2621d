"""Breath-cycle peak detection on the per-frame RMS envelope."""

from __future__ import annotations

from typing import List, NamedTuple, Sequence

import numpy as np


class Peak(NamedTuple):
    index: int
    value: float


def detect_peaks(envelope: Sequence[float], threshold: float = 0.1) -> List[Peak]:
    """Find local maxima above threshold, scanning left to right.

    A sample is a peak when it is strictly greater than both neighbours and
    than threshold. A candidate is kept only if it lies more than
    floor(len(envelope) / 20) positions after the last kept peak; the first
    one found wins, not the tallest.

    Args:
        envelope: Smoothed amplitude sequence (one RMS value per frame).
        threshold: Minimum amplitude for a peak.

    Returns:
        Peaks ordered by index.
    """
    x = np.asarray(envelope, dtype=np.float64).ravel()
    min_distance = len(x) // 20
    peaks: List[Peak] = []
    for i in range(1, len(x) - 1):
        if x[i] > x[i - 1] and x[i] > x[i + 1] and x[i] > threshold:
            if not peaks or i - peaks[-1].index > min_distance:
                peaks.append(Peak(i, float(x[i])))
    return peaks


def breathing_rate(
    peaks: Sequence[Peak],
    duration_sec: float,
    default: float = 12.0,
) -> float:
    """Breaths per minute from the peak count.

    Fewer than two peaks (or a zero-length recording) is inconclusive and
    yields the fixed default.
    """
    if len(peaks) > 1 and duration_sec > 0:
        return len(peaks) / duration_sec * 60
    return default
