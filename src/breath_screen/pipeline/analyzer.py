"""End-to-end analysis: samples -> noise gate -> frames -> peaks -> classifier -> report.

One bounded recording per call; the run is synchronous and deterministic
apart from the snapshot capture time.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

import numpy as np

from breath_screen.audio.config import AnalysisConfig, ClassifierThresholds
from breath_screen.audio.features import FrameFeatures
from breath_screen.classifier.rules import classify_breathing
from breath_screen.classifier.severity_queue import SeverityQueue
from breath_screen.detection.peaks import Peak, breathing_rate, detect_peaks
from breath_screen.pipeline.feature_map import FeatureMap
from breath_screen.pipeline.sliding_window import remove_noise, sliding_window_analysis
from breath_screen.report import AnalysisReport

logger = logging.getLogger(__name__)


def _mean(values: Sequence[float]) -> float:
    """Mean with an empty sequence defined as 0."""
    return float(np.mean(values)) if len(values) else 0.0


def aggregate_features(
    frames: Sequence[FrameFeatures],
    duration_sec: float,
    config: AnalysisConfig,
    feature_map: Optional[FeatureMap] = None,
) -> Tuple[FeatureMap, List[Peak]]:
    """Fill a feature map from per-frame features and return it with the peaks."""
    feature_map = feature_map if feature_map is not None else FeatureMap()
    energies = np.array([f.energy for f in frames], dtype=np.float64)
    envelope = np.array([f.rms for f in frames], dtype=np.float64)

    avg_energy = _mean(energies)
    avg_rms = _mean(envelope)
    variance = _mean((energies - avg_energy) ** 2)

    peaks = detect_peaks(envelope, avg_rms * config.peak_threshold_ratio)
    rate = breathing_rate(peaks, duration_sec, default=config.default_breathing_rate)
    logger.debug("Detected %d peaks over %.2f s -> %.1f breaths/min", len(peaks), duration_sec, rate)

    feature_map.set("avgEnergy", avg_energy)
    feature_map.set("avgRMS", avg_rms)
    feature_map.set("avgZCR", _mean([f.zcr for f in frames]))
    feature_map.set("avgDominantFreq", _mean([f.dominant_freq for f in frames]))
    feature_map.set("energyVariance", variance)
    feature_map.set("breathingRate", rate)
    feature_map.set("peakCount", len(peaks))
    feature_map.set("windowFeatures", frames)
    return feature_map, peaks


def analyze_breathing(
    audio: np.ndarray,
    sample_rate: Optional[int] = None,
    config: Optional[AnalysisConfig] = None,
    thresholds: Optional[ClassifierThresholds] = None,
    method: str = "fft",
) -> AnalysisReport:
    """Screen one mono recording and return the full report.

    Args:
        audio: 1-D normalized samples.
        sample_rate: Sample rate in Hz; overrides config.sample_rate.
        config: Analysis parameters (defaults if None).
        thresholds: Classifier thresholds (defaults if None).
        method: Spectral transform, "fft" or "direct".

    Returns:
        AnalysisReport. A recording shorter than one window yields an
        empty frame list (report.insufficient_data) rather than an error.
    """
    config = config or AnalysisConfig()
    if sample_rate is not None and sample_rate != config.sample_rate:
        config = replace(config, sample_rate=sample_rate)
    samples = np.asarray(audio, dtype=np.float64)
    if samples.ndim != 1:
        raise ValueError(f"expected mono 1-D samples, got shape {samples.shape}")

    cleaned = remove_noise(samples, config.noise_threshold)
    frames = sliding_window_analysis(
        cleaned,
        config.window_length,
        config.hop_length,
        config.sample_rate,
        method=method,
    )
    if not frames:
        logger.warning(
            "Recording of %d samples is shorter than one %d-sample window",
            len(samples), config.window_length,
        )

    duration_sec = len(samples) / config.sample_rate
    feature_map, peaks = aggregate_features(frames, duration_sec, config)

    result, queue = classify_breathing(feature_map, SeverityQueue(), thresholds)
    return AnalysisReport(
        features=feature_map.snapshot(),
        classification=result,
        abnormalities=tuple(queue.to_records()),
        window_features=tuple(frames),
        peaks=tuple(peaks),
    )
