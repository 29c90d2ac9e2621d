"""Centralized analysis configuration.

Encoding standards:
- Audio: mono, normalized float samples (16 kHz default)
- Frames: 500 ms window / 50 % overlap
- Noise gate: fixed amplitude threshold 0.02
- Capture: ring buffer holding the most recent 10 s
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalysisConfig:
    """Recording and frame analysis configuration."""

    # Recording
    sample_rate: int = 16_000
    channels: int = 1  # mono
    dtype: str = "float32"
    buffer_sec: float = 10.0

    # Sliding window
    window_sec: float = 0.5
    hop_ratio: float = 0.5

    # Noise gate: |x| <= threshold is zeroed
    noise_threshold: float = 0.02

    # Peak detection threshold as a fraction of the mean frame RMS
    peak_threshold_ratio: float = 0.5

    # Breaths per minute reported when fewer than two cycles are found
    default_breathing_rate: float = 12.0

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError("sample_rate must be > 0")
        if self.window_length < 1:
            raise ValueError("window_sec is too short for the sample rate")
        if self.hop_length < 1:
            raise ValueError("hop_ratio is too small for the window length")
        if self.buffer_capacity < 1:
            raise ValueError("buffer_sec must hold at least one sample")

    @property
    def window_length(self) -> int:
        """Analysis window length in samples."""
        return int(self.sample_rate * self.window_sec)

    @property
    def hop_length(self) -> int:
        """Hop between window starts in samples."""
        return int(self.window_length * self.hop_ratio)

    @property
    def buffer_capacity(self) -> int:
        """Capture ring buffer size in samples."""
        return int(self.buffer_sec * self.sample_rate)


@dataclass(frozen=True)
class ClassifierThresholds:
    """Decision thresholds, calibrated for typical resting breathing."""

    zcr_max: float = 0.08
    variance_max: float = 0.0005
    rate_min: float = 10.0
    rate_max: float = 18.0

    # Breathing type
    high_amplitude: float = 0.06
    deep_rate_max: float = 14.0
    slow_rate_max: float = 12.0

    # Signal quality
    min_rms: float = 0.008
    min_energy: float = 0.00005

    # Cough / gasp detection: frame energy jump factor
    spike_ratio: float = 3.0

    # abnormalityScore at or above this is abnormal
    normal_score_limit: float = 20.0
