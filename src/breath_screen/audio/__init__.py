"""Audio input, configuration and per-frame feature extraction modules."""

from breath_screen.audio.config import AnalysisConfig, ClassifierThresholds
from breath_screen.audio.collector import AudioCollector, load_wav
from breath_screen.audio.features import (
    FrameFeatures,
    RingBuffer,
    Spectrum,
    extract_frame_features,
    spectrum,
)

__all__ = [
    "AnalysisConfig",
    "AudioCollector",
    "ClassifierThresholds",
    "FrameFeatures",
    "RingBuffer",
    "Spectrum",
    "extract_frame_features",
    "load_wav",
    "spectrum",
]
