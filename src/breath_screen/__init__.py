"""Breathing screen - ring buffer, spectral features, peak detection, classifier."""

from breath_screen.pipeline.analyzer import analyze_breathing
from breath_screen.report import AnalysisReport

__all__ = ["AnalysisReport", "analyze_breathing"]
