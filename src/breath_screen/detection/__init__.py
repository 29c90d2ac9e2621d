"""Breath-cycle detection."""

from breath_screen.detection.peaks import Peak, breathing_rate, detect_peaks

__all__ = ["Peak", "breathing_rate", "detect_peaks"]
