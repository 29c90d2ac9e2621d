"""Threshold classifier and severity ranking."""

from breath_screen.classifier.rules import ClassificationResult, classify_breathing
from breath_screen.classifier.severity_queue import AbnormalityEvent, SeverityQueue

__all__ = [
    "AbnormalityEvent",
    "ClassificationResult",
    "SeverityQueue",
    "classify_breathing",
]
