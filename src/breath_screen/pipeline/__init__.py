"""Frame segmentation, feature aggregation and end-to-end analysis."""

from breath_screen.pipeline.analyzer import analyze_breathing
from breath_screen.pipeline.feature_map import FeatureMap, FeatureSnapshot

__all__ = ["FeatureMap", "FeatureSnapshot", "analyze_breathing"]
