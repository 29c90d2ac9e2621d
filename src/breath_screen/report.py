"""Analysis report: the structured result handed to presentation layers."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from breath_screen.audio.features import FrameFeatures
from breath_screen.classifier.rules import ClassificationResult
from breath_screen.detection.peaks import Peak
from breath_screen.pipeline.feature_map import FeatureSnapshot


@dataclass(frozen=True)
class AnalysisReport:
    """Features, decision, ranked abnormalities, frames and peaks of one run."""

    features: FeatureSnapshot
    classification: ClassificationResult
    abnormalities: Tuple[Dict[str, Any], ...]
    window_features: Tuple[FrameFeatures, ...]
    peaks: Tuple[Peak, ...]

    @property
    def insufficient_data(self) -> bool:
        """True when the recording was shorter than one analysis window."""
        return not self.window_features

    def to_dict(self, include_spectrum: bool = True) -> Dict[str, Any]:
        """Plain-record form with the display (camelCase) key names."""
        frames: List[Dict[str, Any]] = [
            f.to_dict(include_spectrum=include_spectrum) for f in self.window_features
        ]
        features: Dict[str, Any] = {}
        for key, value in self.features.values.items():
            features[key] = frames if key == "windowFeatures" else value
        features["timestamp"] = self.features.captured_at
        return {
            "features": features,
            "classification": self.classification.to_dict(),
            "abnormalities": [dict(a) for a in self.abnormalities],
            "windowFeatures": frames,
            "peaks": [{"index": p.index, "value": p.value} for p in self.peaks],
        }

    def to_json(self, include_spectrum: bool = False, indent: int = 2) -> str:
        return json.dumps(self.to_dict(include_spectrum=include_spectrum), indent=indent)

    def summary(self) -> str:
        """Short human-readable summary, one line per item."""
        c = self.classification
        f = self.features
        lines = [f"Status: {c.status.value}"]
        if c.breathing_type is not None:
            lines.append(f"Breathing type: {c.breathing_type.value}")
        lines += [
            f"Breathing rate: {f['breathingRate']:.1f} breaths/min ({f['peakCount']} peaks)",
            f"Stability: {c.stability_score}  Lung comfort: {c.lung_comfort}",
            f"Confidence: {c.confidence_score}",
        ]
        if self.insufficient_data:
            lines.append("Warning: recording shorter than one analysis window")
        for a in self.abnormalities:
            lines.append(f"  - [{a['type']}] {a['description']} ({a['percentage']}%)")
        return "\n".join(lines)
