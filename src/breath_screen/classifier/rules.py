"""Threshold-based breathing classification.

Five independent checks run in a fixed order over the aggregate features.
Each may rank one abnormality event and adds a weighted share of its
severity to the abnormality score:

  1. zero-crossing rate     (wheezing)       severity * 0.40
  2. energy variance        (irregular)      severity * 0.35
  3. breathing rate         (shortness)      severity * 0.30
  4. signal quality         (noise)          flat 15
  5. frame energy spikes    (irregular)      severity * 0.25

Checks 1, 2, 3 and 5 mark the recording abnormal on their own. Signal
quality does not, except for a fully silent recording (avgEnergy == 0).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, NamedTuple, Optional, Sequence, Tuple

from breath_screen.audio.config import ClassifierThresholds
from breath_screen.classifier.severity_queue import (
    AbnormalityEvent,
    AbnormalityType,
    SeverityQueue,
)

logger = logging.getLogger(__name__)


class Status(str, Enum):
    NORMAL = "normal"
    ABNORMAL = "abnormal"


class BreathingType(str, Enum):
    DEEP = "deep"
    SLOW = "slow"
    REGULAR = "regular"


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive scores (not banker's rounding)."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class AggregateFeatures:
    """The scalar inputs of the classifier, read from a feature map."""

    avg_energy: float
    avg_rms: float
    avg_zcr: float
    energy_variance: float
    breathing_rate: float
    frame_energies: Tuple[float, ...] = ()

    @classmethod
    def from_feature_map(cls, features: Any) -> "AggregateFeatures":
        """Build from a FeatureMap, FeatureSnapshot or plain mapping."""
        frames = features.get("windowFeatures") or ()
        return cls(
            avg_energy=float(features.get("avgEnergy", 0.0)),
            avg_rms=float(features.get("avgRMS", 0.0)),
            avg_zcr=float(features.get("avgZCR", 0.0)),
            energy_variance=float(features.get("energyVariance", 0.0)),
            breathing_rate=float(features.get("breathingRate", 12.0)),
            frame_energies=tuple(
                float(f["energy"] if isinstance(f, Mapping) else f.energy) for f in frames
            ),
        )


class CheckResult(NamedTuple):
    event: Optional[AbnormalityEvent]
    severity: float
    contribution: float
    marks_abnormal: bool = True


Check = Callable[[AggregateFeatures, ClassifierThresholds], Optional[CheckResult]]


def check_zero_crossing_rate(f: AggregateFeatures, t: ClassifierThresholds) -> Optional[CheckResult]:
    """High ZCR points at high-frequency content (wheezing)."""
    if f.avg_zcr <= t.zcr_max:
        return None
    severity = min(100.0, (f.avg_zcr - t.zcr_max) / t.zcr_max * 100)
    event = AbnormalityEvent(
        AbnormalityType.WHEEZING,
        "Wheezing pattern detected (high frequency)",
        round_half_up(max(35.0, severity)),
    )
    return CheckResult(event, severity, severity * 0.4)


def check_energy_variance(f: AggregateFeatures, t: ClassifierThresholds) -> Optional[CheckResult]:
    """Frame energy variance above the limit means an unsteady rhythm."""
    if f.energy_variance <= t.variance_max:
        return None
    severity = min(100.0, (f.energy_variance - t.variance_max) / t.variance_max * 80)
    event = AbnormalityEvent(
        AbnormalityType.IRREGULAR,
        "Irregular breathing rhythm detected",
        round_half_up(max(30.0, severity)),
    )
    return CheckResult(event, severity, severity * 0.35)


def check_breathing_rate(f: AggregateFeatures, t: ClassifierThresholds) -> Optional[CheckResult]:
    rate = f.breathing_rate
    if t.rate_min <= rate <= t.rate_max:
        return None
    if rate < t.rate_min:
        severity = (t.rate_min - rate) / t.rate_min * 70
        description = "Slow breathing rate (Bradypnea)"
    else:
        severity = (rate - t.rate_max) / t.rate_max * 80
        description = "Rapid breathing rate (Tachypnea)"
    event = AbnormalityEvent(
        AbnormalityType.SHORTNESS,
        description,
        round_half_up(max(25.0, min(100.0, severity))),
    )
    return CheckResult(event, severity, severity * 0.3)


def check_signal_quality(f: AggregateFeatures, t: ClassifierThresholds) -> Optional[CheckResult]:
    """Weak signal: likely a poor recording or environmental noise."""
    if f.avg_rms >= t.min_rms and f.avg_energy >= t.min_energy:
        return None
    event = AbnormalityEvent(
        AbnormalityType.NOISE,
        "Poor signal quality / Environmental noise",
        35,
    )
    return CheckResult(event, 35.0, 15.0, marks_abnormal=f.avg_energy == 0)


def check_energy_spikes(f: AggregateFeatures, t: ClassifierThresholds) -> Optional[CheckResult]:
    """Sudden frame-to-frame energy jumps (cough or gasp)."""
    energies = f.frame_energies
    if len(energies) <= 3:
        return None
    spikes = sum(
        1 for prev, cur in zip(energies, energies[1:]) if cur > prev * t.spike_ratio
    )
    if spikes <= 1:
        return None
    severity = min(80.0, spikes * 20.0)
    event = AbnormalityEvent(
        AbnormalityType.IRREGULAR,
        "Sudden energy spikes (cough/gasp pattern)",
        round_half_up(severity),
    )
    return CheckResult(event, severity, severity * 0.25)


CHECKS: Tuple[Check, ...] = (
    check_zero_crossing_rate,
    check_energy_variance,
    check_breathing_rate,
    check_signal_quality,
    check_energy_spikes,
)


@dataclass(frozen=True)
class ClassificationResult:
    """Final decision of one analysis run.

    breathing_type is set only for normal recordings and
    abnormality_confidence only for abnormal ones.
    """

    status: Status
    stability_score: int
    lung_comfort: str
    confidence_score: int
    breathing_type: Optional[BreathingType] = None
    abnormality_confidence: Optional[int] = None

    @property
    def is_normal(self) -> bool:
        return self.status is Status.NORMAL

    def to_dict(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {"status": self.status.value}
        if self.breathing_type is not None:
            record["breathingType"] = self.breathing_type.value
        if self.abnormality_confidence is not None:
            record["abnormalityConfidence"] = self.abnormality_confidence
        record["stabilityScore"] = self.stability_score
        record["lungComfort"] = self.lung_comfort
        record["confidenceScore"] = self.confidence_score
        return record


def stability_score(energy_variance: float) -> float:
    return max(0.0, 100.0 - energy_variance * 15000)


def _breathing_type(f: AggregateFeatures, t: ClassifierThresholds) -> BreathingType:
    if f.avg_rms > t.high_amplitude and f.breathing_rate < t.deep_rate_max:
        return BreathingType.DEEP
    if f.avg_rms <= t.high_amplitude and f.breathing_rate < t.slow_rate_max:
        return BreathingType.SLOW
    return BreathingType.REGULAR


def _lung_comfort(stability: float) -> str:
    if stability > 80:
        return "Good"
    if stability > 60:
        return "Moderate"
    return "Fair"


def classify_breathing(
    features: Any,
    queue: Optional[SeverityQueue] = None,
    thresholds: Optional[ClassifierThresholds] = None,
    checks: Sequence[Check] = CHECKS,
) -> Tuple[ClassificationResult, SeverityQueue]:
    """Classify a recording from its aggregate features.

    Args:
        features: FeatureMap, FeatureSnapshot, AggregateFeatures or a mapping
            with the feature-map keys.
        queue: Queue to fill with detected events (a new one if None).
        thresholds: Decision thresholds (defaults if None).
        checks: Ordered checks to evaluate.

    Returns:
        (result, queue): the decision and the ranked abnormality events.
    """
    t = thresholds or ClassifierThresholds()
    queue = queue if queue is not None else SeverityQueue()
    if isinstance(features, AggregateFeatures):
        f = features
    else:
        f = AggregateFeatures.from_feature_map(features)

    is_normal = True
    score = 0.0
    for check in checks:
        outcome = check(f, t)
        if outcome is None:
            continue
        logger.debug(
            "%s triggered: severity=%.2f contribution=%.2f",
            check.__name__, outcome.severity, outcome.contribution,
        )
        if outcome.event is not None:
            queue.enqueue(outcome.event, outcome.severity)
        score += outcome.contribution
        if outcome.marks_abnormal:
            is_normal = False

    stability = stability_score(f.energy_variance)

    if is_normal and score < t.normal_score_limit:
        result = ClassificationResult(
            status=Status.NORMAL,
            breathing_type=_breathing_type(f, t),
            stability_score=round_half_up(stability),
            lung_comfort=_lung_comfort(stability),
            confidence_score=round_half_up(max(75.0, 100.0 - score)),
        )
    else:
        if queue.is_empty() and score > 0:
            queue.enqueue(
                AbnormalityEvent(
                    AbnormalityType.IRREGULAR,
                    "General breathing irregularity",
                    round_half_up(min(100.0, score)),
                ),
                score,
            )
        result = ClassificationResult(
            status=Status.ABNORMAL,
            abnormality_confidence=round_half_up(min(100.0, max(30.0, score))),
            stability_score=round_half_up(stability),
            lung_comfort="Needs Attention",
            confidence_score=round_half_up(min(95.0, score + 35)),
        )

    logger.info(
        "Classified %s (score=%.2f, events=%d)", result.status.value, score, len(queue)
    )
    return result, queue
