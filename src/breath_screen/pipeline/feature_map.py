"""Aggregate feature map with an append-only snapshot history."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

FEATURE_KEYS = (
    "avgEnergy",
    "avgRMS",
    "avgZCR",
    "avgDominantFreq",
    "energyVariance",
    "breathingRate",
    "peakCount",
    "windowFeatures",
)


@dataclass(frozen=True, eq=False)
class FeatureSnapshot:
    """Immutable copy of the feature map at capture time."""

    values: Mapping[str, Any]
    captured_at: float = field(default_factory=time.time)

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.values)


class FeatureMap:
    """Named aggregate features of one recording.

    Only the fixed keys in FEATURE_KEYS are accepted. Each `snapshot()` copies
    the current values into a FeatureSnapshot and appends it to the history;
    later `set()` calls never alter earlier snapshots.
    """

    def __init__(self) -> None:
        self._features: Dict[str, Any] = {}
        self._history: List[FeatureSnapshot] = []

    def set(self, key: str, value: Any) -> None:
        if key not in FEATURE_KEYS:
            raise KeyError(f"unknown feature: {key!r}")
        if key == "windowFeatures":
            value = tuple(value)
        self._features[key] = value

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        if key not in FEATURE_KEYS:
            raise KeyError(f"unknown feature: {key!r}")
        return self._features.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._features

    def snapshot(self, captured_at: Optional[float] = None) -> FeatureSnapshot:
        """Freeze the current values and append them to the history."""
        snap = FeatureSnapshot(
            values=MappingProxyType(dict(self._features)),
            captured_at=time.time() if captured_at is None else captured_at,
        )
        self._history.append(snap)
        return snap

    @property
    def history(self) -> Tuple[FeatureSnapshot, ...]:
        return tuple(self._history)

    def clear(self) -> None:
        self._features.clear()
        self._history = []
