"""Data models for craving records and list queries."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class FilterCategory(str, Enum):
    ALL = "all"
    RECENT = "recent"
    HIGH_INTENSITY = "high_intensity"
    HIGH_RESISTANCE = "high_resistance"

    @property
    def label(self) -> str:
        return _FILTER_LABELS[self]


_FILTER_LABELS = {
    FilterCategory.ALL: "All",
    FilterCategory.RECENT: "Recent",
    FilterCategory.HIGH_INTENSITY: "High Intensity",
    FilterCategory.HIGH_RESISTANCE: "High Resistance",
}


class SortOrder(str, Enum):
    DATE = "date"
    INTENSITY = "intensity"
    RESISTANCE = "resistance"


class Emotion(str, Enum):
    STRESSED = "stressed"
    ANXIOUS = "anxious"
    BORED = "bored"
    LONELY = "lonely"
    SAD = "sad"
    ANGRY = "angry"
    TIRED = "tired"
    HAPPY = "happy"


@dataclass
class CravingRecord:
    id: str
    timestamp: datetime | None
    description: str
    intensity: float
    resistance: float
    emotions: list[Emotion] = field(default_factory=list)
    archived: bool = False


@dataclass
class AlertInfo:
    title: str
    message: str
