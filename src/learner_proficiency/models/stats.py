"""Per-module aggregate statistics supplied by the storage layer.

Each module has its own stats model carrying exactly the fields its level
calculator needs. The models are tagged by ``module`` so a ``ModuleStats``
value can be validated from plain JSON.
"""

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import Field, field_validator

from learner_proficiency.models.base import ApiModel, clamp


class LearningModule(StrEnum):
    """Learning activity categories tracked independently."""

    VOCABULARY = "vocabulary"
    PRONUNCIATION = "pronunciation"  # speaking practice
    READING = "reading"
    LISTENING = "listening"
    WRITING = "writing"


# Tie-break order for strongest/weakest module and iteration order for
# upgrade requirements.
MODULE_PRIORITY: tuple[LearningModule, ...] = (
    LearningModule.READING,
    LearningModule.LISTENING,
    LearningModule.PRONUNCIATION,
    LearningModule.WRITING,
    LearningModule.VOCABULARY,
)


class _StatsBase(ApiModel):
    attempts: int = 0

    @field_validator("attempts", mode="before")
    @classmethod
    def _clamp_attempts(cls, value: object) -> int:
        return int(clamp(value, 0.0))


class _AccuracyStats(_StatsBase):
    """Rolling accuracy figures over a trailing window."""

    accuracy_last_7_days: float | None = None
    accuracy_last_30_days: float | None = None

    @field_validator("accuracy_last_7_days", "accuracy_last_30_days", mode="before")
    @classmethod
    def _clamp_trend(cls, value: object) -> float | None:
        if value is None:
            return None
        return clamp(value, 0.0, 100.0)

    @property
    def recent_trend(self) -> float:
        """Last 7 days minus last 30 days accuracy; 0 when either is unknown."""
        if self.accuracy_last_7_days is None or self.accuracy_last_30_days is None:
            return 0.0
        return self.accuracy_last_7_days - self.accuracy_last_30_days


class VocabularyStats(_StatsBase):
    module: Literal["vocabulary"] = "vocabulary"
    mastered_words: int = 0

    @field_validator("mastered_words", mode="before")
    @classmethod
    def _clamp_words(cls, value: object) -> int:
        return int(clamp(value, 0.0))

    @property
    def recent_trend(self) -> float:
        return 0.0


class PronunciationStats(_AccuracyStats):
    module: Literal["pronunciation"] = "pronunciation"
    average_accuracy: float = 0.0

    @field_validator("average_accuracy", mode="before")
    @classmethod
    def _clamp_accuracy(cls, value: object) -> float:
        return clamp(value, 0.0, 100.0)


class ReadingStats(_AccuracyStats):
    module: Literal["reading"] = "reading"
    comprehension_accuracy: float = 0.0
    average_reading_time_seconds: float = 0.0

    @field_validator("comprehension_accuracy", mode="before")
    @classmethod
    def _clamp_accuracy(cls, value: object) -> float:
        return clamp(value, 0.0, 100.0)

    @field_validator("average_reading_time_seconds", mode="before")
    @classmethod
    def _clamp_time(cls, value: object) -> float:
        return clamp(value, 0.0)


class ListeningStats(_AccuracyStats):
    module: Literal["listening"] = "listening"
    average_accuracy: float = 0.0

    @field_validator("average_accuracy", mode="before")
    @classmethod
    def _clamp_accuracy(cls, value: object) -> float:
        return clamp(value, 0.0, 100.0)


class WritingStats(_AccuracyStats):
    module: Literal["writing"] = "writing"
    average_accuracy: float = 0.0

    @field_validator("average_accuracy", mode="before")
    @classmethod
    def _clamp_accuracy(cls, value: object) -> float:
        return clamp(value, 0.0, 100.0)


ModuleStats = Annotated[
    VocabularyStats | PronunciationStats | ReadingStats | ListeningStats | WritingStats,
    Field(discriminator="module"),
]


class LearnerStats(ApiModel):
    """All per-module statistics for one learner. Missing modules are None."""

    vocabulary: VocabularyStats | None = None
    pronunciation: PronunciationStats | None = None
    reading: ReadingStats | None = None
    listening: ListeningStats | None = None
    writing: WritingStats | None = None

    def for_module(self, module: LearningModule) -> ModuleStats | None:
        return getattr(self, module.value)
