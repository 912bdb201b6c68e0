"""Per-module CEFR level calculators.

Each calculator maps one module's aggregate statistics to a level and a 0-100
score. Thresholds are checked from C2 down so the highest satisfied
threshold wins, which keeps every ladder monotonic in its metric. Missing
statistics give A1 with a score of 0.
"""

from collections.abc import Callable, Mapping

from learner_proficiency.models.assessment import ModuleLevel
from learner_proficiency.models.cefr import LEVEL_PROGRESSION, CEFRLevel
from learner_proficiency.models.stats import (
    LearningModule,
    ListeningStats,
    ModuleStats,
    PronunciationStats,
    ReadingStats,
    VocabularyStats,
    WritingStats,
)

# Minimum mastered words for each level
VOCABULARY_THRESHOLDS: dict[CEFRLevel, float] = {
    CEFRLevel.A1: 0,
    CEFRLevel.A2: 1500,
    CEFRLevel.B1: 2500,
    CEFRLevel.B2: 4000,
    CEFRLevel.C1: 6000,
    CEFRLevel.C2: 8000,
}

# Word count a learner at each level is working towards
VOCABULARY_TARGETS: dict[CEFRLevel, float] = {
    CEFRLevel.A1: 1500,
    CEFRLevel.A2: 2500,
    CEFRLevel.B1: 4000,
    CEFRLevel.B2: 6000,
    CEFRLevel.C1: 8000,
    CEFRLevel.C2: 10000,
}

# Minimum average accuracy (0-100)
PRONUNCIATION_THRESHOLDS: dict[CEFRLevel, float] = {
    CEFRLevel.A1: 0,
    CEFRLevel.A2: 65,
    CEFRLevel.B1: 75,
    CEFRLevel.B2: 85,
    CEFRLevel.C1: 90,
    CEFRLevel.C2: 95,
}

# Minimum blended comprehension/efficiency score (0-100)
READING_THRESHOLDS: dict[CEFRLevel, float] = {
    CEFRLevel.A1: 0,
    CEFRLevel.A2: 50,
    CEFRLevel.B1: 60,
    CEFRLevel.B2: 70,
    CEFRLevel.C1: 80,
    CEFRLevel.C2: 90,
}

LISTENING_THRESHOLDS = PRONUNCIATION_THRESHOLDS
WRITING_THRESHOLDS = PRONUNCIATION_THRESHOLDS

LEVEL_THRESHOLDS: dict[LearningModule, dict[CEFRLevel, float]] = {
    LearningModule.VOCABULARY: VOCABULARY_THRESHOLDS,
    LearningModule.PRONUNCIATION: PRONUNCIATION_THRESHOLDS,
    LearningModule.READING: READING_THRESHOLDS,
    LearningModule.LISTENING: LISTENING_THRESHOLDS,
    LearningModule.WRITING: WRITING_THRESHOLDS,
}

COMPREHENSION_WEIGHT = 0.7
EFFICIENCY_WEIGHT = 0.3


def level_for(metric: float, thresholds: Mapping[CEFRLevel, float]) -> CEFRLevel:
    """Highest level whose threshold the metric reaches (inclusive)."""
    for level in reversed(LEVEL_PROGRESSION):
        if metric >= thresholds[level]:
            return level
    return CEFRLevel.A1


def threshold(module: LearningModule, level: CEFRLevel) -> float:
    """Threshold a module's level metric must reach for ``level``."""
    try:
        return LEVEL_THRESHOLDS[module][level]
    except KeyError:
        raise KeyError(f"No level threshold for module={module} level={level}") from None


def vocabulary_level(stats: VocabularyStats | None) -> ModuleLevel:
    if stats is None:
        return ModuleLevel()
    words = stats.mastered_words
    level = level_for(words, VOCABULARY_THRESHOLDS)
    score = min(100.0, words / VOCABULARY_TARGETS[level] * 100)
    return ModuleLevel(level=level, score=round(score, 1), level_metric=words)


def _accuracy_ladder_level(
    accuracy: float, thresholds: Mapping[CEFRLevel, float]
) -> ModuleLevel:
    return ModuleLevel(
        level=level_for(accuracy, thresholds),
        score=accuracy,
        level_metric=accuracy,
    )


def pronunciation_level(stats: PronunciationStats | None) -> ModuleLevel:
    if stats is None:
        return ModuleLevel()
    return _accuracy_ladder_level(stats.average_accuracy, PRONUNCIATION_THRESHOLDS)


def listening_level(stats: ListeningStats | None) -> ModuleLevel:
    if stats is None:
        return ModuleLevel()
    return _accuracy_ladder_level(stats.average_accuracy, LISTENING_THRESHOLDS)


def writing_level(stats: WritingStats | None) -> ModuleLevel:
    if stats is None:
        return ModuleLevel()
    return _accuracy_ladder_level(stats.average_accuracy, WRITING_THRESHOLDS)


def reading_efficiency(average_reading_time_seconds: float) -> float:
    """Reading efficiency 0-100; one point lost per minute of average reading time."""
    return max(0.0, 100 - average_reading_time_seconds / 60)


def reading_blended_score(stats: ReadingStats) -> float:
    """Comprehension/efficiency blend that decides the reading level."""
    efficiency = reading_efficiency(stats.average_reading_time_seconds)
    return (
        stats.comprehension_accuracy * COMPREHENSION_WEIGHT
        + efficiency * EFFICIENCY_WEIGHT
    )


def reading_level(stats: ReadingStats | None) -> ModuleLevel:
    """Level from the blended score; the reported score is comprehension alone."""
    if stats is None:
        return ModuleLevel()
    blended = reading_blended_score(stats)
    return ModuleLevel(
        level=level_for(blended, READING_THRESHOLDS),
        score=stats.comprehension_accuracy,
        level_metric=round(blended, 2),
    )


CALCULATORS: dict[LearningModule, Callable[[ModuleStats | None], ModuleLevel]] = {
    LearningModule.VOCABULARY: vocabulary_level,
    LearningModule.PRONUNCIATION: pronunciation_level,
    LearningModule.READING: reading_level,
    LearningModule.LISTENING: listening_level,
    LearningModule.WRITING: writing_level,
}


def calculate_module_level(
    module: LearningModule, stats: ModuleStats | None
) -> ModuleLevel:
    """Dispatch to the calculator for ``module``."""
    return CALCULATORS[module](stats)
