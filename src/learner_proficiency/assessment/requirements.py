"""Per-module requirements for reaching a CEFR level."""

from learner_proficiency.assessment.levels import (
    VOCABULARY_THRESHOLDS,
    reading_blended_score,
    threshold,
)
from learner_proficiency.models.assessment import LevelRequirement, ModuleAssessment
from learner_proficiency.models.cefr import CEFRLevel
from learner_proficiency.models.stats import (
    LearningModule,
    ReadingStats,
    VocabularyStats,
)

# Minimum practice attempts per module for each level. Vocabulary progress is
# measured in mastered words, so it has no attempt minimum.
MINIMUM_ATTEMPTS: dict[CEFRLevel, dict[LearningModule, int]] = {
    CEFRLevel.A1: {
        LearningModule.READING: 10,
        LearningModule.LISTENING: 10,
        LearningModule.PRONUNCIATION: 5,
        LearningModule.WRITING: 5,
        LearningModule.VOCABULARY: 0,
    },
    CEFRLevel.A2: {
        LearningModule.READING: 15,
        LearningModule.LISTENING: 15,
        LearningModule.PRONUNCIATION: 10,
        LearningModule.WRITING: 8,
        LearningModule.VOCABULARY: 0,
    },
    CEFRLevel.B1: {
        LearningModule.READING: 20,
        LearningModule.LISTENING: 20,
        LearningModule.PRONUNCIATION: 15,
        LearningModule.WRITING: 12,
        LearningModule.VOCABULARY: 0,
    },
    CEFRLevel.B2: {
        LearningModule.READING: 25,
        LearningModule.LISTENING: 25,
        LearningModule.PRONUNCIATION: 20,
        LearningModule.WRITING: 15,
        LearningModule.VOCABULARY: 0,
    },
    CEFRLevel.C1: {
        LearningModule.READING: 30,
        LearningModule.LISTENING: 30,
        LearningModule.PRONUNCIATION: 25,
        LearningModule.WRITING: 20,
        LearningModule.VOCABULARY: 0,
    },
    CEFRLevel.C2: {
        LearningModule.READING: 35,
        LearningModule.LISTENING: 35,
        LearningModule.PRONUNCIATION: 30,
        LearningModule.WRITING: 25,
        LearningModule.VOCABULARY: 0,
    },
}

MODULE_NAMES: dict[LearningModule, str] = {
    LearningModule.VOCABULARY: "Vocabulary",
    LearningModule.PRONUNCIATION: "Speaking",
    LearningModule.READING: "Reading",
    LearningModule.LISTENING: "Listening",
    LearningModule.WRITING: "Writing",
}


def minimum_attempts(level: CEFRLevel, module: LearningModule) -> int:
    try:
        return MINIMUM_ATTEMPTS[level][module]
    except KeyError:
        raise KeyError(
            f"No upgrade requirement for module={module} level={level}"
        ) from None


def vocabulary_coverage(mastered_words: int, level: CEFRLevel) -> float:
    """Percentage (capped at 100) of the level's word threshold already mastered."""
    needed = VOCABULARY_THRESHOLDS[level]
    if needed <= 0:
        return 100.0
    return min(100.0, mastered_words / needed * 100)


def current_and_required(
    assessment: ModuleAssessment, level: CEFRLevel
) -> tuple[float, float]:
    """The module's comparable accuracy and the accuracy ``level`` requires.

    Vocabulary is compared as percent coverage of the level's word threshold,
    reading as its blended comprehension/efficiency score, every other module
    as its average accuracy.
    """
    raw = assessment.raw
    if assessment.module == LearningModule.VOCABULARY:
        words = raw.mastered_words if isinstance(raw, VocabularyStats) else 0
        return vocabulary_coverage(words, level), 100.0
    if assessment.module == LearningModule.READING:
        current = reading_blended_score(raw) if isinstance(raw, ReadingStats) else 0.0
        return current, threshold(assessment.module, level)
    return assessment.score, threshold(assessment.module, level)


def describe_requirement(requirement: LevelRequirement) -> str:
    """Human-readable summary of what is still missing."""
    name = MODULE_NAMES[requirement.module]
    accuracy_gap = requirement.accuracy_gap
    attempt_gap = requirement.attempt_gap
    if accuracy_gap > 0 and attempt_gap > 0:
        return (
            f"{name}: raise accuracy by {accuracy_gap:.1f} points "
            f"and complete {attempt_gap} more practice sessions"
        )
    if accuracy_gap > 0:
        return f"{name}: raise accuracy by {accuracy_gap:.1f} points"
    if attempt_gap > 0:
        return f"{name}: complete {attempt_gap} more practice sessions"
    return f"{name}: requirement met"


def build_requirement(assessment: ModuleAssessment, level: CEFRLevel) -> LevelRequirement:
    """Requirement for ``assessment.module`` to reach ``level``.

    Raises:
        KeyError: If the requirement tables have no entry for the module/level.
    """
    current, required = current_and_required(assessment, level)
    needed_attempts = minimum_attempts(level, assessment.module)
    # Unrounded so met and accuracy_gap agree at a threshold boundary
    requirement = LevelRequirement(
        module=assessment.module,
        required_accuracy=required,
        current_accuracy=current,
        minimum_attempts=needed_attempts,
        current_attempts=assessment.attempts,
        met=current >= required and assessment.attempts >= needed_attempts,
    )
    return requirement.model_copy(update={"description": describe_requirement(requirement)})
