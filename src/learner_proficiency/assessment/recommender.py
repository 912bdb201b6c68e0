"""Level upgrade eligibility, time estimates and study priorities."""

import structlog

from learner_proficiency.assessment.requirements import MODULE_NAMES, build_requirement
from learner_proficiency.models.assessment import (
    LevelRequirement,
    OverallAssessment,
    UpgradeRecommendation,
)
from learner_proficiency.models.cefr import CEFRLevel
from learner_proficiency.models.stats import MODULE_PRIORITY, LearningModule
from learner_proficiency.scoring.similarity import round_half_up

logger = structlog.get_logger()

TOP_LEVEL_MESSAGE = "You have reached the highest level (C2). Keep practising to stay there."
MAX_PRIORITY_AREAS = 3
MAX_STUDY_RECOMMENDATIONS = 5
DECLINING_TREND = -5.0

# (maximum total gap, label), checked in order
TIME_BUCKETS: list[tuple[float, str]] = [
    (2, "1-2 weeks"),
    (4, "3-4 weeks"),
    (6, "1-2 months"),
    (10, "2-3 months"),
]
TIME_MET = "met"
TIME_LONGEST = "3+ months"

MODULE_ADVICE: dict[LearningModule, str] = {
    LearningModule.READING: "Read more passages to build comprehension speed and accuracy",
    LearningModule.LISTENING: "Listen to more English audio to train listening comprehension",
    LearningModule.PRONUNCIATION: "Do more speaking practice, focusing on pronunciation accuracy",
    LearningModule.WRITING: "Practise writing, paying attention to grammar and word choice",
    LearningModule.VOCABULARY: "Review your wordbook daily to master more words",
}


def gap_score(requirement: LevelRequirement) -> float:
    """Size of an unmet requirement: 10 accuracy points or 5 attempts count as 1."""
    return requirement.accuracy_gap / 10 + requirement.attempt_gap / 5


def estimate_time(requirements: list[LevelRequirement]) -> str:
    """Bucketed time-to-upgrade from the summed gaps of unmet requirements."""
    total = sum(gap_score(r) for r in requirements if not r.met)
    if total == 0:
        return TIME_MET
    for limit, label in TIME_BUCKETS:
        if total <= limit:
            return label
    return TIME_LONGEST


def priority_areas(requirements: list[LevelRequirement]) -> list[str]:
    """Up to three study priorities for the unmet requirements.

    The module with the largest accuracy gap gets a targeted message first;
    the remaining unmet modules each add their generic advice.
    """
    unmet = [r for r in requirements if not r.met]
    areas: list[str] = []

    critical: LevelRequirement | None = None
    for requirement in unmet:
        if requirement.accuracy_gap > (critical.accuracy_gap if critical else 0):
            critical = requirement
    if critical is not None:
        areas.append(
            f"Focus on {MODULE_NAMES[critical.module].lower()}: raise accuracy from "
            f"{critical.current_accuracy:.1f} to {critical.required_accuracy:.1f}"
        )

    for requirement in unmet:
        if critical is not None and requirement.module == critical.module:
            continue
        areas.append(MODULE_ADVICE[requirement.module])

    return areas[:MAX_PRIORITY_AREAS]


class UpgradeRecommender:
    """Checks a learner's assessment against the requirements of a higher level."""

    def recommend(
        self,
        assessment: OverallAssessment,
        target_level: CEFRLevel | None = None,
    ) -> UpgradeRecommendation:
        """Evaluate eligibility for the next (or a chosen higher) level.

        Args:
            assessment: The learner's overall assessment.
            target_level: Level to check against. Defaults to the level right
                above the current overall level.

        Returns:
            UpgradeRecommendation. At C2 it is a terminal result with
            ``next_level=None`` and a message.
        """
        current = assessment.overall_level
        next_level = target_level if target_level is not None else current.successor()
        if next_level is None or next_level <= current:
            if current.is_highest:
                message = TOP_LEVEL_MESSAGE
            else:
                message = f"Already at or above {next_level.value}."
            logger.debug("upgrade_not_applicable", current_level=current.value)
            return UpgradeRecommendation(
                can_upgrade=False,
                current_level=current,
                next_level=None,
                overall_progress=100.0,
                estimated_time=TIME_MET,
                message=message,
            )

        requirements = [
            build_requirement(assessment.modules[module], next_level)
            for module in MODULE_PRIORITY
            if module in assessment.modules
        ]
        met_count = sum(1 for r in requirements if r.met)
        progress = round_half_up(met_count / len(requirements) * 100) if requirements else 100
        can_upgrade = all(r.met for r in requirements)

        recommendation = UpgradeRecommendation(
            can_upgrade=can_upgrade,
            current_level=current,
            next_level=next_level,
            overall_progress=float(progress),
            requirements=requirements,
            estimated_time=estimate_time(requirements),
            priority_areas=priority_areas(requirements),
        )
        logger.info(
            "upgrade_recommended",
            current_level=current.value,
            next_level=next_level.value,
            can_upgrade=can_upgrade,
            progress=progress,
        )
        return recommendation


def recommend(
    assessment: OverallAssessment, target_level: CEFRLevel | None = None
) -> UpgradeRecommendation:
    """Upgrade recommendation for an assessment."""
    return UpgradeRecommender().recommend(assessment, target_level)


def study_recommendations(
    assessment: OverallAssessment,
    recommendation: UpgradeRecommendation | None = None,
) -> list[str]:
    """General study advice: weakest module, unmet requirements, declining modules.

    Args:
        assessment: The learner's overall assessment.
        recommendation: Upgrade recommendation; computed when omitted.

    Returns:
        Up to five recommendation strings.
    """
    if recommendation is None:
        recommendation = recommend(assessment)

    weakest = assessment.modules[assessment.weakest_module]
    advice = [
        f"Focus on {MODULE_NAMES[weakest.module].lower()}; "
        f"its current score is {weakest.score:.1f}"
    ]

    if not recommendation.can_upgrade and recommendation.next_level is not None:
        unmet = [r for r in recommendation.requirements if not r.met]
        advice.extend(r.description for r in unmet[:2])

    for module in MODULE_PRIORITY:
        module_assessment = assessment.modules.get(module)
        if module_assessment is not None and module_assessment.recent_trend < DECLINING_TREND:
            advice.append(
                f"{MODULE_NAMES[module]} accuracy has dropped recently; practise it more often"
            )

    return advice[:MAX_STUDY_RECOMMENDATIONS]
