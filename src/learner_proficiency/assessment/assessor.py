"""Whole-profile proficiency assessment across learning modules."""

import asyncio
from collections import Counter
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from learner_proficiency.assessment.levels import calculate_module_level
from learner_proficiency.config import OverallLevelRule, get_settings
from learner_proficiency.models.assessment import (
    ModuleAssessment,
    ModuleLevel,
    OverallAssessment,
)
from learner_proficiency.models.cefr import CEFRLevel
from learner_proficiency.models.stats import (
    MODULE_PRIORITY,
    LearnerStats,
    LearningModule,
    ModuleStats,
)

logger = structlog.get_logger()


def median_level(levels: list[CEFRLevel]) -> CEFRLevel:
    """Median level; with an even count the lower of the two middle levels."""
    if not levels:
        return CEFRLevel.A1
    ordered = sorted(levels)
    return ordered[(len(ordered) - 1) // 2]


def mode_level(levels: list[CEFRLevel]) -> CEFRLevel:
    """Most frequent level; frequency ties go to the lower level."""
    if not levels:
        return CEFRLevel.A1
    counts = Counter(levels)
    return min(counts, key=lambda level: (-counts[level], level.rank))


def _priority(module: LearningModule) -> int:
    return MODULE_PRIORITY.index(module)


def strongest_and_weakest(
    modules: Mapping[LearningModule, ModuleAssessment],
) -> tuple[LearningModule, LearningModule]:
    """Modules with the highest and lowest score, ties broken by module priority."""
    strongest = min(modules.values(), key=lambda a: (-a.score, _priority(a.module)))
    weakest = min(modules.values(), key=lambda a: (a.score, _priority(a.module)))
    return strongest.module, weakest.module


def _coerce_stats(stats: LearnerStats | Mapping[str, Any] | None) -> LearnerStats:
    """Validate learner statistics module by module.

    A record that cannot be validated is logged and treated as no history,
    so one bad module never fails the whole assessment.
    """
    if stats is None:
        return LearnerStats()
    if isinstance(stats, LearnerStats):
        return stats
    if not isinstance(stats, Mapping):
        logger.warning("learner_stats_invalid", received=type(stats).__name__)
        return LearnerStats()

    valid: dict[str, ModuleStats] = {}
    for module in LearningModule:
        record = stats.get(module.value)
        if record is None:
            continue
        try:
            parsed = LearnerStats.model_validate({module.value: record})
        except ValidationError as exc:
            logger.warning(
                "module_stats_invalid",
                module=module.value,
                errors=exc.error_count(),
            )
            continue
        valid[module.value] = parsed.for_module(module)
    return LearnerStats(**valid)


class ProficiencyAssessor:
    """Runs every module calculator and combines the results.

    Args:
        overall_rule: How module levels are combined into the overall level.
    """

    def __init__(self, overall_rule: OverallLevelRule = OverallLevelRule.MEDIAN):
        self.overall_rule = overall_rule

    def assess_module(
        self, module: LearningModule, stats: ModuleStats | None
    ) -> ModuleAssessment:
        """Assess one module from its statistics (None for no history)."""
        result = calculate_module_level(module, stats)
        return self._to_assessment(module, stats, result)

    @staticmethod
    def _to_assessment(
        module: LearningModule, stats: ModuleStats | None, result: ModuleLevel
    ) -> ModuleAssessment:
        return ModuleAssessment(
            module=module,
            level=result.level,
            score=result.score,
            level_metric=result.level_metric,
            attempts=stats.attempts if stats is not None else 0,
            recent_trend=stats.recent_trend if stats is not None else 0.0,
            raw=stats,
        )

    def overall_level(self, levels: list[CEFRLevel]) -> CEFRLevel:
        if self.overall_rule == OverallLevelRule.MODE:
            return mode_level(levels)
        return median_level(levels)

    def combine(
        self, modules: Mapping[LearningModule, ModuleAssessment]
    ) -> OverallAssessment:
        """Build the overall assessment from per-module assessments."""
        overall = self.overall_level([a.level for a in modules.values()])
        strongest, weakest = strongest_and_weakest(modules)
        assessment = OverallAssessment(
            overall_level=overall,
            modules=dict(modules),
            strongest_module=strongest,
            weakest_module=weakest,
        )
        logger.info(
            "proficiency_assessed",
            overall_level=overall.value,
            strongest=strongest.value,
            weakest=weakest.value,
        )
        return assessment

    def assess(self, stats: LearnerStats | Mapping[str, Any] | None) -> OverallAssessment:
        """Assess a learner's whole profile.

        Args:
            stats: Per-module statistics; modules without history may be omitted.

        Returns:
            OverallAssessment covering every learning module.
        """
        learner = _coerce_stats(stats)
        modules = {
            module: self.assess_module(module, learner.for_module(module))
            for module in LearningModule
        }
        return self.combine(modules)

    async def assess_concurrently(
        self, stats: LearnerStats | Mapping[str, Any] | None
    ) -> OverallAssessment:
        """Same as :meth:`assess`, running the module calculators concurrently."""
        learner = _coerce_stats(stats)
        modules = list(LearningModule)
        results = await asyncio.gather(*(
            asyncio.to_thread(self.assess_module, module, learner.for_module(module))
            for module in modules
        ))
        return self.combine(dict(zip(modules, results)))


def assess(stats: LearnerStats | Mapping[str, Any] | None) -> OverallAssessment:
    """Assess a learner using the configured overall level rule."""
    return ProficiencyAssessor(get_settings().overall_level_rule).assess(stats)
