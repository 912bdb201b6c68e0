"""Proficiency assessment and upgrade recommendation models."""

from pydantic import Field

from learner_proficiency.models.base import ApiModel
from learner_proficiency.models.cefr import CEFRLevel
from learner_proficiency.models.stats import LearningModule, ModuleStats


class ModuleLevel(ApiModel):
    """Output of a single module level calculator.

    ``score`` is the reported 0-100 score; ``level_metric`` is the value the
    level thresholds were checked against.
    """

    level: CEFRLevel = CEFRLevel.A1
    score: float = Field(default=0.0, ge=0.0, le=100.0)
    level_metric: float = 0.0


class ModuleAssessment(ApiModel):
    """Level and score for one learning module."""

    module: LearningModule
    level: CEFRLevel = CEFRLevel.A1
    score: float = Field(default=0.0, ge=0.0, le=100.0)
    level_metric: float = 0.0
    attempts: int = 0
    recent_trend: float = 0.0
    raw: ModuleStats | None = None


class OverallAssessment(ApiModel):
    """Whole-profile assessment across all modules."""

    overall_level: CEFRLevel
    modules: dict[LearningModule, ModuleAssessment]
    strongest_module: LearningModule
    weakest_module: LearningModule


class LevelRequirement(ApiModel):
    """One module's threshold for reaching a target level."""

    module: LearningModule
    required_accuracy: float
    current_accuracy: float
    minimum_attempts: int
    current_attempts: int
    met: bool
    description: str = ""

    @property
    def accuracy_gap(self) -> float:
        return max(0.0, self.required_accuracy - self.current_accuracy)

    @property
    def attempt_gap(self) -> int:
        return max(0, self.minimum_attempts - self.current_attempts)


class UpgradeRecommendation(ApiModel):
    """Eligibility for the next level and what to work on to get there."""

    can_upgrade: bool
    current_level: CEFRLevel
    next_level: CEFRLevel | None = None
    overall_progress: float = Field(default=0.0, ge=0.0, le=100.0)
    requirements: list[LevelRequirement] = Field(default_factory=list)
    estimated_time: str = "met"
    priority_areas: list[str] = Field(default_factory=list, max_length=3)
    message: str | None = None
