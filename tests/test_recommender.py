"""Tests for upgrade requirements, time estimates and priorities."""

import pytest

from learner_proficiency.assessment import requirements as requirements_mod
from learner_proficiency.assessment.assessor import ProficiencyAssessor
from learner_proficiency.assessment.recommender import (
    MODULE_ADVICE,
    TOP_LEVEL_MESSAGE,
    UpgradeRecommender,
    estimate_time,
    priority_areas,
    recommend,
    study_recommendations,
)
from learner_proficiency.models.assessment import LevelRequirement, OverallAssessment
from learner_proficiency.models.cefr import CEFRLevel
from learner_proficiency.models.stats import (
    LearnerStats,
    LearningModule,
    ListeningStats,
    PronunciationStats,
    ReadingStats,
    VocabularyStats,
    WritingStats,
)


def _assessment(stats: LearnerStats, overall: CEFRLevel | None = None) -> OverallAssessment:
    assessment = ProficiencyAssessor().assess(stats)
    if overall is not None:
        assessment = assessment.model_copy(update={"overall_level": overall})
    return assessment


def _b2_ready_stats(reading: ReadingStats) -> LearnerStats:
    return LearnerStats(
        vocabulary=VocabularyStats(mastered_words=4000),
        pronunciation=PronunciationStats(average_accuracy=85, attempts=20),
        reading=reading,
        listening=ListeningStats(average_accuracy=85, attempts=25),
        writing=WritingStats(average_accuracy=85, attempts=15),
    )


def _requirement(accuracy_gap: float = 0, attempt_gap: int = 0, met: bool = False):
    return LevelRequirement(
        module=LearningModule.WRITING,
        required_accuracy=70,
        current_accuracy=70 - accuracy_gap,
        minimum_attempts=10,
        current_attempts=10 - attempt_gap,
        met=met,
    )


class TestTerminalLevel:
    def test_c2_cannot_upgrade(self):
        stats = LearnerStats(
            vocabulary=VocabularyStats(mastered_words=9000),
            pronunciation=PronunciationStats(average_accuracy=96, attempts=40),
            reading=ReadingStats(comprehension_accuracy=100, attempts=40),
            listening=ListeningStats(average_accuracy=96, attempts=40),
            writing=WritingStats(average_accuracy=96, attempts=40),
        )
        assessment = _assessment(stats)
        assert assessment.overall_level == CEFRLevel.C2

        result = recommend(assessment)
        assert result.can_upgrade is False
        assert result.next_level is None
        assert result.current_level == CEFRLevel.C2
        assert result.requirements == []
        assert result.message == TOP_LEVEL_MESSAGE
        assert result.to_api()["nextLevel"] is None

    def test_target_not_above_current(self):
        assessment = _assessment(LearnerStats(), overall=CEFRLevel.B1)
        result = recommend(assessment, target_level=CEFRLevel.A2)
        assert result.can_upgrade is False
        assert result.next_level is None
        assert result.message == "Already at or above A2."


class TestReadingUnmet:
    def test_reading_gap_blocks_upgrade(self):
        # blended reading score: 60*0.7 + (100 - 2400/60)*0.3 = 60
        reading = ReadingStats(
            comprehension_accuracy=60, average_reading_time_seconds=2400, attempts=30
        )
        assessment = _assessment(_b2_ready_stats(reading), overall=CEFRLevel.B1)

        result = recommend(assessment)

        assert result.next_level == CEFRLevel.B2
        assert result.can_upgrade is False
        reading_req = next(r for r in result.requirements if r.module == LearningModule.READING)
        assert reading_req.met is False
        assert reading_req.current_accuracy == pytest.approx(60.0)
        assert reading_req.required_accuracy == 70
        assert all(r.met for r in result.requirements if r.module != LearningModule.READING)
        assert result.overall_progress == 80
        assert result.estimated_time == "1-2 weeks"
        assert result.priority_areas
        assert "reading" in result.priority_areas[0].lower()

    def test_all_met(self):
        reading = ReadingStats(
            comprehension_accuracy=80, average_reading_time_seconds=600, attempts=30
        )
        assessment = _assessment(_b2_ready_stats(reading), overall=CEFRLevel.B1)

        result = UpgradeRecommender().recommend(assessment)

        assert result.can_upgrade is True
        assert result.overall_progress == 100
        assert result.estimated_time == "met"
        assert result.priority_areas == []
        assert all(r.description.endswith("requirement met") for r in result.requirements)


class TestThresholdBoundary:
    def test_just_below_threshold_is_unmet(self):
        stats = LearnerStats(
            pronunciation=PronunciationStats(average_accuracy=84.996, attempts=20)
        )
        assessment = _assessment(stats, overall=CEFRLevel.B1)
        assert assessment.modules[LearningModule.PRONUNCIATION].level == CEFRLevel.B1

        result = recommend(assessment)
        speaking = next(
            r for r in result.requirements if r.module == LearningModule.PRONUNCIATION
        )
        assert speaking.required_accuracy == 85
        assert speaking.met is False
        assert speaking.accuracy_gap > 0
        assert speaking.description.startswith("Speaking: raise accuracy")

    def test_exactly_at_threshold_is_met(self):
        stats = LearnerStats(
            pronunciation=PronunciationStats(average_accuracy=85, attempts=20)
        )
        result = recommend(_assessment(stats, overall=CEFRLevel.B1))
        speaking = next(
            r for r in result.requirements if r.module == LearningModule.PRONUNCIATION
        )
        assert speaking.met is True


class TestNoHistory:
    def test_learner_without_history(self):
        assessment = _assessment(LearnerStats())
        result = recommend(assessment)

        assert result.current_level == CEFRLevel.A1
        assert result.next_level == CEFRLevel.A2
        assert result.can_upgrade is False
        assert result.overall_progress == 0
        assert result.estimated_time == "3+ months"
        assert len(result.priority_areas) == 3
        # Vocabulary has the largest gap (0% of the A2 word threshold)
        assert "vocabulary" in result.priority_areas[0].lower()
        assert result.priority_areas[1] == MODULE_ADVICE[LearningModule.READING]
        assert result.priority_areas[2] == MODULE_ADVICE[LearningModule.LISTENING]

    def test_requirement_order_and_values(self):
        result = recommend(_assessment(LearnerStats()))
        modules = [r.module for r in result.requirements]
        assert modules == [
            LearningModule.READING,
            LearningModule.LISTENING,
            LearningModule.PRONUNCIATION,
            LearningModule.WRITING,
            LearningModule.VOCABULARY,
        ]
        reading = result.requirements[0]
        assert reading.required_accuracy == 50
        assert reading.minimum_attempts == 15
        assert reading.description == (
            "Reading: raise accuracy by 50.0 points and complete 15 more practice sessions"
        )

    def test_can_upgrade_iff_all_met(self):
        result = recommend(_assessment(LearnerStats()))
        assert result.can_upgrade == all(r.met for r in result.requirements)


class TestTargetLevel:
    def test_explicit_target(self):
        result = recommend(_assessment(LearnerStats()), target_level=CEFRLevel.B2)
        assert result.next_level == CEFRLevel.B2
        reading = next(r for r in result.requirements if r.module == LearningModule.READING)
        assert reading.required_accuracy == 70
        assert reading.minimum_attempts == 25


class TestEstimateTime:
    @pytest.mark.parametrize(
        ("accuracy_gap", "attempt_gap", "expected"),
        [
            (20, 0, "1-2 weeks"),
            (10, 5, "1-2 weeks"),
            (30, 0, "3-4 weeks"),
            (50, 0, "1-2 months"),
            (100, 0, "2-3 months"),
            (100, 5, "3+ months"),
        ],
    )
    def test_buckets(self, accuracy_gap, attempt_gap, expected):
        assert estimate_time([_requirement(accuracy_gap, attempt_gap)]) == expected

    def test_met_requirements_ignored(self):
        assert estimate_time([_requirement(50, 10, met=True)]) == "met"

    def test_empty(self):
        assert estimate_time([]) == "met"


class TestPriorityAreas:
    def test_attempt_only_gaps_get_generic_advice(self):
        requirement = _requirement(0, 5)
        assert priority_areas([requirement]) == [MODULE_ADVICE[LearningModule.WRITING]]

    def test_capped_at_three(self):
        requirements = [
            LevelRequirement(
                module=module,
                required_accuracy=70,
                current_accuracy=40,
                minimum_attempts=0,
                current_attempts=0,
                met=False,
            )
            for module in LearningModule
        ]
        areas = priority_areas(requirements)
        assert len(areas) == 3


class TestStudyRecommendations:
    def test_weakest_first_and_declining_trend(self):
        stats = LearnerStats(
            pronunciation=PronunciationStats(
                average_accuracy=40, accuracy_last_7_days=35, accuracy_last_30_days=50
            ),
            reading=ReadingStats(comprehension_accuracy=70),
            listening=ListeningStats(average_accuracy=70),
            writing=WritingStats(average_accuracy=70),
            vocabulary=VocabularyStats(mastered_words=1400),
        )
        assessment = _assessment(stats)
        advice = study_recommendations(assessment)

        assert assessment.weakest_module == LearningModule.PRONUNCIATION
        assert advice[0].startswith("Focus on speaking")
        assert any("dropped recently" in line for line in advice)
        assert len(advice) <= 5


class TestConfigurationGaps:
    def test_missing_requirement_entry_raises(self, monkeypatch):
        monkeypatch.delitem(requirements_mod.MINIMUM_ATTEMPTS, CEFRLevel.A2)
        with pytest.raises(KeyError):
            recommend(_assessment(LearnerStats()))
