"""Tests for the whole-profile proficiency assessor."""

from learner_proficiency.assessment.assessor import (
    ProficiencyAssessor,
    assess,
    median_level,
    mode_level,
    strongest_and_weakest,
)
from learner_proficiency.config import OverallLevelRule
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


def _mixed_stats() -> LearnerStats:
    # Levels: vocabulary C2, pronunciation C1, reading C1, listening B1, writing A1
    return LearnerStats(
        vocabulary=VocabularyStats(mastered_words=8000),
        pronunciation=PronunciationStats(average_accuracy=92, attempts=30),
        reading=ReadingStats(
            comprehension_accuracy=80, average_reading_time_seconds=600, attempts=30
        ),
        listening=ListeningStats(average_accuracy=75, attempts=20),
        writing=WritingStats(average_accuracy=50, attempts=5),
    )


class TestAggregationRules:
    def test_median_odd(self):
        levels = [CEFRLevel.A1, CEFRLevel.C2, CEFRLevel.B1, CEFRLevel.C1, CEFRLevel.C1]
        assert median_level(levels) == CEFRLevel.C1

    def test_median_even_takes_lower(self):
        assert median_level([CEFRLevel.A1, CEFRLevel.B2]) == CEFRLevel.A1
        assert median_level([CEFRLevel.A2, CEFRLevel.B1, CEFRLevel.C1, CEFRLevel.C2]) == CEFRLevel.B1

    def test_median_empty(self):
        assert median_level([]) == CEFRLevel.A1

    def test_mode(self):
        levels = [CEFRLevel.B1, CEFRLevel.B1, CEFRLevel.C2, CEFRLevel.A1]
        assert mode_level(levels) == CEFRLevel.B1

    def test_mode_tie_takes_lower(self):
        levels = [CEFRLevel.B1, CEFRLevel.A2, CEFRLevel.B1, CEFRLevel.A2, CEFRLevel.C2]
        assert mode_level(levels) == CEFRLevel.A2


class TestAssess:
    def test_no_history(self):
        result = assess({})
        assert result.overall_level == CEFRLevel.A1
        assert set(result.modules) == set(LearningModule)
        for module_assessment in result.modules.values():
            assert module_assessment.level == CEFRLevel.A1
            assert module_assessment.score == 0.0
        # All scores tie at 0: reading wins both by priority
        assert result.strongest_module == LearningModule.READING
        assert result.weakest_module == LearningModule.READING

    def test_none_input(self):
        assert assess(None).overall_level == CEFRLevel.A1

    def test_median_overall(self):
        result = ProficiencyAssessor().assess(_mixed_stats())
        assert result.modules[LearningModule.VOCABULARY].level == CEFRLevel.C2
        assert result.modules[LearningModule.WRITING].level == CEFRLevel.A1
        assert result.overall_level == CEFRLevel.C1

    def test_mode_overall(self):
        result = ProficiencyAssessor(OverallLevelRule.MODE).assess(_mixed_stats())
        assert result.overall_level == CEFRLevel.C1

    def test_strongest_and_weakest(self):
        result = ProficiencyAssessor().assess(_mixed_stats())
        assert result.strongest_module == LearningModule.PRONUNCIATION
        assert result.weakest_module == LearningModule.WRITING

    def test_tie_break_by_priority(self):
        stats = LearnerStats(
            reading=ReadingStats(comprehension_accuracy=70),
            listening=ListeningStats(average_accuracy=70),
            writing=WritingStats(average_accuracy=10),
            pronunciation=PronunciationStats(average_accuracy=10),
            vocabulary=VocabularyStats(mastered_words=150),
        )
        result = ProficiencyAssessor().assess(stats)
        assert result.strongest_module == LearningModule.READING
        # pronunciation ranks ahead of writing and vocabulary on a tie
        assert result.weakest_module == LearningModule.PRONUNCIATION

    def test_mapping_input_with_camel_case(self):
        result = assess({
            "vocabulary": {"masteredWords": 4200},
            "pronunciation": {"averageAccuracy": 92, "attempts": 12},
        })
        vocabulary = result.modules[LearningModule.VOCABULARY]
        assert vocabulary.level == CEFRLevel.B2
        assert vocabulary.score == 70.0
        pronunciation = result.modules[LearningModule.PRONUNCIATION]
        assert pronunciation.level == CEFRLevel.C1
        assert pronunciation.attempts == 12

    def test_malformed_stats_clamped(self):
        result = assess({
            "pronunciation": {"averageAccuracy": float("nan"), "attempts": -3},
            "listening": {"averageAccuracy": 250},
        })
        pronunciation = result.modules[LearningModule.PRONUNCIATION]
        assert pronunciation.score == 0.0
        assert pronunciation.attempts == 0
        assert pronunciation.level == CEFRLevel.A1
        assert result.modules[LearningModule.LISTENING].score == 100.0

    def test_invalid_module_record_treated_as_no_history(self):
        result = assess({
            "vocabulary": "garbage",
            "reading": {"module": "listening", "averageAccuracy": 90},
            "pronunciation": {"averageAccuracy": 92, "attempts": 12},
        })
        vocabulary = result.modules[LearningModule.VOCABULARY]
        assert vocabulary.level == CEFRLevel.A1
        assert vocabulary.score == 0.0
        assert vocabulary.raw is None
        assert result.modules[LearningModule.READING].raw is None
        assert result.modules[LearningModule.PRONUNCIATION].level == CEFRLevel.C1

    def test_non_mapping_input(self):
        result = assess(["not", "stats"])
        assert result.overall_level == CEFRLevel.A1

    def test_recent_trend(self):
        stats = LearnerStats(
            pronunciation=PronunciationStats(
                average_accuracy=65, accuracy_last_7_days=60, accuracy_last_30_days=70
            )
        )
        result = ProficiencyAssessor().assess(stats)
        assert result.modules[LearningModule.PRONUNCIATION].recent_trend == -10.0
        assert result.modules[LearningModule.READING].recent_trend == 0.0

    def test_raw_stats_kept(self):
        result = ProficiencyAssessor().assess(_mixed_stats())
        raw = result.modules[LearningModule.READING].raw
        assert isinstance(raw, ReadingStats)
        assert raw.average_reading_time_seconds == 600

    def test_reading_exposes_both_values(self):
        result = ProficiencyAssessor().assess(_mixed_stats())
        reading = result.modules[LearningModule.READING]
        assert reading.score == 80.0
        assert reading.level_metric == 83.0

    def test_to_api_camel_case(self):
        data = ProficiencyAssessor().assess(_mixed_stats()).to_api()
        assert data["overallLevel"] == "C1"
        assert data["strongestModule"] == "pronunciation"
        assert data["weakestModule"] == "writing"
        assert data["modules"]["vocabulary"]["raw"]["masteredWords"] == 8000
        assert "levelMetric" in data["modules"]["reading"]


class TestAssessConcurrently:
    async def test_matches_sequential(self):
        assessor = ProficiencyAssessor()
        sequential = assessor.assess(_mixed_stats())
        concurrent = await assessor.assess_concurrently(_mixed_stats())
        assert concurrent.model_dump() == sequential.model_dump()


class TestStrongestAndWeakest:
    def test_single_module(self):
        result = ProficiencyAssessor().assess(_mixed_stats())
        only = {LearningModule.LISTENING: result.modules[LearningModule.LISTENING]}
        assert strongest_and_weakest(only) == (LearningModule.LISTENING, LearningModule.LISTENING)
