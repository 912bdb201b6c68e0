"""Pronunciation evaluation of a single spoken attempt."""

from collections import Counter

import structlog

from learner_proficiency.config import (
    FluencySource,
    PronunciationRule,
    ScoringConfig,
    get_settings,
)
from learner_proficiency.models.pronunciation import (
    Attempt,
    Mistake,
    MistakeKind,
    PronunciationScore,
)
from learner_proficiency.scoring.similarity import (
    TextSimilarityScorer,
    normalize_words,
    round_half_up,
    word_similarity,
)

logger = structlog.get_logger()

EMPTY_INPUT_FEEDBACK = "Unable to evaluate: the target or spoken text is empty."

# (minimum overall score, message), checked top-down
FEEDBACK_LADDER: list[tuple[int, str]] = [
    (90, "Excellent pronunciation! Keep it up."),
    (80, "Very good pronunciation, just a few small slips."),
    (70, "Good effort. Mostly correct, with room to improve."),
    (60, "Fair. Listen to the model sentence again and focus on the marked words."),
    (40, "Needs work. Practise slowly, word by word, then build up speed."),
    (0, "Needs major work. Start with short phrases and repeat after the audio."),
]

# Above this word similarity a substitution is reported as "close"
_CLOSE_WORD_SIMILARITY = 0.5


def feedback_for(overall_score: int) -> str:
    """Pick the single feedback message for an overall score."""
    for minimum, message in FEEDBACK_LADDER:
        if overall_score >= minimum:
            return message
    return FEEDBACK_LADDER[-1][1]


def repetition_penalty(words: list[str]) -> int:
    """10 points per repeated occurrence of a word, at most 30."""
    counts = Counter(words)
    penalty = sum((count - 1) * 10 for count in counts.values() if count > 1)
    return min(penalty, 30)


def incomplete_penalty(target_words: list[str], spoken_words: list[str]) -> int:
    """40 points below half the target length, 20 below 80%."""
    if not target_words:
        return 0
    completeness = len(spoken_words) / len(target_words)
    if completeness < 0.5:
        return 40
    if completeness < 0.8:
        return 20
    return 0


def word_pattern_fluency(target_words: list[str], spoken_words: list[str]) -> int:
    """Fluency 0-100 from the word pattern of the attempt alone.

    Penalizes a spoken length outside 0.7-1.5 times the target length
    (25 points per unit of deviation), repeated words and truncated attempts.
    """
    if not target_words:
        return 100
    ratio = len(spoken_words) / len(target_words)
    fluency = 100.0
    if ratio < 0.7 or ratio > 1.5:
        fluency -= abs(ratio - 1) * 25
    fluency -= repetition_penalty(spoken_words)
    fluency -= incomplete_penalty(target_words, spoken_words)
    return round_half_up(max(0.0, min(100.0, fluency)))


def _suggestion(expected: str, actual: str) -> str:
    if word_similarity(expected, actual) > _CLOSE_WORD_SIMILARITY:
        return f'"{actual}" is close; it should be "{expected}"'
    return f'"{actual}" is incorrect; it should be "{expected}"'


class PronunciationEvaluator:
    """Scores a spoken attempt against its target text.

    Args:
        config: Scoring constants. Defaults to the built-in values.
    """

    def __init__(self, config: ScoringConfig | None = None):
        self.config = config or ScoringConfig()
        self.scorer = TextSimilarityScorer(self.config)

    def evaluate(
        self,
        target: str,
        spoken: str,
        confidence: float = 1.0,
    ) -> PronunciationScore:
        """Evaluate one attempt given as plain strings.

        Args:
            target: Text the learner was asked to say.
            spoken: Recognized transcript.
            confidence: Recognizer confidence 0-1 (clamped).

        Returns:
            PronunciationScore with sub-scores, feedback and mistakes.
        """
        attempt = Attempt(target_text=target, spoken_text=spoken, confidence=confidence)
        return self.evaluate_attempt(attempt)

    def evaluate_attempt(self, attempt: Attempt) -> PronunciationScore:
        """Evaluate a validated Attempt."""
        target_words = normalize_words(attempt.target_text, self.config.case_sensitive)
        spoken_words = normalize_words(attempt.spoken_text, self.config.case_sensitive)

        if not target_words or not spoken_words:
            logger.debug("pronunciation_evaluation_skipped", reason="empty_text")
            return PronunciationScore(feedback=EMPTY_INPUT_FEEDBACK)

        accuracy = self.scorer.similarity_of_words(target_words, spoken_words)
        fluency = self._fluency(accuracy, attempt.confidence, target_words, spoken_words)
        pronunciation = self._pronunciation(accuracy, fluency)
        overall = round_half_up((accuracy + fluency + pronunciation) / 3)

        score = PronunciationScore(
            overall_score=overall,
            accuracy_score=accuracy,
            fluency_score=fluency,
            pronunciation_score=pronunciation,
            feedback=feedback_for(overall),
            mistakes=self.find_mistakes(target_words, spoken_words),
        )
        logger.debug(
            "pronunciation_evaluated",
            overall=score.overall_score,
            accuracy=score.accuracy_score,
            fluency=score.fluency_score,
            mistakes=len(score.mistakes),
        )
        return score

    def _fluency(
        self,
        accuracy: int,
        confidence: float,
        target_words: list[str],
        spoken_words: list[str],
    ) -> int:
        if self.config.fluency_source == FluencySource.ACCURACY_OFFSET:
            return max(accuracy - 10, 0)
        if self.config.fluency_source == FluencySource.WORD_PATTERN:
            return word_pattern_fluency(target_words, spoken_words)
        return round_half_up(confidence * 100)

    def _pronunciation(self, accuracy: int, fluency: int) -> int:
        if self.config.pronunciation_rule == PronunciationRule.SCALED_OVERALL:
            # Preliminary overall from the two independent sub-scores
            preliminary = round_half_up((accuracy + fluency) / 2)
            return round_half_up(preliminary * 0.9)
        return accuracy

    def find_mistakes(self, target_words: list[str], spoken_words: list[str]) -> list[Mistake]:
        """Position-aligned mistakes, left to right, capped at the mistake limit.

        Args:
            target_words: Normalized target words.
            spoken_words: Normalized spoken words.

        Returns:
            Substitution, missing and extra word mistakes in target order.
        """
        mistakes: list[Mistake] = []
        limit = self.config.mistake_limit
        longest = max(len(target_words), len(spoken_words))

        for i in range(longest):
            if len(mistakes) >= limit:
                break
            target_word = target_words[i] if i < len(target_words) else ""
            spoken_word = spoken_words[i] if i < len(spoken_words) else ""

            if target_word and spoken_word:
                similar = word_similarity(target_word.lower(), spoken_word.lower())
                if similar < self.config.similar_word_threshold:
                    mistakes.append(Mistake(
                        word=spoken_word,
                        expected=target_word,
                        actual=spoken_word,
                        suggestion=_suggestion(target_word, spoken_word),
                        kind=MistakeKind.SUBSTITUTION,
                    ))
            elif target_word:
                mistakes.append(Mistake(
                    word=target_word,
                    expected=target_word,
                    actual="",
                    suggestion=f'Missing word "{target_word}"',
                    kind=MistakeKind.MISSING,
                ))
            else:
                mistakes.append(Mistake(
                    word=spoken_word,
                    expected="",
                    actual=spoken_word,
                    suggestion=f'Extra word "{spoken_word}"',
                    kind=MistakeKind.EXTRA,
                ))

        return mistakes


def evaluate(target: str, spoken: str, confidence: float = 1.0) -> PronunciationScore:
    """Evaluate an attempt using the configured scoring constants."""
    evaluator = PronunciationEvaluator(get_settings().scoring_config())
    return evaluator.evaluate(target, spoken, confidence)
