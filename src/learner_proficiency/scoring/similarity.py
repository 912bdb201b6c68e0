"""Word-aligned text similarity between a target and a recognized utterance."""

import math
import re

from rapidfuzz.distance import Levenshtein

from learner_proficiency.config import ScoringConfig, get_settings

_PUNCTUATION = re.compile(r"[^\w\s]")

# Absorbs float noise such as 42.49999999999999 for an exact half
_ROUNDING_EPSILON = 1e-9


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves up (scores are never negative)."""
    return math.floor(value + 0.5 + _ROUNDING_EPSILON)


def levenshtein(a: str, b: str) -> int:
    """Character-level edit distance (insert, delete, substitute; unit cost).

    Args:
        a: First string.
        b: Second string.

    Returns:
        Minimum number of single-character edits turning ``a`` into ``b``.
    """
    return Levenshtein.distance(a, b)


def word_similarity(a: str, b: str) -> float:
    """Normalized similarity of two words: 1 - distance / longer length."""
    longer = max(len(a), len(b))
    if longer == 0:
        return 1.0
    return 1.0 - levenshtein(a, b) / longer


def normalize_words(text: str, case_sensitive: bool = False) -> list[str]:
    """Strip punctuation, optionally lowercase, and split on whitespace."""
    cleaned = _PUNCTUATION.sub("", text or "")
    if not case_sensitive:
        cleaned = cleaned.lower()
    return cleaned.split()


class TextSimilarityScorer:
    """Position-aligned word comparison producing a 0-100 similarity.

    Args:
        config: Scoring constants (credits, penalty weight, case handling).
    """

    def __init__(self, config: ScoringConfig | None = None):
        self.config = config or ScoringConfig()

    def word_credit(self, target_word: str, spoken_word: str) -> float:
        """Credit (0-1) for one aligned pair of words."""
        if target_word == spoken_word:
            return 1.0
        if target_word.lower() == spoken_word.lower():
            return self.config.case_only_match_credit
        return self.config.partial_match_credit * max(
            0.0, word_similarity(target_word, spoken_word)
        )

    def similarity(self, target: str, spoken: str) -> float:
        """Compare two utterances.

        Args:
            target: Text the learner was asked to say.
            spoken: Text the recognizer heard.

        Returns:
            Similarity 0-100 as an integral float.
        """
        target_words = normalize_words(target, self.config.case_sensitive)
        spoken_words = normalize_words(spoken, self.config.case_sensitive)
        return float(self.similarity_of_words(target_words, spoken_words))

    def similarity_of_words(self, target_words: list[str], spoken_words: list[str]) -> int:
        """Similarity 0-100 of two already-normalized word lists."""
        if not target_words and not spoken_words:
            return 100
        if not target_words or not spoken_words:
            return 0

        longest = max(len(target_words), len(spoken_words))
        total = 0.0
        # zip stops at the shorter list; unmatched positions contribute 0
        for target_word, spoken_word in zip(target_words, spoken_words):
            total += self.word_credit(target_word, spoken_word)

        base = total / longest
        penalty = abs(len(target_words) - len(spoken_words)) / longest
        final = base * (1 - self.config.length_penalty_weight * penalty)
        final = max(0.0, min(1.0, final))
        return round_half_up(final * 100)


def similarity(target: str, spoken: str) -> float:
    """Similarity 0-100 using the configured scoring constants."""
    return TextSimilarityScorer(get_settings().scoring_config()).similarity(target, spoken)
