"""Pronunciation attempt and score models."""

from enum import StrEnum

from pydantic import Field, field_validator

from learner_proficiency.models.base import ApiModel, clamp


class Attempt(ApiModel):
    """One utterance compared against a target phrase."""

    target_text: str = ""
    spoken_text: str = ""
    confidence: float = 1.0  # recognizer confidence, 0-1

    @field_validator("target_text", "spoken_text", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: object) -> float:
        return clamp(value, 0.0, 1.0)


class MistakeKind(StrEnum):
    SUBSTITUTION = "substitution"
    MISSING = "missing"
    EXTRA = "extra"


class Mistake(ApiModel):
    """A single word-level mistake, positioned by its index in the target."""

    word: str
    expected: str
    actual: str
    suggestion: str
    kind: MistakeKind = MistakeKind.SUBSTITUTION


class PronunciationScore(ApiModel):
    """Scores (0-100 each), feedback and itemized mistakes for one attempt."""

    overall_score: int = Field(default=0, ge=0, le=100)
    accuracy_score: int = Field(default=0, ge=0, le=100)
    fluency_score: int = Field(default=0, ge=0, le=100)
    pronunciation_score: int = Field(default=0, ge=0, le=100)
    feedback: str = ""
    mistakes: list[Mistake] = Field(default_factory=list)
