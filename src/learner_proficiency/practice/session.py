"""Speaking practice orchestration over injected speech collaborators.

The scoring core never touches audio. A ``PracticeSession`` receives a
``SpeechCapture`` (microphone plus recognizer) and a ``SpeechOutput``
(text-to-speech) from its caller, plays the target phrase, listens for the
learner's attempt, and scores it with a ``PronunciationEvaluator``.
"""

from datetime import datetime
from enum import StrEnum
from typing import Protocol, runtime_checkable

import structlog
from pydantic import BaseModel, Field

from learner_proficiency.models.pronunciation import Attempt, PronunciationScore
from learner_proficiency.scoring.pronunciation import PronunciationEvaluator
from learner_proficiency.scoring.similarity import round_half_up

logger = structlog.get_logger()


class RecognizedSpeech(BaseModel):
    """Transcript returned by a speech recognizer."""

    text: str = ""
    confidence: float = 1.0


@runtime_checkable
class SpeechCapture(Protocol):
    async def listen(self) -> RecognizedSpeech:
        """Record one utterance and return its transcript."""
        ...


@runtime_checkable
class SpeechOutput(Protocol):
    async def speak(self, text: str) -> None:
        """Play ``text`` to the learner."""
        ...


class SessionStatus(StrEnum):
    """Session lifecycle states."""

    CREATED = "created"
    ACTIVE = "active"
    COMPLETED = "completed"


class PracticeRecord(BaseModel):
    """An attempt and the score it received."""

    attempt: Attempt
    score: PronunciationScore
    timestamp: datetime = Field(default_factory=datetime.now)


class PracticeSession:
    """Runs speaking attempts and keeps their scores.

    Args:
        capture: Speech recognizer collaborator.
        output: Speech synthesis collaborator.
        evaluator: Scorer for each attempt.
        speak_target: Play the target phrase before listening.
    """

    def __init__(
        self,
        capture: SpeechCapture,
        output: SpeechOutput,
        evaluator: PronunciationEvaluator | None = None,
        speak_target: bool = True,
    ):
        self.capture = capture
        self.output = output
        self.evaluator = evaluator or PronunciationEvaluator()
        self.speak_target = speak_target
        self.status = SessionStatus.CREATED
        self.started_at: datetime | None = None
        self.ended_at: datetime | None = None
        self._records: list[PracticeRecord] = []

    @property
    def records(self) -> list[PracticeRecord]:
        return list(self._records)

    @property
    def attempts(self) -> list[Attempt]:
        return [r.attempt for r in self._records]

    @property
    def scores(self) -> list[PronunciationScore]:
        return [r.score for r in self._records]

    @property
    def average_score(self) -> int:
        """Rounded mean overall score, 0 before any attempt."""
        if not self._records:
            return 0
        return round_half_up(sum(s.overall_score for s in self.scores) / len(self._records))

    @property
    def best_score(self) -> int:
        return max((s.overall_score for s in self.scores), default=0)

    async def practice(self, target_text: str) -> PronunciationScore:
        """Run one attempt at ``target_text``.

        Args:
            target_text: Phrase the learner should say.

        Returns:
            Score for the recognized attempt.

        Raises:
            RuntimeError: If the session has already been completed.
        """
        if self.status == SessionStatus.COMPLETED:
            raise RuntimeError("Practice session is already completed")
        if self.status == SessionStatus.CREATED:
            self.status = SessionStatus.ACTIVE
            self.started_at = datetime.now()

        try:
            if self.speak_target:
                await self.output.speak(target_text)
            heard = await self.capture.listen()
        except Exception:
            logger.exception("practice_speech_failed", target=target_text)
            raise

        attempt = Attempt(
            target_text=target_text,
            spoken_text=heard.text,
            confidence=heard.confidence,
        )
        score = self.evaluator.evaluate_attempt(attempt)
        self._records.append(PracticeRecord(attempt=attempt, score=score))
        logger.info(
            "practice_attempt_scored",
            attempt_number=len(self._records),
            overall=score.overall_score,
        )
        return score

    def complete(self) -> None:
        """Mark the session finished; further attempts are rejected."""
        self.status = SessionStatus.COMPLETED
        self.ended_at = datetime.now()
        logger.info(
            "practice_session_completed",
            attempts=len(self._records),
            average=self.average_score,
            best=self.best_score,
        )
