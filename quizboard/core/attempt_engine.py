"""State machine for one user's pass through one quiz.

    LOADING --load ok--> IN_PROGRESS --submit ok--> COMPLETED
       |
       +--quiz missing--> NOT_FOUND

COMPLETED and NOT_FOUND are terminal. A blocked or failed submit leaves the
engine IN_PROGRESS with its answers untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
import logging

from quizboard.core.models import UNANSWERED, AnswerSlot, Attempt, Quiz, QuizQuestion
from quizboard.core.scoring import first_unanswered_index, percentage, score_answers
from quizboard.core.services.gateway import GatewayError, PersistenceGateway, QuizNotFoundError

logger = logging.getLogger(__name__)


class AttemptState(str, Enum):
    LOADING = "loading"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    NOT_FOUND = "not_found"


class InvalidAttemptStateError(RuntimeError):
    """Raised when an operation is not allowed in the current state."""


class SubmitInProgressError(RuntimeError):
    """Raised when submit is re-invoked while the attempt write is in flight."""


@dataclass(frozen=True, slots=True)
class SubmitResult:
    """Either the stored attempt or the first question still unanswered."""

    attempt: Attempt | None = None
    first_unanswered_index: int | None = None

    @property
    def blocked(self) -> bool:
        return self.attempt is None


class QuizAttemptEngine:
    """Tracks navigation and answers, then scores and records the attempt."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        quiz_id: str,
        user_id: str,
        user_display_name: str = "",
    ) -> None:
        self._gateway = gateway
        self._quiz_id = quiz_id
        self._user_id = user_id
        self._user_display_name = user_display_name
        self._state = AttemptState.LOADING
        self._quiz: Quiz | None = None
        self._answers: list[AnswerSlot] = []
        self._pointer: int = 0
        self._submitting: bool = False
        self._result: Attempt | None = None

    # --- Read access ---

    @property
    def state(self) -> AttemptState:
        return self._state

    @property
    def quiz_id(self) -> str:
        return self._quiz_id

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def quiz(self) -> Quiz | None:
        return self._quiz

    @property
    def pointer(self) -> int:
        return self._pointer

    @property
    def answers(self) -> tuple[AnswerSlot, ...]:
        return tuple(self._answers)

    @property
    def question_count(self) -> int:
        return len(self._answers)

    @property
    def answered_count(self) -> int:
        return sum(1 for answer in self._answers if answer is not UNANSWERED)

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def result(self) -> Attempt | None:
        return self._result

    @property
    def percentage(self) -> int | None:
        if self._result is None:
            return None
        return percentage(self._result.score, self._result.total_questions)

    def current_question(self) -> QuizQuestion:
        self._require_quiz()
        return self._quiz.questions[self._pointer]

    def current_answer(self) -> AnswerSlot:
        self._require_quiz()
        return self._answers[self._pointer]

    # --- Loading ---

    async def load(self) -> Quiz:
        """Fetch the quiz and enter IN_PROGRESS.

        A missing quiz moves the engine to NOT_FOUND and re-raises. Any other
        gateway failure leaves it LOADING so ``load`` can be called again.
        """
        if self._state is not AttemptState.LOADING:
            raise InvalidAttemptStateError(f"Cannot load an attempt that is {self._state.value}.")
        try:
            document = await self._gateway.get_quiz(self._quiz_id)
        except QuizNotFoundError:
            self._state = AttemptState.NOT_FOUND
            logger.warning("Quiz %s not found for user %s", self._quiz_id, self._user_id)
            raise
        except GatewayError:
            logger.exception("Failed to load quiz %s", self._quiz_id)
            raise
        quiz = Quiz.from_document(self._quiz_id, document)
        self.start(quiz)
        return quiz

    def start(self, quiz: Quiz) -> None:
        """Enter IN_PROGRESS with every answer unset and the pointer at zero."""
        if self._state is not AttemptState.LOADING:
            raise InvalidAttemptStateError(f"Cannot start an attempt that is {self._state.value}.")
        if not quiz.questions:
            raise ValueError(f"Quiz '{quiz.id}' has no questions.")
        self._quiz = quiz
        self._quiz_id = quiz.id
        self._answers = [UNANSWERED] * quiz.question_count
        self._pointer = 0
        self._state = AttemptState.IN_PROGRESS
        logger.debug("Attempt started on quiz %s by %s", quiz.id, self._user_id)

    # --- Answering and navigation ---

    def select_option(self, index: int) -> None:
        """Record ``index`` for the current question, replacing any earlier pick."""
        self._require_in_progress()
        if self._submitting:
            raise SubmitInProgressError("Answers are locked while the attempt is being submitted.")
        option_count = len(self.current_question().options)
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < option_count:
            raise ValueError(f"Option index must be between 0 and {option_count - 1}.")
        self._answers[self._pointer] = index

    def next(self) -> bool:
        self._require_in_progress()
        if self._pointer >= len(self._answers) - 1:
            return False
        self._pointer += 1
        return True

    def previous(self) -> bool:
        self._require_in_progress()
        if self._pointer <= 0:
            return False
        self._pointer -= 1
        return True

    def go_to(self, index: int) -> None:
        """Jump straight to a question, e.g. the first unanswered one."""
        self._require_in_progress()
        if not 0 <= index < len(self._answers):
            raise IndexError(f"Question index {index} out of range")
        self._pointer = index

    # --- Submission ---

    async def submit(self) -> SubmitResult:
        """Score and record the attempt once every question has an answer."""
        self._require_in_progress()
        if self._submitting:
            logger.warning("Submit already in flight for quiz %s; ignoring duplicate.", self._quiz_id)
            raise SubmitInProgressError("This attempt is already being submitted.")

        missing = first_unanswered_index(self._answers)
        if missing is not None:
            logger.warning("Submit blocked: question %d is unanswered", missing)
            return SubmitResult(first_unanswered_index=missing)

        score, records = score_answers(self._quiz.questions, self._answers)
        attempt = Attempt(
            quiz_id=self._quiz.id,
            quiz_title=self._quiz.title,
            user_id=self._user_id,
            user_display_name=self._user_display_name,
            answers=records,
            score=score,
            total_questions=self._quiz.question_count,
            completed_at=datetime.now(timezone.utc),
        )

        self._submitting = True
        try:
            attempt_id = await self._gateway.record_attempt(attempt.to_document())
        except GatewayError:
            logger.exception("Failed to record attempt on quiz %s", self._quiz.id)
            raise
        finally:
            self._submitting = False

        self._result = attempt.with_id(attempt_id)
        self._state = AttemptState.COMPLETED
        logger.info(
            "Attempt %s recorded: %d/%d on quiz %s",
            attempt_id,
            score,
            attempt.total_questions,
            self._quiz.id,
        )
        return SubmitResult(attempt=self._result)

    # --- Internals ---

    def _require_quiz(self) -> None:
        if self._quiz is None:
            raise InvalidAttemptStateError("The quiz has not been loaded yet.")

    def _require_in_progress(self) -> None:
        if self._state is not AttemptState.IN_PROGRESS:
            raise InvalidAttemptStateError(
                f"Operation requires an attempt in progress (current state: {self._state.value})."
            )
