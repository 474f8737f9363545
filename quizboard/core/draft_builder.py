"""Editable quiz draft with structural operations and publish-time checks."""

from __future__ import annotations

from copy import deepcopy
from datetime import datetime, timezone
from enum import Enum
import logging

from quizboard.constants.quiz_constants import OPTIONS_PER_QUESTION
from quizboard.core.models import Option, Question, Quiz, QuizDraft
from quizboard.core.services.gateway import GatewayError, PersistenceGateway, QuizDocument
from quizboard.core.validation import ValidationFailure, ValidationResult, validate_draft

logger = logging.getLogger(__name__)


class CannotRemoveLastQuestionError(Exception):
    """Raised when removing the only question left in a draft."""


class UnknownQuestionError(LookupError):
    """Raised when a question id is not part of the draft."""


class UnknownOptionError(LookupError):
    """Raised when an option id is not part of the given question."""


class DraftValidationError(ValueError):
    """Raised when exporting or publishing a draft that fails validation."""

    def __init__(self, failure: ValidationFailure) -> None:
        super().__init__(failure.message)
        self.failure = failure


class PublishInProgressError(RuntimeError):
    """Raised when publish is re-invoked while a create call is in flight."""


class DraftAlreadyPublishedError(RuntimeError):
    """Raised when publishing a draft that already produced a quiz."""


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"


class QuizDraftBuilder:
    """Owns one in-memory draft.

    Questions and options keep the id they were created with; reordering and
    removal only change positions. Text edits are never validated here, so a
    draft may be invalid until ``validate`` or ``publish`` is called.
    """

    def __init__(self, gateway: PersistenceGateway | None = None, *, is_public: bool = True) -> None:
        self._gateway = gateway
        self._draft = QuizDraft(is_public=is_public)
        self._question_counter: int = 0
        self._positions: dict[str, int] = {}
        self._publishing: bool = False
        self._published_quiz_id: str | None = None
        self.add_question()

    @classmethod
    def from_quiz(cls, quiz: Quiz, gateway: PersistenceGateway | None = None) -> "QuizDraftBuilder":
        """Start a fresh draft pre-filled from a published quiz."""
        builder = cls(gateway, is_public=quiz.is_public)
        builder.set_title(quiz.title)
        builder.set_description(quiz.description)
        for position, published in enumerate(quiz.questions):
            question_id = builder.question_ids()[0] if position == 0 else builder.add_question()
            question = builder._question(question_id)
            question.text = published.text
            for draft_option, option in zip(question.options, published.options):
                draft_option.text = option.text
                draft_option.is_correct = option.is_correct
        return builder

    @classmethod
    async def load(cls, gateway: PersistenceGateway, quiz_id: str) -> "QuizDraftBuilder":
        """Load a published quiz through the gateway and open it as a draft."""
        document = await gateway.get_quiz(quiz_id)
        return cls.from_quiz(Quiz.from_document(quiz_id, document), gateway)

    # --- Read access ---

    @property
    def title(self) -> str:
        return self._draft.title

    @property
    def description(self) -> str:
        return self._draft.description

    @property
    def is_public(self) -> bool:
        return self._draft.is_public

    @property
    def is_publishing(self) -> bool:
        return self._publishing

    @property
    def published_quiz_id(self) -> str | None:
        return self._published_quiz_id

    def snapshot(self) -> QuizDraft:
        """Return a copy of the draft that callers may inspect freely."""
        return deepcopy(self._draft)

    def question_ids(self) -> list[str]:
        return [question.id for question in self._draft.questions]

    def question_count(self) -> int:
        return len(self._draft.questions)

    def get_question(self, question_id: str) -> Question:
        return deepcopy(self._question(question_id))

    def position_of(self, question_id: str) -> int:
        self._question(question_id)
        return self._positions[question_id]

    # --- Draft-level fields ---

    def set_title(self, title: str) -> None:
        self._draft.title = title

    def set_description(self, description: str) -> None:
        self._draft.description = description

    def set_public(self, is_public: bool) -> None:
        self._draft.is_public = is_public

    # --- Structural mutation ---

    def add_question(self) -> str:
        """Append a blank question with four blank options and return its id."""
        question_id = self._next_question_id()
        options = [
            Option(id=f"{question_id}-o{number}")
            for number in range(1, OPTIONS_PER_QUESTION + 1)
        ]
        self._draft.questions.append(Question(id=question_id, options=options))
        self._rebuild_positions()
        logger.debug("Added question %s", question_id)
        return question_id

    def remove_question(self, question_id: str) -> None:
        position = self.position_of(question_id)
        if len(self._draft.questions) == 1:
            logger.warning("Refused to remove the last question %s", question_id)
            raise CannotRemoveLastQuestionError("A quiz must have at least one question.")
        self._draft.questions.pop(position)
        self._rebuild_positions()
        logger.debug("Removed question %s", question_id)

    def move_question(self, question_id: str, direction: Direction | str) -> bool:
        """Swap with the neighbor in ``direction``. Returns False at a boundary."""
        direction = Direction(direction)
        position = self.position_of(question_id)
        target = position - 1 if direction is Direction.UP else position + 1
        if not 0 <= target < len(self._draft.questions):
            return False
        questions = self._draft.questions
        questions[position], questions[target] = questions[target], questions[position]
        self._rebuild_positions()
        logger.debug("Moved question %s %s", question_id, direction.value)
        return True

    def update_question_text(self, question_id: str, text: str) -> None:
        self._question(question_id).text = text

    def update_option_text(self, question_id: str, option_id: str, text: str) -> None:
        self._option(question_id, option_id).text = text

    def set_correct_option(self, question_id: str, option_id: str) -> None:
        """Flag ``option_id`` correct and clear the flag on every sibling."""
        self._option(question_id, option_id)
        for option in self._question(question_id).options:
            option.is_correct = option.id == option_id

    # --- Validation and publishing ---

    def validate(self) -> ValidationResult:
        return validate_draft(self._draft)

    def export(self, created_by: str, created_at: datetime | None = None) -> QuizDocument:
        """Build the quiz document for this draft, raising if it is invalid."""
        result = self.validate()
        if result.failure is not None:
            logger.warning("Draft failed validation: %s", result.failure.rule.value)
            raise DraftValidationError(result.failure)
        return {
            "title": self._draft.title,
            "description": self._draft.description,
            "questions": [
                {
                    "text": question.text,
                    "options": [
                        {"text": option.text, "isCorrect": option.is_correct}
                        for option in question.options
                    ],
                }
                for question in self._draft.questions
            ],
            "createdBy": created_by,
            "createdAt": created_at or datetime.now(timezone.utc),
            "isPublic": self._draft.is_public,
        }

    async def publish(self, created_by: str) -> Quiz:
        """Validate and write the draft as one quiz document.

        A failed write leaves the builder exactly as it was, so the caller can
        simply try again.
        """
        if self._gateway is None:
            raise RuntimeError("No persistence gateway configured for this draft.")
        if self._publishing:
            logger.warning("Publish already in flight; ignoring duplicate request.")
            raise PublishInProgressError("This quiz is already being published.")
        if self._published_quiz_id is not None:
            raise DraftAlreadyPublishedError(
                f"This draft was already published as quiz '{self._published_quiz_id}'."
            )
        document = self.export(created_by)

        self._publishing = True
        try:
            quiz_id = await self._gateway.create_quiz(document)
        except GatewayError:
            logger.exception("Failed to create quiz for %s", created_by)
            raise
        finally:
            self._publishing = False

        self._published_quiz_id = quiz_id
        logger.info("Published quiz %s with %d question(s)", quiz_id, len(document["questions"]))
        return Quiz.from_document(quiz_id, document)

    # --- Internals ---

    def _next_question_id(self) -> str:
        self._question_counter += 1
        return f"q{self._question_counter}"

    def _rebuild_positions(self) -> None:
        self._positions = {q.id: i for i, q in enumerate(self._draft.questions)}

    def _question(self, question_id: str) -> Question:
        position = self._positions.get(question_id)
        if position is None:
            raise UnknownQuestionError(f"Question '{question_id}' is not part of this draft.")
        return self._draft.questions[position]

    def _option(self, question_id: str, option_id: str) -> Option:
        question = self._question(question_id)
        for option in question.options:
            if option.id == option_id:
                return option
        raise UnknownOptionError(
            f"Option '{option_id}' is not part of question '{question_id}'."
        )
