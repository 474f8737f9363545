"""Domain models for the quiz application.

Drafts are mutable and carry stable ids for every question and option.
Published quizzes and attempts are frozen snapshots that convert to and
from the camelCase documents held by the persistence gateway.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Unanswered(Enum):
    """Marker for a question the user has not answered yet."""

    UNANSWERED = "unanswered"

    def __repr__(self) -> str:
        return "UNANSWERED"


UNANSWERED = Unanswered.UNANSWERED

AnswerSlot = int | Unanswered


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Draft side -------------------------------------------------------------


@dataclass(slots=True)
class Option:
    """Editable answer option. Several siblings may be flagged mid-edit."""

    id: str
    text: str = ""
    is_correct: bool = False


@dataclass(slots=True)
class Question:
    """Editable multiple-choice question with exactly four options."""

    id: str
    text: str = ""
    options: list[Option] = field(default_factory=list)


@dataclass(slots=True)
class QuizDraft:
    """Unpublished quiz owned by a single builder."""

    title: str = ""
    description: str = ""
    questions: list[Question] = field(default_factory=list)
    is_public: bool = True


# --- Published side ---------------------------------------------------------


@dataclass(frozen=True, slots=True)
class QuizOption:
    text: str
    is_correct: bool

    def to_document(self) -> dict[str, Any]:
        return {"text": self.text, "isCorrect": self.is_correct}

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "QuizOption":
        return cls(text=data.get("text", ""), is_correct=bool(data.get("isCorrect", False)))


@dataclass(frozen=True, slots=True)
class QuizQuestion:
    text: str
    options: tuple[QuizOption, ...]

    @property
    def correct_option_index(self) -> int | None:
        """Index of the first option flagged correct, or None."""
        return next((i for i, option in enumerate(self.options) if option.is_correct), None)

    def to_document(self) -> dict[str, Any]:
        return {"text": self.text, "options": [o.to_document() for o in self.options]}

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "QuizQuestion":
        return cls(
            text=data.get("text", ""),
            options=tuple(QuizOption.from_document(o) for o in data.get("options", [])),
        )


@dataclass(frozen=True, slots=True)
class Quiz:
    """Published quiz. Never edited in place."""

    id: str
    title: str
    description: str
    questions: tuple[QuizQuestion, ...]
    created_by: str
    created_at: datetime
    is_public: bool = True

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def to_document(self) -> dict[str, Any]:
        """Return the stored document shape (the id lives outside the document)."""
        return {
            "title": self.title,
            "description": self.description,
            "questions": [q.to_document() for q in self.questions],
            "createdBy": self.created_by,
            "createdAt": self.created_at,
            "isPublic": self.is_public,
        }

    @classmethod
    def from_document(cls, quiz_id: str, data: dict[str, Any]) -> "Quiz":
        return cls(
            id=quiz_id,
            title=data.get("title", ""),
            description=data.get("description", ""),
            questions=tuple(QuizQuestion.from_document(q) for q in data.get("questions", [])),
            created_by=data.get("createdBy", ""),
            created_at=data.get("createdAt") or _utcnow(),
            is_public=bool(data.get("isPublic", True)),
        )


@dataclass(frozen=True, slots=True)
class QuizSummary:
    """Listing row used by explore and dashboard views."""

    id: str
    title: str
    description: str
    created_by: str
    created_at: datetime
    question_count: int
    is_public: bool

    @classmethod
    def from_document(cls, quiz_id: str, data: dict[str, Any]) -> "QuizSummary":
        return cls(
            id=quiz_id,
            title=data.get("title", ""),
            description=data.get("description", ""),
            created_by=data.get("createdBy", ""),
            created_at=data.get("createdAt") or _utcnow(),
            question_count=len(data.get("questions") or []),
            is_public=bool(data.get("isPublic", True)),
        )


# --- Attempts ---------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AnswerRecord:
    """Per-question snapshot taken at submission time."""

    question_text: str
    selected_option_index: AnswerSlot
    selected_option_text: str
    correct_option_index: int | None
    is_correct: bool

    def to_document(self) -> dict[str, Any]:
        selected = None if self.selected_option_index is UNANSWERED else self.selected_option_index
        return {
            "questionText": self.question_text,
            "selectedOptionIndex": selected,
            "selectedOptionText": self.selected_option_text,
            "correctOptionIndex": self.correct_option_index,
            "isCorrect": self.is_correct,
        }

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "AnswerRecord":
        selected = data.get("selectedOptionIndex")
        return cls(
            question_text=data.get("questionText", ""),
            selected_option_index=UNANSWERED if selected is None else int(selected),
            selected_option_text=data.get("selectedOptionText", ""),
            correct_option_index=data.get("correctOptionIndex"),
            is_correct=bool(data.get("isCorrect", False)),
        )


@dataclass(frozen=True, slots=True)
class Attempt:
    """One user's completed pass through a quiz."""

    quiz_id: str
    quiz_title: str
    user_id: str
    user_display_name: str
    answers: tuple[AnswerRecord, ...]
    score: int
    total_questions: int
    completed_at: datetime
    id: str | None = None

    def with_id(self, attempt_id: str) -> "Attempt":
        return replace(self, id=attempt_id)

    def to_document(self) -> dict[str, Any]:
        return {
            "quizId": self.quiz_id,
            "quizTitle": self.quiz_title,
            "userId": self.user_id,
            "userDisplayName": self.user_display_name,
            "answers": [a.to_document() for a in self.answers],
            "score": self.score,
            "totalQuestions": self.total_questions,
            "completedAt": self.completed_at,
        }

    @classmethod
    def from_document(cls, attempt_id: str, data: dict[str, Any]) -> "Attempt":
        return cls(
            quiz_id=data.get("quizId", ""),
            quiz_title=data.get("quizTitle", ""),
            user_id=data.get("userId", ""),
            user_display_name=data.get("userDisplayName", ""),
            answers=tuple(AnswerRecord.from_document(a) for a in data.get("answers", [])),
            score=int(data.get("score", 0)),
            total_questions=int(data.get("totalQuestions", 0)),
            completed_at=data.get("completedAt") or _utcnow(),
            id=attempt_id,
        )
