"""Publish-time validation rules for quiz drafts.

Rules run in a fixed order and stop at the first violation so the caller
can point at exactly one offending field:

    1. the title is not blank
    2. for each question in order:
       a. the question text is not blank
       b. each option text, in order, is not blank
       c. exactly one option is flagged correct
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from quizboard.core.models import Question, QuizDraft


class ValidationRule(str, Enum):
    TITLE_REQUIRED = "title_required"
    QUESTION_TEXT_REQUIRED = "question_text_required"
    OPTION_TEXT_REQUIRED = "option_text_required"
    SINGLE_CORRECT_OPTION = "single_correct_option"


_MESSAGES = {
    ValidationRule.TITLE_REQUIRED: "Please provide a title for your quiz.",
    ValidationRule.QUESTION_TEXT_REQUIRED: "All questions must have text.",
    ValidationRule.OPTION_TEXT_REQUIRED: "All options must have text.",
    ValidationRule.SINGLE_CORRECT_OPTION: "Each question must have exactly one correct answer selected.",
}


@dataclass(frozen=True, slots=True)
class ValidationFailure:
    """The first rule a draft violates and where."""

    rule: ValidationRule
    question_index: int | None = None
    option_index: int | None = None
    question_id: str | None = None
    option_id: str | None = None

    @property
    def message(self) -> str:
        base = _MESSAGES[self.rule]
        if self.question_index is None:
            return base
        return f"Question {self.question_index + 1}: {base}"

    def to_dict(self) -> dict[str, object]:
        return {
            "rule": self.rule.value,
            "question_index": self.question_index,
            "option_index": self.option_index,
            "question_id": self.question_id,
            "option_id": self.option_id,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class ValidationResult:
    failure: ValidationFailure | None = None

    @property
    def passed(self) -> bool:
        return self.failure is None

    def __bool__(self) -> bool:
        return self.passed


def is_blank(text: str | None) -> bool:
    return not (text or "").strip()


def check_title(draft: QuizDraft) -> ValidationFailure | None:
    if is_blank(draft.title):
        return ValidationFailure(ValidationRule.TITLE_REQUIRED)
    return None


def check_question(index: int, question: Question) -> ValidationFailure | None:
    if is_blank(question.text):
        return ValidationFailure(
            ValidationRule.QUESTION_TEXT_REQUIRED,
            question_index=index,
            question_id=question.id,
        )
    for option_index, option in enumerate(question.options):
        if is_blank(option.text):
            return ValidationFailure(
                ValidationRule.OPTION_TEXT_REQUIRED,
                question_index=index,
                option_index=option_index,
                question_id=question.id,
                option_id=option.id,
            )
    correct_count = sum(1 for option in question.options if option.is_correct)
    if correct_count != 1:
        return ValidationFailure(
            ValidationRule.SINGLE_CORRECT_OPTION,
            question_index=index,
            question_id=question.id,
        )
    return None


def validate_draft(draft: QuizDraft) -> ValidationResult:
    """Return the first violation found, or a passing result."""
    failure = check_title(draft)
    if failure is not None:
        return ValidationResult(failure)
    for index, question in enumerate(draft.questions):
        failure = check_question(index, question)
        if failure is not None:
            return ValidationResult(failure)
    return ValidationResult()
