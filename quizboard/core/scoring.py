"""Scoring helpers shared by the attempt engine and ranking views."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from quizboard.core.models import UNANSWERED, AnswerRecord, AnswerSlot, QuizQuestion


def first_unanswered_index(answers: Sequence[AnswerSlot]) -> int | None:
    """Lowest index still holding the unanswered marker, or None."""
    return next((i for i, answer in enumerate(answers) if answer is UNANSWERED), None)


def selected_option(question: QuizQuestion, answer: AnswerSlot):
    """Return the chosen option, or None for the marker or an out-of-range index."""
    if answer is UNANSWERED or not 0 <= answer < len(question.options):
        return None
    return question.options[answer]


def is_answer_correct(question: QuizQuestion, answer: AnswerSlot) -> bool:
    option = selected_option(question, answer)
    return option is not None and option.is_correct


def build_answer_record(question: QuizQuestion, answer: AnswerSlot) -> AnswerRecord:
    option = selected_option(question, answer)
    return AnswerRecord(
        question_text=question.text,
        selected_option_index=answer,
        selected_option_text=option.text if option is not None else "",
        correct_option_index=question.correct_option_index,
        is_correct=option is not None and option.is_correct,
    )


def score_answers(
    questions: Sequence[QuizQuestion], answers: Sequence[AnswerSlot]
) -> tuple[int, tuple[AnswerRecord, ...]]:
    """Score index-aligned answers and snapshot one record per question."""
    if len(questions) != len(answers):
        raise ValueError(
            f"Expected {len(questions)} answers, got {len(answers)}."
        )
    records = tuple(build_answer_record(q, a) for q, a in zip(questions, answers))
    score = sum(1 for record in records if record.is_correct)
    return score, records


def percentage(score: int, total_questions: int) -> int:
    """Whole-number percentage, rounding halves up (66.5 -> 67)."""
    if total_questions <= 0:
        return 0
    value = Decimal(score) * 100 / Decimal(total_questions)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
