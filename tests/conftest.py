"""Shared fixtures for the QuizBoard test suite."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from quizboard.core.draft_builder import QuizDraftBuilder
from quizboard.core.models import Quiz, QuizOption, QuizQuestion
from quizboard.core.services.memory_gateway import InMemoryGateway


def make_question(text: str, correct_index: int, option_count: int = 4) -> QuizQuestion:
    return QuizQuestion(
        text=text,
        options=tuple(
            QuizOption(text=f"{text} option {i}", is_correct=i == correct_index)
            for i in range(option_count)
        ),
    )


def make_quiz(correct_indices: list[int], quiz_id: str = "quiz-1", title: str = "Sample quiz") -> Quiz:
    return Quiz(
        id=quiz_id,
        title=title,
        description="Used in tests",
        questions=tuple(
            make_question(f"Question {n}", correct) for n, correct in enumerate(correct_indices)
        ),
        created_by="author-1",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def fill_valid(builder: QuizDraftBuilder, title: str = "Capitals") -> None:
    """Give every question text, option texts and a correct answer."""
    builder.set_title(title)
    for position, question_id in enumerate(builder.question_ids()):
        builder.update_question_text(question_id, f"Question {position + 1}")
        options = builder.get_question(question_id).options
        for number, option in enumerate(options):
            builder.update_option_text(question_id, option.id, f"Answer {number}")
        builder.set_correct_option(question_id, options[0].id)


@pytest.fixture
def gateway() -> InMemoryGateway:
    return InMemoryGateway()


@pytest.fixture
def builder(gateway: InMemoryGateway) -> QuizDraftBuilder:
    return QuizDraftBuilder(gateway)


@pytest.fixture
def valid_builder(gateway: InMemoryGateway) -> QuizDraftBuilder:
    builder = QuizDraftBuilder(gateway)
    builder.add_question()
    fill_valid(builder)
    return builder
