"""Tests for scoring helpers."""

from __future__ import annotations

import pytest

from conftest import make_question
from quizboard.core.models import UNANSWERED
from quizboard.core.scoring import (
    build_answer_record,
    first_unanswered_index,
    percentage,
    score_answers,
)


@pytest.mark.parametrize(
    "score,total,expected",
    [(2, 3, 67), (1, 3, 33), (0, 1, 0), (4, 4, 100), (133, 200, 67), (1, 8, 13), (0, 0, 0)],
)
def test_percentage_rounds_half_up(score, total, expected):
    assert percentage(score, total) == expected


def test_first_unanswered_index():
    assert first_unanswered_index([0, UNANSWERED, 2, UNANSWERED]) == 1
    assert first_unanswered_index([0, 1]) is None


def test_zero_is_a_real_answer():
    assert first_unanswered_index([0, 0, 0]) is None


def test_out_of_range_answer_never_counts():
    question = make_question("Q", correct_index=1)

    record = build_answer_record(question, 7)

    assert record.is_correct is False
    assert record.selected_option_text == ""
    assert record.correct_option_index == 1


def test_score_answers_snapshots_each_question():
    questions = [make_question("A", 0), make_question("B", 2)]

    score, records = score_answers(questions, [0, 1])

    assert score == 1
    assert [r.is_correct for r in records] == [True, False]
    assert records[1].selected_option_text == "B option 1"
    assert records[1].correct_option_index == 2


def test_score_answers_requires_aligned_lengths():
    with pytest.raises(ValueError):
        score_answers([make_question("A", 0)], [])
