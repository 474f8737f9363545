"""Tests for the ordered, fail-fast draft validation rules."""

from __future__ import annotations

from quizboard.core.models import Option, Question, QuizDraft
from quizboard.core.validation import ValidationRule, validate_draft


def _question(qid: str, text: str = "Q", options: list[str] | None = None, correct: list[int] | None = None) -> Question:
    texts = options if options is not None else ["a", "b", "c", "d"]
    flags = set(correct if correct is not None else [0])
    return Question(
        id=qid,
        text=text,
        options=[Option(id=f"{qid}-o{i}", text=t, is_correct=i in flags) for i, t in enumerate(texts)],
    )


def test_title_rule_comes_first():
    draft = QuizDraft(title="  ", questions=[_question("q1", text="")])

    failure = validate_draft(draft).failure

    assert failure.rule is ValidationRule.TITLE_REQUIRED
    assert failure.to_dict()["question_index"] is None


def test_question_text_checked_before_its_options():
    draft = QuizDraft(title="T", questions=[_question("q1", text="", options=["", "", "", ""])])

    failure = validate_draft(draft).failure

    assert failure.rule is ValidationRule.QUESTION_TEXT_REQUIRED
    assert failure.question_index == 0


def test_first_blank_option_is_reported():
    draft = QuizDraft(title="T", questions=[_question("q1", options=["a", "", "", "d"])])

    failure = validate_draft(draft).failure

    assert failure.rule is ValidationRule.OPTION_TEXT_REQUIRED
    assert failure.option_index == 1
    assert failure.option_id == "q1-o1"


def test_options_checked_before_correct_flag():
    draft = QuizDraft(title="T", questions=[_question("q1", options=["a", "b", "c", " "], correct=[])])

    assert validate_draft(draft).failure.rule is ValidationRule.OPTION_TEXT_REQUIRED


def test_no_correct_option_fails():
    draft = QuizDraft(title="T", questions=[_question("q1", correct=[])])

    failure = validate_draft(draft).failure

    assert failure.rule is ValidationRule.SINGLE_CORRECT_OPTION
    assert "Question 1" in failure.message


def test_several_correct_options_fail():
    draft = QuizDraft(title="T", questions=[_question("q1", correct=[0, 2])])

    assert validate_draft(draft).failure.rule is ValidationRule.SINGLE_CORRECT_OPTION


def test_questions_are_checked_in_order():
    draft = QuizDraft(
        title="T",
        questions=[_question("q1"), _question("q2", correct=[]), _question("q3", text="")],
    )

    failure = validate_draft(draft).failure

    assert failure.question_index == 1
    assert failure.rule is ValidationRule.SINGLE_CORRECT_OPTION


def test_valid_draft_passes():
    draft = QuizDraft(title="T", questions=[_question("q1"), _question("q2", correct=[3])])

    result = validate_draft(draft)

    assert result.passed
    assert result.failure is None
