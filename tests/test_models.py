"""Tests for document conversion, rendering and configuration."""

from __future__ import annotations

from datetime import datetime, timezone

from conftest import make_quiz
from quizboard.config import Config
from quizboard.core.markdown_math_renderer import MarkdownMathRenderer
from quizboard.core.models import UNANSWERED, AnswerRecord, Attempt, Quiz


def test_quiz_document_shape_is_field_for_field():
    document = make_quiz([1]).to_document()

    assert list(document) == ["title", "description", "questions", "createdBy", "createdAt", "isPublic"]
    assert list(document["questions"][0]) == ["text", "options"]
    assert document["questions"][0]["options"][1] == {"text": "Question 0 option 1", "isCorrect": True}


def test_quiz_round_trips_through_document():
    quiz = make_quiz([0, 3])

    assert Quiz.from_document(quiz.id, quiz.to_document()) == quiz


def test_attempt_document_shape():
    attempt = Attempt(
        quiz_id="q",
        quiz_title="T",
        user_id="u",
        user_display_name="U",
        answers=(AnswerRecord("Q", 1, "b", 0, False),),
        score=0,
        total_questions=1,
        completed_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )

    document = attempt.to_document()

    assert list(document) == [
        "quizId", "quizTitle", "userId", "userDisplayName",
        "answers", "score", "totalQuestions", "completedAt",
    ]
    assert list(document["answers"][0]) == [
        "questionText", "selectedOptionIndex", "selectedOptionText", "correctOptionIndex", "isCorrect",
    ]


def test_unanswered_marker_is_not_an_index():
    record = AnswerRecord("Q", UNANSWERED, "", 0, False)

    assert record.to_document()["selectedOptionIndex"] is None
    assert AnswerRecord.from_document(record.to_document()).selected_option_index is UNANSWERED
    assert UNANSWERED != 0


def test_renderer_keeps_math_for_mathjax():
    renderer = MarkdownMathRenderer()

    rendered = renderer.render_question(make_quiz([0]).questions[0])

    assert rendered["question_html"].startswith("<p>")
    assert len(rendered["options_html"]) == 4
    assert "<p>" not in rendered["options_html"][0]
    assert "$x^2$" in renderer.render_fragment("Solve $x^2$")
    assert "No content" in renderer.render_fragment("   ")


def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv("QUIZBOARD_PORT", "9100")
    monkeypatch.setenv("QUIZBOARD_LOG_LEVEL", "debug")
    monkeypatch.setenv("QUIZBOARD_PUBLIC_BY_DEFAULT", "no")

    settings = Config.from_env()

    assert settings.server.port == 9100
    assert settings.server.log_level == "DEBUG"
    assert settings.quiz.publish_public_by_default is False
    assert settings.quiz.leaderboard_limit == 10
