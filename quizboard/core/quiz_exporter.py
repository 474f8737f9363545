"""Utilities for exporting drafts to the plain-text format used for imports."""

from __future__ import annotations

from pathlib import Path

from quizboard.constants.quiz_constants import OPTION_LETTERS
from quizboard.core.models import Question, QuizDraft


def save_draft_to_file(file_path: Path, draft: QuizDraft) -> None:
    """Write the draft to disk in the text import format."""
    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(serialize_draft(draft), encoding="utf-8")


def serialize_draft(draft: QuizDraft) -> str:
    blocks: list[str] = []
    header = _serialize_header(draft)
    if header:
        blocks.append(header)
    blocks.extend(_serialize_question(question) for question in draft.questions)
    return "\n\n---\n\n".join(blocks) + "\n"


def _serialize_header(draft: QuizDraft) -> str:
    lines: list[str] = []
    if draft.title.strip():
        lines.append(f"TITLE: {draft.title.strip()}")
    if draft.description.strip():
        description_lines = draft.description.strip().splitlines()
        lines.append(f"DESCRIPTION: {description_lines[0]}")
        lines.extend(description_lines[1:])
    return "\n".join(lines)


def _serialize_question(question: Question) -> str:
    lines: list[str] = []

    question_lines = question.text.splitlines() or [question.text]
    lines.append(f"Q: {question_lines[0] if question_lines else ''}")
    lines.extend(question_lines[1:])

    for idx, letter in enumerate(OPTION_LETTERS):
        option_text = question.options[idx].text if idx < len(question.options) else ""
        option_lines = option_text.splitlines() or [option_text]
        lines.append(f"{letter}: {option_lines[0] if option_lines else ''}")
        lines.extend(option_lines[1:])

    correct = [idx for idx, option in enumerate(question.options) if option.is_correct]
    if len(correct) == 1:
        lines.append(f"CORRECT: {OPTION_LETTERS[correct[0]]}")

    return "\n".join(lines)
