"""Utilities for importing quizzes from a human-friendly text file.

File format (blocks separated by blank lines or '---'):

    TITLE: Quiz title            (optional header block)
    DESCRIPTION: Short summary   (optional, may continue on following lines)

    Q: Question text (supports markdown + LaTeX). Additional lines until the
       next marker are treated as part of the question.
    A: First option text
    B: Second option text
    C: Third option text
    D: Fourth option text
    CORRECT: A|B|C|D   (optional; a draft may be left without an answer key)

Example:

    TITLE: Arithmetic

    Q: What is $2 + 2$?
    A: 3
    B: 4
    C: 5
    D: 22
    CORRECT: B

The importer only checks structure. Whether the result is publishable is
decided later by the draft's own validation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path

from quizboard.constants.quiz_constants import OPTION_LETTERS
from quizboard.core.draft_builder import QuizDraftBuilder
from quizboard.core.services.gateway import PersistenceGateway

logger = logging.getLogger(__name__)


class QuizImportError(Exception):
    """Raised when a quiz definition cannot be parsed."""


@dataclass(slots=True)
class ImportedQuestion:
    text: str
    options: list[str]
    correct_index: int | None = None


@dataclass(slots=True)
class ImportedQuiz:
    """Container for imported quiz metadata and questions."""

    title: str = ""
    description: str = ""
    questions: list[ImportedQuestion] = field(default_factory=list)
    source_path: Path | None = None


def load_draft_from_file(file_path: Path, gateway: PersistenceGateway | None = None) -> QuizDraftBuilder:
    text = file_path.read_text(encoding="utf-8")
    imported = parse_quiz_text(text)
    imported.source_path = file_path
    logger.info("Imported %d question(s) from %s", len(imported.questions), file_path)
    return build_draft(imported, gateway)


def draft_from_text(text: str, gateway: PersistenceGateway | None = None) -> QuizDraftBuilder:
    return build_draft(parse_quiz_text(text), gateway)


def build_draft(imported: ImportedQuiz, gateway: PersistenceGateway | None = None) -> QuizDraftBuilder:
    """Replay an imported quiz through the builder's own operations."""
    builder = QuizDraftBuilder(gateway)
    builder.set_title(imported.title)
    builder.set_description(imported.description)
    for position, question in enumerate(imported.questions):
        question_id = builder.question_ids()[0] if position == 0 else builder.add_question()
        builder.update_question_text(question_id, question.text)
        option_ids = [option.id for option in builder.get_question(question_id).options]
        for option_id, option_text in zip(option_ids, question.options):
            builder.update_option_text(question_id, option_id, option_text)
        if question.correct_index is not None:
            builder.set_correct_option(question_id, option_ids[question.correct_index])
    return builder


def parse_quiz_text(text: str) -> ImportedQuiz:
    imported = ImportedQuiz()
    for block in _split_blocks(text):
        if _is_header_block(block):
            _parse_header(block, imported)
        else:
            imported.questions.append(_parse_block(block))
    if not imported.questions:
        raise QuizImportError("Quiz file did not contain any questions.")
    return imported


def _split_blocks(text: str) -> list[str]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped == "---":
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        if stripped:
            current_block.append(raw_line)
        elif current_block:
            blocks.append("\n".join(current_block).strip())
            current_block = []
    if current_block:
        blocks.append("\n".join(current_block).strip())
    return [block for block in blocks if block]


def _is_header_block(block: str) -> bool:
    first = block.splitlines()[0].strip().upper()
    return first.startswith("TITLE:") or first.startswith("DESCRIPTION:")


def _parse_header(block: str, imported: ImportedQuiz) -> None:
    current_section: str | None = None
    description_lines: list[str] = []
    for raw_line in block.splitlines():
        line = raw_line.strip()
        upper = line.upper()
        if upper.startswith("TITLE:"):
            imported.title = line.split(":", 1)[1].strip()
            current_section = "TITLE"
        elif upper.startswith("DESCRIPTION:"):
            description_lines = [line.split(":", 1)[1].strip()]
            current_section = "DESCRIPTION"
        elif current_section == "DESCRIPTION":
            description_lines.append(line)
        else:
            raise QuizImportError(f"Encountered text outside of a known section: '{line}'.")
    if description_lines:
        imported.description = "\n".join(description_lines).strip()


def _parse_block(block: str) -> ImportedQuestion:
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct_letter: str | None = None
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        upper = line.upper()
        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
            continue

        if upper.startswith("CORRECT:"):
            correct_letter = line.split(":", 1)[1].strip().upper()
            current_section = None
            continue

        if len(line) > 2 and line[0].upper() in OPTION_LETTERS and line[1] == ":":
            letter = line[0].upper()
            options[letter] = line[2:].strip()
            current_section = letter
            continue

        if current_section == "Q":
            question_lines.append(line)
        elif current_section in OPTION_LETTERS:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise QuizImportError(f"Encountered text outside of a known section: '{line}'.")

    if not question_lines:
        raise QuizImportError("Question text missing (Q: ...)")
    if len(options) != len(OPTION_LETTERS):
        raise QuizImportError("Each question must define exactly four options (A-D).")

    option_list = [options[letter].strip() for letter in OPTION_LETTERS]
    if any(not opt for opt in option_list):
        raise QuizImportError("Option text cannot be empty.")

    correct_index = None
    if correct_letter is not None:
        if correct_letter not in OPTION_LETTERS:
            raise QuizImportError("CORRECT must be one of A, B, C, or D.")
        correct_index = OPTION_LETTERS.index(correct_letter)

    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise QuizImportError("Question text cannot be empty.")

    return ImportedQuestion(text=question_text, options=option_list, correct_index=correct_index)
