"""Persistence gateway contract consumed by the builder, engine and views.

The core never talks to a document store directly. A gateway is injected at
construction time, so production stores and the in-memory double are
interchangeable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from quizboard.core.models import Attempt, QuizSummary

QuizDocument = dict[str, Any]
AttemptDocument = dict[str, Any]


class GatewayError(Exception):
    """Raised when a read or write against the store fails."""


class QuizNotFoundError(LookupError):
    """Raised when no quiz document exists for the requested id."""

    def __init__(self, quiz_id: str) -> None:
        super().__init__(f"Quiz '{quiz_id}' does not exist.")
        self.quiz_id = quiz_id


@dataclass(frozen=True, slots=True)
class QuizFilter:
    created_by: str | None = None
    public_only: bool = False


@dataclass(frozen=True, slots=True)
class AttemptFilter:
    user_id: str | None = None
    quiz_id: str | None = None


class PersistenceGateway(ABC):
    """Opaque create/read/delete operations over quiz and attempt documents."""

    @abstractmethod
    async def create_quiz(self, quiz: QuizDocument) -> str:
        """Write one quiz document atomically and return its id."""

    @abstractmethod
    async def get_quiz(self, quiz_id: str) -> QuizDocument:
        """Return the quiz document or raise QuizNotFoundError."""

    @abstractmethod
    async def delete_quiz(self, quiz_id: str) -> None:
        """Delete the quiz document or raise QuizNotFoundError."""

    @abstractmethod
    async def record_attempt(self, attempt: AttemptDocument) -> str:
        """Write one attempt document atomically and return its id."""

    @abstractmethod
    async def list_quizzes_by(self, quiz_filter: QuizFilter) -> list[QuizSummary]:
        """Return matching quiz summaries, newest first."""

    @abstractmethod
    async def list_attempts_by(self, attempt_filter: AttemptFilter) -> list[Attempt]:
        """Return matching attempts, most recently completed first."""
