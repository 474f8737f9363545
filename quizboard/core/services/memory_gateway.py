"""Dictionary-backed gateway used as the default store and as a test double."""

from __future__ import annotations

from copy import deepcopy
import logging
from uuid import uuid4

from quizboard.core.models import Attempt, QuizSummary
from quizboard.core.services.gateway import (
    AttemptDocument,
    AttemptFilter,
    PersistenceGateway,
    QuizDocument,
    QuizFilter,
    QuizNotFoundError,
)

logger = logging.getLogger(__name__)


class InMemoryGateway(PersistenceGateway):
    """Keeps quiz and attempt documents in process memory."""

    def __init__(self) -> None:
        self._quizzes: dict[str, QuizDocument] = {}
        self._attempts: dict[str, AttemptDocument] = {}

    async def create_quiz(self, quiz: QuizDocument) -> str:
        quiz_id = uuid4().hex
        self._quizzes[quiz_id] = deepcopy(quiz)
        logger.debug("Stored quiz %s", quiz_id)
        return quiz_id

    async def get_quiz(self, quiz_id: str) -> QuizDocument:
        document = self._quizzes.get(quiz_id)
        if document is None:
            raise QuizNotFoundError(quiz_id)
        return deepcopy(document)

    async def delete_quiz(self, quiz_id: str) -> None:
        if self._quizzes.pop(quiz_id, None) is None:
            raise QuizNotFoundError(quiz_id)
        logger.debug("Deleted quiz %s", quiz_id)

    async def record_attempt(self, attempt: AttemptDocument) -> str:
        attempt_id = uuid4().hex
        self._attempts[attempt_id] = deepcopy(attempt)
        logger.debug("Stored attempt %s", attempt_id)
        return attempt_id

    async def list_quizzes_by(self, quiz_filter: QuizFilter) -> list[QuizSummary]:
        summaries = [
            QuizSummary.from_document(quiz_id, document)
            for quiz_id, document in self._quizzes.items()
            if _quiz_matches(document, quiz_filter)
        ]
        return sorted(summaries, key=lambda s: s.created_at, reverse=True)

    async def list_attempts_by(self, attempt_filter: AttemptFilter) -> list[Attempt]:
        attempts = [
            Attempt.from_document(attempt_id, deepcopy(document))
            for attempt_id, document in self._attempts.items()
            if _attempt_matches(document, attempt_filter)
        ]
        return sorted(attempts, key=lambda a: a.completed_at, reverse=True)

    def quiz_count(self) -> int:
        return len(self._quizzes)

    def attempt_count(self) -> int:
        return len(self._attempts)


def _quiz_matches(document: QuizDocument, quiz_filter: QuizFilter) -> bool:
    if quiz_filter.public_only and not document.get("isPublic", True):
        return False
    if quiz_filter.created_by is not None and document.get("createdBy") != quiz_filter.created_by:
        return False
    return True


def _attempt_matches(document: AttemptDocument, attempt_filter: AttemptFilter) -> bool:
    if attempt_filter.user_id is not None and document.get("userId") != attempt_filter.user_id:
        return False
    if attempt_filter.quiz_id is not None and document.get("quizId") != attempt_filter.quiz_id:
        return False
    return True
