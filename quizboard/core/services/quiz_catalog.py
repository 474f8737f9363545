"""Service for browsing, listing and deleting published quizzes."""

from __future__ import annotations

import logging

from quizboard.core.models import Attempt, Quiz, QuizSummary
from quizboard.core.services.gateway import (
    AttemptFilter,
    PersistenceGateway,
    QuizFilter,
)

logger = logging.getLogger(__name__)


class NotQuizOwnerError(PermissionError):
    """Raised when someone other than the author tries to delete a quiz."""


class QuizCatalog:
    """Read-side helpers for the explore page and the user dashboard."""

    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway

    async def explore(self, search: str = "") -> list[QuizSummary]:
        """Public quizzes, newest first, matching ``search`` in title or description."""
        summaries = await self._gateway.list_quizzes_by(QuizFilter(public_only=True))
        needle = search.strip().lower()
        if not needle:
            return summaries
        return [
            summary
            for summary in summaries
            if needle in summary.title.lower() or needle in summary.description.lower()
        ]

    async def quizzes_created_by(self, user_id: str) -> list[QuizSummary]:
        return await self._gateway.list_quizzes_by(QuizFilter(created_by=user_id))

    async def attempts_by(self, user_id: str) -> list[Attempt]:
        return await self._gateway.list_attempts_by(AttemptFilter(user_id=user_id))

    async def get_quiz(self, quiz_id: str) -> Quiz:
        document = await self._gateway.get_quiz(quiz_id)
        return Quiz.from_document(quiz_id, document)

    async def delete_quiz(self, quiz_id: str, requested_by: str) -> None:
        """Delete a quiz on behalf of its author."""
        quiz = await self.get_quiz(quiz_id)
        if quiz.created_by != requested_by:
            logger.warning("User %s tried to delete quiz %s owned by %s", requested_by, quiz_id, quiz.created_by)
            raise NotQuizOwnerError("Only the author of a quiz can delete it.")
        await self._gateway.delete_quiz(quiz_id)
        logger.info("Quiz %s deleted by %s", quiz_id, requested_by)
