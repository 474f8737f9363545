"""Service for ranking completed attempts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from quizboard.constants.quiz_constants import (
    ANONYMOUS_DISPLAY_NAME,
    DEFAULT_LEADERBOARD_LIMIT,
    UNKNOWN_QUIZ_TITLE,
)
from quizboard.core.models import Attempt
from quizboard.core.scoring import percentage
from quizboard.core.services.gateway import AttemptFilter, PersistenceGateway


@dataclass(slots=True)
class LeaderboardRow:
    """Immutable snapshot returned to consumers."""

    attempt_id: str | None
    user_id: str
    display_name: str
    quiz_id: str
    quiz_title: str
    score: int
    total_questions: int
    percentage: int
    completed_at: datetime

    @classmethod
    def from_attempt(cls, attempt: Attempt) -> "LeaderboardRow":
        return cls(
            attempt_id=attempt.id,
            user_id=attempt.user_id,
            display_name=attempt.user_display_name or ANONYMOUS_DISPLAY_NAME,
            quiz_id=attempt.quiz_id,
            quiz_title=attempt.quiz_title or UNKNOWN_QUIZ_TITLE,
            score=attempt.score,
            total_questions=attempt.total_questions,
            percentage=percentage(attempt.score, attempt.total_questions),
            completed_at=attempt.completed_at,
        )


class Leaderboard:
    """Ranks attempts read through the gateway."""

    def __init__(self, gateway: PersistenceGateway, limit: int = DEFAULT_LEADERBOARD_LIMIT) -> None:
        self._gateway = gateway
        self._limit = limit

    async def get_top_scorers(self, limit: int | None = None) -> list[LeaderboardRow]:
        """Return the best attempts by percentage; earlier completion wins ties."""
        rows = await self._rows()
        rows.sort(key=lambda r: (-r.percentage, r.completed_at))
        return rows[: self._resolve(limit)]

    async def get_recent(self, limit: int | None = None) -> list[LeaderboardRow]:
        """Return the most recently completed attempts."""
        rows = await self._rows()
        rows.sort(key=lambda r: r.completed_at, reverse=True)
        return rows[: self._resolve(limit)]

    async def _rows(self) -> list[LeaderboardRow]:
        attempts = await self._gateway.list_attempts_by(AttemptFilter())
        return [LeaderboardRow.from_attempt(attempt) for attempt in attempts]

    def _resolve(self, limit: int | None) -> int:
        return self._limit if limit is None else max(0, limit)
