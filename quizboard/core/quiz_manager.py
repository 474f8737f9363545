"""Registry of live drafts and attempts shared with the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from threading import Lock
from uuid import uuid4

from quizboard.constants.quiz_constants import DEFAULT_LEADERBOARD_LIMIT
from quizboard.core.attempt_engine import QuizAttemptEngine, SubmitResult
from quizboard.core.draft_builder import QuizDraftBuilder
from quizboard.core.models import Quiz
from quizboard.core.quiz_importer import draft_from_text
from quizboard.core.services.gateway import PersistenceGateway
from quizboard.core.services.leaderboard import Leaderboard
from quizboard.core.services.memory_gateway import InMemoryGateway
from quizboard.core.services.quiz_catalog import NotQuizOwnerError, QuizCatalog

logger = logging.getLogger(__name__)


class UnknownSessionError(LookupError):
    """Raised when a draft or attempt handle is not registered."""


class SessionOwnerError(PermissionError):
    """Raised when a user touches a draft or attempt that belongs to someone else."""


@dataclass(slots=True)
class DraftSession:
    draft_id: str
    owner_id: str
    builder: QuizDraftBuilder


@dataclass(slots=True)
class AttemptSession:
    attempt_id: str
    engine: QuizAttemptEngine


class QuizManager:
    """Facade over the gateway: drafts, attempts, catalog and leaderboard.

    Builders and engines are handed out as-is; the lock only guards the
    registries themselves.
    """

    def __init__(
        self,
        gateway: PersistenceGateway | None = None,
        *,
        leaderboard_limit: int = DEFAULT_LEADERBOARD_LIMIT,
        public_by_default: bool = True,
    ) -> None:
        self._lock = Lock()
        self._gateway = gateway if gateway is not None else InMemoryGateway()
        self._public_by_default = public_by_default

        # Services
        self._catalog = QuizCatalog(self._gateway)
        self._leaderboard = Leaderboard(self._gateway, leaderboard_limit)

        self._drafts: dict[str, DraftSession] = {}
        self._attempts: dict[str, AttemptSession] = {}

    @property
    def gateway(self) -> PersistenceGateway:
        return self._gateway

    @property
    def catalog(self) -> QuizCatalog:
        return self._catalog

    @property
    def leaderboard(self) -> Leaderboard:
        return self._leaderboard

    # --- Drafts ---

    def create_draft(self, owner_id: str) -> DraftSession:
        builder = QuizDraftBuilder(self._gateway, is_public=self._public_by_default)
        return self._register_draft(owner_id, builder)

    def import_draft(self, owner_id: str, text: str) -> DraftSession:
        builder = draft_from_text(text, self._gateway)
        builder.set_public(self._public_by_default)
        return self._register_draft(owner_id, builder)

    async def edit_quiz(self, quiz_id: str, owner_id: str) -> DraftSession:
        """Open one of the caller's published quizzes as a new draft."""
        quiz = await self._catalog.get_quiz(quiz_id)
        if quiz.created_by != owner_id:
            logger.warning("User %s tried to edit quiz %s owned by %s", owner_id, quiz_id, quiz.created_by)
            raise NotQuizOwnerError("Only the author of a quiz can edit it.")
        builder = QuizDraftBuilder.from_quiz(quiz, self._gateway)
        return self._register_draft(owner_id, builder)

    def get_draft(self, draft_id: str, owner_id: str) -> QuizDraftBuilder:
        with self._lock:
            session = self._drafts.get(draft_id)
        if session is None:
            raise UnknownSessionError(f"Draft '{draft_id}' does not exist.")
        if session.owner_id != owner_id:
            raise SessionOwnerError("This draft belongs to another user.")
        return session.builder

    def discard_draft(self, draft_id: str, owner_id: str) -> None:
        self.get_draft(draft_id, owner_id)
        with self._lock:
            self._drafts.pop(draft_id, None)

    async def publish_draft(self, draft_id: str, owner_id: str) -> Quiz:
        """Publish the draft and drop it from the registry once stored."""
        builder = self.get_draft(draft_id, owner_id)
        quiz = await builder.publish(owner_id)
        with self._lock:
            self._drafts.pop(draft_id, None)
        return quiz

    # --- Attempts ---

    async def start_attempt(self, quiz_id: str, user_id: str, display_name: str = "") -> AttemptSession:
        """Load the quiz and register an in-progress attempt."""
        engine = QuizAttemptEngine(self._gateway, quiz_id, user_id, display_name)
        await engine.load()
        session = AttemptSession(attempt_id=uuid4().hex, engine=engine)
        with self._lock:
            self._attempts[session.attempt_id] = session
        logger.debug("Attempt session %s opened on quiz %s", session.attempt_id, quiz_id)
        return session

    def get_attempt(self, attempt_id: str, user_id: str) -> QuizAttemptEngine:
        with self._lock:
            session = self._attempts.get(attempt_id)
        if session is None:
            raise UnknownSessionError(f"Attempt '{attempt_id}' does not exist.")
        if session.engine.user_id != user_id:
            raise SessionOwnerError("This attempt belongs to another user.")
        return session.engine

    async def submit_attempt(self, attempt_id: str, user_id: str) -> SubmitResult:
        """Submit the attempt and drop it from the registry once recorded."""
        engine = self.get_attempt(attempt_id, user_id)
        outcome = await engine.submit()
        if not outcome.blocked:
            with self._lock:
                self._attempts.pop(attempt_id, None)
        return outcome

    def discard_attempt(self, attempt_id: str, user_id: str) -> None:
        self.get_attempt(attempt_id, user_id)
        with self._lock:
            self._attempts.pop(attempt_id, None)

    # --- Internals ---

    def _register_draft(self, owner_id: str, builder: QuizDraftBuilder) -> DraftSession:
        session = DraftSession(draft_id=uuid4().hex, owner_id=owner_id, builder=builder)
        with self._lock:
            self._drafts[session.draft_id] = session
        logger.debug("Draft session %s opened for %s", session.draft_id, owner_id)
        return session
