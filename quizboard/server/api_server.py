"""FastAPI adapter that exposes drafts, attempts, catalog and leaderboard."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel
import uvicorn

from quizboard.constants.about import APP_ABOUT_TEXT, APP_NAME, APP_VERSION, IMPORT_FORMAT_HELP
from quizboard.constants.network_constants import (
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    USER_ID_HEADER,
    USER_NAME_HEADER,
)
from quizboard.constants.quiz_constants import ANONYMOUS_DISPLAY_NAME
from quizboard.core.attempt_engine import (
    AttemptState,
    InvalidAttemptStateError,
    QuizAttemptEngine,
    SubmitInProgressError,
)
from quizboard.core.draft_builder import (
    CannotRemoveLastQuestionError,
    Direction,
    DraftAlreadyPublishedError,
    DraftValidationError,
    PublishInProgressError,
    QuizDraftBuilder,
    UnknownOptionError,
    UnknownQuestionError,
)
from quizboard.core.markdown_math_renderer import renderer
from quizboard.core.models import UNANSWERED, Attempt, Quiz, QuizSummary
from quizboard.core.quiz_exporter import serialize_draft
from quizboard.core.quiz_importer import QuizImportError
from quizboard.core.quiz_manager import QuizManager, SessionOwnerError, UnknownSessionError
from quizboard.core.scoring import percentage
from quizboard.core.services.gateway import GatewayError, QuizNotFoundError
from quizboard.core.services.leaderboard import LeaderboardRow
from quizboard.core.services.quiz_catalog import NotQuizOwnerError

logger = logging.getLogger(__name__)

_ERROR_STATUS: dict[type[Exception], int] = {
    UnknownSessionError: 404,
    UnknownQuestionError: 404,
    UnknownOptionError: 404,
    QuizNotFoundError: 404,
    SessionOwnerError: 403,
    NotQuizOwnerError: 403,
    CannotRemoveLastQuestionError: 409,
    PublishInProgressError: 409,
    DraftAlreadyPublishedError: 409,
    SubmitInProgressError: 409,
    InvalidAttemptStateError: 409,
    QuizImportError: 422,
    ValueError: 422,
    IndexError: 422,
    GatewayError: 502,
}


@dataclass(slots=True)
class CurrentUser:
    user_id: str
    display_name: str


class DraftFieldsPayload(BaseModel):
    """Payload schema for title/description/visibility edits."""

    title: str | None = None
    description: str | None = None
    is_public: bool | None = None


class TextPayload(BaseModel):
    text: str


class ImportPayload(BaseModel):
    """Plain-text quiz in the import format."""

    text: str


class MovePayload(BaseModel):
    direction: Direction


class CorrectOptionPayload(BaseModel):
    option_id: str


class AnswerPayload(BaseModel):
    """Payload schema for selected answers."""

    selected_option_index: int


class GoToPayload(BaseModel):
    index: int


def _get_quiz_manager_dependency(quiz_manager: QuizManager):
    def dependency() -> QuizManager:
        return quiz_manager

    return dependency


def _optional_user(
    x_user_id: str | None = Header(default=None, alias=USER_ID_HEADER),
    x_user_name: str | None = Header(default=None, alias=USER_NAME_HEADER),
) -> CurrentUser | None:
    if not x_user_id or not x_user_id.strip():
        return None
    display_name = (x_user_name or "").strip() or ANONYMOUS_DISPLAY_NAME
    return CurrentUser(user_id=x_user_id.strip(), display_name=display_name)


def _current_user(user: CurrentUser | None = Depends(_optional_user)) -> CurrentUser:
    """Identity comes from the authentication layer in front of this service."""
    if user is None:
        raise HTTPException(status_code=401, detail="Sign in to continue.")
    return user


# --- Serializers ---


def _draft_payload(draft_id: str, builder: QuizDraftBuilder) -> dict[str, object]:
    draft = builder.snapshot()
    return {
        "draft_id": draft_id,
        "title": draft.title,
        "description": draft.description,
        "is_public": draft.is_public,
        "is_publishing": builder.is_publishing,
        "questions": [
            {
                "id": question.id,
                "position": position,
                "text": question.text,
                "options": [
                    {"id": option.id, "text": option.text, "is_correct": option.is_correct}
                    for option in question.options
                ],
            }
            for position, question in enumerate(draft.questions)
        ],
    }


def _quiz_payload(quiz: Quiz, include_answers: bool) -> dict[str, object]:
    questions = []
    for question in quiz.questions:
        options = []
        for option in question.options:
            entry: dict[str, object] = {"text": option.text}
            if include_answers:
                entry["is_correct"] = option.is_correct
            options.append(entry)
        questions.append({"text": question.text, "options": options})
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "created_by": quiz.created_by,
        "created_at": quiz.created_at.isoformat(),
        "is_public": quiz.is_public,
        "question_count": quiz.question_count,
        "questions": questions,
    }


def _summary_payload(summary: QuizSummary) -> dict[str, object]:
    return {
        "id": summary.id,
        "title": summary.title,
        "description": summary.description,
        "created_by": summary.created_by,
        "created_at": summary.created_at.isoformat(),
        "question_count": summary.question_count,
        "is_public": summary.is_public,
    }


def _result_payload(attempt: Attempt) -> dict[str, object]:
    return {
        "id": attempt.id,
        "quiz_id": attempt.quiz_id,
        "quiz_title": attempt.quiz_title,
        "user_id": attempt.user_id,
        "user_display_name": attempt.user_display_name,
        "score": attempt.score,
        "total_questions": attempt.total_questions,
        "percentage": percentage(attempt.score, attempt.total_questions),
        "completed_at": attempt.completed_at.isoformat(),
        "answers": [
            {
                "question_text": record.question_text,
                "selected_option_index": (
                    None if record.selected_option_index is UNANSWERED else record.selected_option_index
                ),
                "selected_option_text": record.selected_option_text,
                "correct_option_index": record.correct_option_index,
                "is_correct": record.is_correct,
            }
            for record in attempt.answers
        ],
    }


def _attempt_payload(attempt_id: str, engine: QuizAttemptEngine) -> dict[str, object]:
    payload: dict[str, object] = {
        "attempt_id": attempt_id,
        "quiz_id": engine.quiz_id,
        "state": engine.state.value,
        "is_submitting": engine.is_submitting,
    }
    if engine.quiz is None:
        return payload
    question = engine.current_question()
    current_answer = engine.current_answer()
    payload.update(
        {
            "quiz_title": engine.quiz.title,
            "pointer": engine.pointer,
            "question_count": engine.question_count,
            "answered_count": engine.answered_count,
            "answers": [None if a is UNANSWERED else a for a in engine.answers],
            "question": {
                "index": engine.pointer,
                "text": question.text,
                "options": [option.text for option in question.options],
                "selected_option_index": None if current_answer is UNANSWERED else current_answer,
                **renderer.render_question(question),
            },
        }
    )
    if engine.state is AttemptState.COMPLETED and engine.result is not None:
        payload["result"] = _result_payload(engine.result)
    return payload


def _row_payload(row: LeaderboardRow) -> dict[str, object]:
    return {
        "attempt_id": row.attempt_id,
        "user_id": row.user_id,
        "display_name": row.display_name,
        "quiz_id": row.quiz_id,
        "quiz_title": row.quiz_title,
        "score": row.score,
        "total_questions": row.total_questions,
        "percentage": row.percentage,
        "completed_at": row.completed_at.isoformat(),
    }


def _register_error_handlers(app: FastAPI) -> None:
    async def handle_domain_error(request: Request, exc: Exception) -> JSONResponse:
        status_code = next(
            (code for error_type, code in _ERROR_STATUS.items() if isinstance(exc, error_type)),
            500,
        )
        if status_code >= 500:
            logger.error("Request %s %s failed: %s", request.method, request.url.path, exc)
            detail = "The quiz store is unavailable. Please try again."
        else:
            detail = str(exc)
        return JSONResponse(status_code=status_code, content={"detail": detail})

    async def handle_validation_error(request: Request, exc: DraftValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.failure.to_dict()})

    app.add_exception_handler(DraftValidationError, handle_validation_error)
    for error_type in _ERROR_STATUS:
        app.add_exception_handler(error_type, handle_domain_error)


def create_api_app(quiz_manager: QuizManager) -> FastAPI:
    """Create a FastAPI application wired to the provided quiz manager."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION)
    quiz_manager_dep = _get_quiz_manager_dependency(quiz_manager)
    _register_error_handlers(app)

    @app.get("/")
    async def about() -> dict[str, object]:
        return {
            "name": APP_NAME,
            "version": APP_VERSION,
            "about": APP_ABOUT_TEXT,
            "import_format": IMPORT_FORMAT_HELP,
        }

    # --- Drafts ---

    @app.post("/drafts", status_code=201)
    async def create_draft(
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        session = manager.create_draft(user.user_id)
        return _draft_payload(session.draft_id, session.builder)

    @app.post("/drafts/import", status_code=201)
    async def import_draft(
        payload: ImportPayload,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        session = manager.import_draft(user.user_id, payload.text)
        return _draft_payload(session.draft_id, session.builder)

    @app.get("/drafts/{draft_id}")
    async def get_draft(
        draft_id: str,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        return _draft_payload(draft_id, manager.get_draft(draft_id, user.user_id))

    @app.patch("/drafts/{draft_id}")
    async def update_draft(
        draft_id: str,
        payload: DraftFieldsPayload,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        builder = manager.get_draft(draft_id, user.user_id)
        if payload.title is not None:
            builder.set_title(payload.title)
        if payload.description is not None:
            builder.set_description(payload.description)
        if payload.is_public is not None:
            builder.set_public(payload.is_public)
        return _draft_payload(draft_id, builder)

    @app.delete("/drafts/{draft_id}", status_code=204)
    async def discard_draft(
        draft_id: str,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> Response:
        manager.discard_draft(draft_id, user.user_id)
        return Response(status_code=204)

    @app.post("/drafts/{draft_id}/questions", status_code=201)
    async def add_question(
        draft_id: str,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        builder = manager.get_draft(draft_id, user.user_id)
        question_id = builder.add_question()
        return {"question_id": question_id, **_draft_payload(draft_id, builder)}

    @app.delete("/drafts/{draft_id}/questions/{question_id}")
    async def remove_question(
        draft_id: str,
        question_id: str,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        builder = manager.get_draft(draft_id, user.user_id)
        builder.remove_question(question_id)
        return _draft_payload(draft_id, builder)

    @app.post("/drafts/{draft_id}/questions/{question_id}/move")
    async def move_question(
        draft_id: str,
        question_id: str,
        payload: MovePayload,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        builder = manager.get_draft(draft_id, user.user_id)
        moved = builder.move_question(question_id, payload.direction)
        return {"moved": moved, **_draft_payload(draft_id, builder)}

    @app.put("/drafts/{draft_id}/questions/{question_id}/text")
    async def update_question_text(
        draft_id: str,
        question_id: str,
        payload: TextPayload,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        builder = manager.get_draft(draft_id, user.user_id)
        builder.update_question_text(question_id, payload.text)
        return _draft_payload(draft_id, builder)

    @app.put("/drafts/{draft_id}/questions/{question_id}/options/{option_id}/text")
    async def update_option_text(
        draft_id: str,
        question_id: str,
        option_id: str,
        payload: TextPayload,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        builder = manager.get_draft(draft_id, user.user_id)
        builder.update_option_text(question_id, option_id, payload.text)
        return _draft_payload(draft_id, builder)

    @app.put("/drafts/{draft_id}/questions/{question_id}/correct")
    async def set_correct_option(
        draft_id: str,
        question_id: str,
        payload: CorrectOptionPayload,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        builder = manager.get_draft(draft_id, user.user_id)
        builder.set_correct_option(question_id, payload.option_id)
        return _draft_payload(draft_id, builder)

    @app.get("/drafts/{draft_id}/validation")
    async def validate_draft(
        draft_id: str,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        result = manager.get_draft(draft_id, user.user_id).validate()
        return {
            "passed": result.passed,
            "failure": result.failure.to_dict() if result.failure is not None else None,
        }

    @app.get("/drafts/{draft_id}/export", response_class=PlainTextResponse)
    async def export_draft(
        draft_id: str,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> str:
        return serialize_draft(manager.get_draft(draft_id, user.user_id).snapshot())

    @app.post("/drafts/{draft_id}/publish", status_code=201)
    async def publish_draft(
        draft_id: str,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        quiz = await manager.publish_draft(draft_id, user.user_id)
        return _quiz_payload(quiz, include_answers=True)

    # --- Published quizzes ---

    @app.get("/quizzes")
    async def explore_quizzes(
        search: str = "",
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> list[dict[str, object]]:
        summaries = await manager.catalog.explore(search)
        return [_summary_payload(summary) for summary in summaries]

    @app.get("/quizzes/{quiz_id}")
    async def get_quiz(
        quiz_id: str,
        user: CurrentUser | None = Depends(_optional_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        quiz = await manager.catalog.get_quiz(quiz_id)
        is_author = user is not None and user.user_id == quiz.created_by
        return _quiz_payload(quiz, include_answers=is_author)

    @app.post("/quizzes/{quiz_id}/edit", status_code=201)
    async def edit_quiz(
        quiz_id: str,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        session = await manager.edit_quiz(quiz_id, user.user_id)
        return _draft_payload(session.draft_id, session.builder)

    @app.delete("/quizzes/{quiz_id}", status_code=204)
    async def delete_quiz(
        quiz_id: str,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> Response:
        await manager.catalog.delete_quiz(quiz_id, user.user_id)
        return Response(status_code=204)

    # --- Attempts ---

    @app.post("/quizzes/{quiz_id}/attempts", status_code=201)
    async def start_attempt(
        quiz_id: str,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        session = await manager.start_attempt(quiz_id, user.user_id, user.display_name)
        return _attempt_payload(session.attempt_id, session.engine)

    @app.get("/attempts/{attempt_id}")
    async def get_attempt(
        attempt_id: str,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        return _attempt_payload(attempt_id, manager.get_attempt(attempt_id, user.user_id))

    @app.post("/attempts/{attempt_id}/answer")
    async def select_option(
        attempt_id: str,
        payload: AnswerPayload,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        engine = manager.get_attempt(attempt_id, user.user_id)
        engine.select_option(payload.selected_option_index)
        return _attempt_payload(attempt_id, engine)

    @app.post("/attempts/{attempt_id}/next")
    async def next_question(
        attempt_id: str,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        engine = manager.get_attempt(attempt_id, user.user_id)
        engine.next()
        return _attempt_payload(attempt_id, engine)

    @app.post("/attempts/{attempt_id}/previous")
    async def previous_question(
        attempt_id: str,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        engine = manager.get_attempt(attempt_id, user.user_id)
        engine.previous()
        return _attempt_payload(attempt_id, engine)

    @app.post("/attempts/{attempt_id}/go-to")
    async def go_to_question(
        attempt_id: str,
        payload: GoToPayload,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        engine = manager.get_attempt(attempt_id, user.user_id)
        engine.go_to(payload.index)
        return _attempt_payload(attempt_id, engine)

    @app.post("/attempts/{attempt_id}/submit", status_code=201)
    async def submit_attempt(
        attempt_id: str,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        engine = manager.get_attempt(attempt_id, user.user_id)
        outcome = await manager.submit_attempt(attempt_id, user.user_id)
        if outcome.blocked:
            index = outcome.first_unanswered_index
            engine.go_to(index)
            raise HTTPException(
                status_code=422,
                detail={
                    "message": f"Please answer question {index + 1} before submitting.",
                    "first_unanswered_index": index,
                },
            )
        return _attempt_payload(attempt_id, engine)

    @app.delete("/attempts/{attempt_id}", status_code=204)
    async def discard_attempt(
        attempt_id: str,
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> Response:
        manager.discard_attempt(attempt_id, user.user_id)
        return Response(status_code=204)

    # --- Dashboard and leaderboard ---

    @app.get("/me/quizzes")
    async def my_quizzes(
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> list[dict[str, object]]:
        summaries = await manager.catalog.quizzes_created_by(user.user_id)
        return [_summary_payload(summary) for summary in summaries]

    @app.get("/me/attempts")
    async def my_attempts(
        user: CurrentUser = Depends(_current_user),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> list[dict[str, object]]:
        attempts = await manager.catalog.attempts_by(user.user_id)
        return [_result_payload(attempt) for attempt in attempts]

    @app.get("/leaderboard")
    async def leaderboard(
        limit: int | None = None,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        top = await manager.leaderboard.get_top_scorers(limit)
        recent = await manager.leaderboard.get_recent(limit)
        return {
            "top": [_row_payload(row) for row in top],
            "recent": [_row_payload(row) for row in recent],
        }

    return app


def run_api_server(
    quiz_manager: QuizManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    log_level: str = DEFAULT_LOG_LEVEL,
) -> None:
    """Serve the API in the foreground until interrupted."""
    app = create_api_app(quiz_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level=log_level.lower())
    server = uvicorn.Server(config)
    server.run()
