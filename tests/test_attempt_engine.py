"""Tests for the quiz attempt state machine."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from conftest import make_quiz
from quizboard.core.attempt_engine import (
    AttemptState,
    InvalidAttemptStateError,
    QuizAttemptEngine,
    SubmitInProgressError,
)
from quizboard.core.models import UNANSWERED
from quizboard.core.services.gateway import AttemptFilter, GatewayError, QuizNotFoundError


async def _engine_for(gateway, correct_indices: list[int]) -> QuizAttemptEngine:
    quiz = make_quiz(correct_indices)
    quiz_id = await gateway.create_quiz(quiz.to_document())
    engine = QuizAttemptEngine(gateway, quiz_id, "user-1", "Ada")
    await engine.load()
    return engine


class TestLoading:
    @pytest.mark.asyncio
    async def test_load_initializes_unanswered_and_pointer(self, gateway):
        engine = await _engine_for(gateway, [0, 1, 2])

        assert engine.state is AttemptState.IN_PROGRESS
        assert engine.pointer == 0
        assert engine.answers == (UNANSWERED, UNANSWERED, UNANSWERED)

    @pytest.mark.asyncio
    async def test_missing_quiz_is_distinct_from_loading(self, gateway):
        engine = QuizAttemptEngine(gateway, "missing", "user-1")
        assert engine.state is AttemptState.LOADING

        with pytest.raises(QuizNotFoundError):
            await engine.load()

        assert engine.state is AttemptState.NOT_FOUND

    @pytest.mark.asyncio
    async def test_gateway_failure_keeps_loading(self, gateway):
        gateway.get_quiz = AsyncMock(side_effect=GatewayError("offline"))
        engine = QuizAttemptEngine(gateway, "any", "user-1")

        with pytest.raises(GatewayError):
            await engine.load()

        assert engine.state is AttemptState.LOADING

    def test_operations_require_in_progress(self, gateway):
        engine = QuizAttemptEngine(gateway, "any", "user-1")

        with pytest.raises(InvalidAttemptStateError):
            engine.select_option(0)
        with pytest.raises(InvalidAttemptStateError):
            engine.next()


class TestNavigation:
    @pytest.mark.asyncio
    async def test_next_and_previous_are_clamped(self, gateway):
        engine = await _engine_for(gateway, [0, 0])

        assert engine.previous() is False
        assert engine.pointer == 0
        assert engine.next() is True
        assert engine.next() is False
        assert engine.pointer == 1
        assert engine.previous() is True
        assert engine.pointer == 0

    @pytest.mark.asyncio
    async def test_select_records_answer_without_moving(self, gateway):
        engine = await _engine_for(gateway, [0, 0])

        engine.select_option(3)
        engine.select_option(1)

        assert engine.answers == (1, UNANSWERED)
        assert engine.pointer == 0
        assert engine.state is AttemptState.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_select_rejects_out_of_range(self, gateway):
        engine = await _engine_for(gateway, [0])

        with pytest.raises(ValueError):
            engine.select_option(4)
        with pytest.raises(ValueError):
            engine.select_option(-1)

        assert engine.answers == (UNANSWERED,)

    @pytest.mark.asyncio
    async def test_go_to_jumps(self, gateway):
        engine = await _engine_for(gateway, [0, 0, 0])

        engine.go_to(2)

        assert engine.pointer == 2
        with pytest.raises(IndexError):
            engine.go_to(3)


class TestSubmit:
    @pytest.mark.asyncio
    async def test_scenario_a_wrong_answer(self, gateway):
        engine = await _engine_for(gateway, [2])
        engine.select_option(1)

        outcome = await engine.submit()

        assert not outcome.blocked
        assert outcome.attempt.score == 0
        assert engine.percentage == 0
        assert engine.state is AttemptState.COMPLETED

    @pytest.mark.asyncio
    async def test_scenario_b_two_of_three(self, gateway):
        engine = await _engine_for(gateway, [0, 1, 2])
        engine.select_option(0)
        engine.next()
        engine.select_option(3)
        engine.next()
        engine.select_option(2)

        outcome = await engine.submit()

        assert outcome.attempt.score == 2
        assert outcome.attempt.total_questions == 3
        assert engine.percentage == 67
        assert [r.is_correct for r in outcome.attempt.answers] == [True, False, True]

    @pytest.mark.asyncio
    async def test_scenario_c_unanswered_blocks(self, gateway):
        engine = await _engine_for(gateway, [0, 1])
        engine.select_option(0)

        outcome = await engine.submit()

        assert outcome.blocked
        assert outcome.first_unanswered_index == 1
        assert engine.state is AttemptState.IN_PROGRESS
        assert gateway.attempt_count() == 0

    @pytest.mark.asyncio
    async def test_blocked_submit_returns_lowest_index(self, gateway):
        engine = await _engine_for(gateway, [0, 0, 0, 0])
        engine.go_to(2)
        engine.select_option(1)

        outcome = await engine.submit()

        assert outcome.first_unanswered_index == 0

    @pytest.mark.asyncio
    async def test_all_correct_scores_full(self, gateway):
        engine = await _engine_for(gateway, [3, 0, 2, 1])
        for position, correct in enumerate([3, 0, 2, 1]):
            engine.go_to(position)
            engine.select_option(correct)

        outcome = await engine.submit()

        assert outcome.attempt.score == outcome.attempt.total_questions == 4
        assert engine.percentage == 100

    @pytest.mark.asyncio
    async def test_submit_writes_attempt_document(self, gateway):
        engine = await _engine_for(gateway, [2])
        engine.select_option(2)

        outcome = await engine.submit()

        stored = await gateway.list_attempts_by(AttemptFilter(user_id="user-1"))
        assert [a.id for a in stored] == [outcome.attempt.id]
        assert outcome.attempt.id is not None
        assert outcome.attempt.user_display_name == "Ada"
        assert outcome.attempt.quiz_title == "Sample quiz"
        record = outcome.attempt.answers[0]
        assert record.selected_option_index == 2
        assert record.correct_option_index == 2
        assert record.selected_option_text == "Question 0 option 2"

    @pytest.mark.asyncio
    async def test_completed_is_terminal(self, gateway):
        engine = await _engine_for(gateway, [0])
        engine.select_option(0)
        await engine.submit()

        with pytest.raises(InvalidAttemptStateError):
            engine.select_option(1)
        with pytest.raises(InvalidAttemptStateError):
            await engine.submit()
        assert gateway.attempt_count() == 1

    @pytest.mark.asyncio
    async def test_failed_write_keeps_state_for_retry(self, gateway):
        engine = await _engine_for(gateway, [0])
        engine.select_option(0)
        original = gateway.record_attempt
        gateway.record_attempt = AsyncMock(side_effect=GatewayError("write failed"))

        with pytest.raises(GatewayError):
            await engine.submit()

        assert engine.state is AttemptState.IN_PROGRESS
        assert engine.result is None
        assert engine.answers == (0,)
        assert not engine.is_submitting

        gateway.record_attempt = original
        outcome = await engine.submit()
        assert outcome.attempt.score == 1

    @pytest.mark.asyncio
    async def test_duplicate_submit_while_in_flight_is_rejected(self, gateway):
        engine = await _engine_for(gateway, [0])
        engine.select_option(0)
        release = asyncio.Event()
        original = gateway.record_attempt

        async def slow_record(document):
            await release.wait()
            return await original(document)

        gateway.record_attempt = slow_record
        first = asyncio.create_task(engine.submit())
        await asyncio.sleep(0)

        assert engine.is_submitting
        with pytest.raises(SubmitInProgressError):
            await engine.submit()
        with pytest.raises(SubmitInProgressError):
            engine.select_option(0)

        release.set()
        outcome = await first
        assert outcome.attempt is not None
        assert gateway.attempt_count() == 1

    @pytest.mark.asyncio
    async def test_result_is_a_snapshot(self, gateway):
        engine = await _engine_for(gateway, [1])
        engine.select_option(1)
        outcome = await engine.submit()

        await gateway.delete_quiz(engine.quiz_id)

        assert engine.result is outcome.attempt
        assert engine.result.score == 1
