"""
Unit tests for the InterviewOrchestrator state machine.

Covers start/resume, the welcome phase, scoring and progression, retries,
duplicate submissions and per-session serialization.
"""

import asyncio

import pytest

from hirebridge.app.evaluation import EvaluationAggregator
from hirebridge.app.orchestrator import InterviewOrchestrator
from hirebridge.app.scoring import AnswerScorer
from hirebridge.app.selector import QuestionSelector
from hirebridge.core.domain.models import Difficulty, InterviewPhase, ReportStatus, Role
from hirebridge.core.exceptions import InvalidSessionError, UnsupportedRoleError
from hirebridge.core.question_bank import QUESTION_BANK
from hirebridge.infra.persistence.session_store import InMemorySessionStore


class CountingOracle:
    """Returns a fixed score after a short delay and counts calls."""

    def __init__(self, score: str = "6", delay: float = 0.01):
        self.score = score
        self.delay = delay
        self.calls = 0

    async def complete(self, prompt: str) -> str:
        self.calls += 1
        await asyncio.sleep(self.delay)
        return self.score


def build_orchestrator(settings, rng, scoring_oracle=None, evaluation_oracle=None):
    return InterviewOrchestrator(
        store=InMemorySessionStore(),
        selector=QuestionSelector(rng=rng),
        scorer=AnswerScorer(scoring_oracle, settings),
        aggregator=EvaluationAggregator(evaluation_oracle, settings),
        settings=settings,
    )


@pytest.fixture
def orchestrator(settings, rng):
    return build_orchestrator(settings, rng, scoring_oracle=CountingOracle())


async def _first_question(orchestrator, role="Software Developer"):
    welcome = await orchestrator.start(role)
    return await orchestrator.advance(welcome.interview_id, is_first_question=True)


class TestStart:
    """Session creation and resumption."""

    @pytest.mark.asyncio
    async def test_new_session_opens_with_welcome(self, orchestrator):
        turn = await orchestrator.start("Data Analyst")

        assert turn.is_welcome
        assert turn.question_number == 0
        assert "Data Analyst" in turn.question
        assert turn.interview_id

        session = await orchestrator.store.get(turn.interview_id)
        assert session.phase == InterviewPhase.WELCOME
        assert session.welcome_shown
        assert session.history == []
        assert session.current_question_index == 0

    @pytest.mark.asyncio
    async def test_unsupported_role_raises(self, orchestrator):
        with pytest.raises(UnsupportedRoleError):
            await orchestrator.start("Astronaut")

        assert orchestrator.active_sessions == 0

    @pytest.mark.asyncio
    async def test_start_twice_before_answer_returns_same_welcome(self, orchestrator):
        first = await orchestrator.start("HR / Management")
        second = await orchestrator.start("HR / Management", first.interview_id)

        assert second == first
        assert orchestrator.active_sessions == 1

    @pytest.mark.asyncio
    async def test_start_twice_returns_same_pending_question(self, orchestrator):
        question = await _first_question(orchestrator)

        resumed = await orchestrator.start("Software Developer", question.interview_id)

        assert resumed == question
        assert resumed.question_number == 1

    @pytest.mark.asyncio
    async def test_unknown_interview_id_creates_new_session(self, orchestrator):
        turn = await orchestrator.start("Software Developer", "does-not-exist")

        assert turn.is_welcome
        assert turn.interview_id != "does-not-exist"


class TestAdvance:
    """Question progression."""

    @pytest.mark.asyncio
    async def test_first_question_is_easy_and_unscored(self, settings, rng):
        oracle = CountingOracle()
        orchestrator = build_orchestrator(settings, rng, scoring_oracle=oracle)
        welcome = await orchestrator.start("Software Developer")

        turn = await orchestrator.advance(welcome.interview_id, "I'm ready")

        assert not turn.is_welcome
        assert turn.question_number == 1
        assert turn.difficulty == Difficulty.EASY
        assert oracle.calls == 0

    @pytest.mark.asyncio
    async def test_answer_is_scored_and_next_question_issued(self, orchestrator):
        first = await _first_question(orchestrator)

        second = await orchestrator.advance(first.interview_id, "A function is callable; a class builds objects.")

        assert second.question_number == 2
        assert second.question != first.question
        assert second.difficulty == Difficulty.MEDIUM  # score 6

        session = await orchestrator.store.get(first.interview_id)
        answered = session.history[0]
        assert answered.score == 6
        assert answered.answer.startswith("A function")
        assert answered.answered_at is not None
        assert session.current_question_index == 1
        assert session.history[1].topic in session.asked_topics
        assert session.asked_questions == [first.question, second.question]

    @pytest.mark.asyncio
    async def test_scenario_adaptive_difficulty(self, settings, rng, scripted_oracle):
        """Scores 3, 6, 9 walk the difficulty easy -> easy -> medium -> hard."""
        orchestrator = build_orchestrator(
            settings, rng, scoring_oracle=scripted_oracle("3", "6", "9"),
        )

        turn = await _first_question(orchestrator)
        difficulties = [turn.difficulty]
        for answer in ("weak answer", "decent answer", "great answer"):
            turn = await orchestrator.advance(turn.interview_id, answer, role="Software Developer")
            difficulties.append(turn.difficulty)

        assert difficulties == [
            Difficulty.EASY, Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD,
        ]
        assert turn.question_number == 4

        report = await orchestrator.finish(turn.interview_id)

        assert report.answered_questions == 3
        assert report.total_questions == 4
        assert report.avg_score == 6
        assert report.score == 60
        assert report.rating == "Good"

    @pytest.mark.asyncio
    async def test_questions_do_not_repeat(self, orchestrator):
        turn = await _first_question(orchestrator)
        for i in range(4):
            turn = await orchestrator.advance(turn.interview_id, f"answer {i}")

        session = await orchestrator.store.get(turn.interview_id)
        texts = [q.question for q in session.history]
        assert len(texts) == len(set(texts))
        assert len(session.asked_questions) == len(texts)

    @pytest.mark.asyncio
    async def test_empty_answer_is_idempotent(self, settings, rng):
        oracle = CountingOracle()
        orchestrator = build_orchestrator(settings, rng, scoring_oracle=oracle)
        first = await _first_question(orchestrator)
        session = await orchestrator.store.get(first.interview_id)
        topics_before = list(session.asked_topics)

        for empty in (None, "", "   "):
            again = await orchestrator.advance(first.interview_id, empty)
            assert again == first

        assert len(session.history) == 1
        assert session.asked_topics == topics_before
        assert session.asked_questions == [first.question]
        assert not session.history[0].is_answered
        assert oracle.calls == 0

    @pytest.mark.asyncio
    async def test_first_question_retry_is_idempotent(self, orchestrator):
        first = await _first_question(orchestrator)

        again = await orchestrator.advance(first.interview_id, "I'm ready", is_first_question=True)

        assert again == first

    @pytest.mark.asyncio
    async def test_unknown_session_raises(self, orchestrator):
        with pytest.raises(InvalidSessionError):
            await orchestrator.advance("missing", "answer")

    @pytest.mark.asyncio
    async def test_empty_session_id_raises(self, orchestrator):
        with pytest.raises(InvalidSessionError):
            await orchestrator.advance("", "answer")

    @pytest.mark.asyncio
    async def test_unsupported_role_on_advance_raises(self, orchestrator):
        first = await _first_question(orchestrator)

        with pytest.raises(UnsupportedRoleError):
            await orchestrator.advance(first.interview_id, "answer", role="Chef")

    @pytest.mark.asyncio
    async def test_session_role_wins_over_request_role(self, orchestrator):
        first = await _first_question(orchestrator, role="HR / Management")

        turn = await orchestrator.advance(first.interview_id, "answer", role="Data Analyst")

        session = await orchestrator.store.get(first.interview_id)
        assert session.role == Role.HR_MANAGEMENT
        assert turn.question in {q.text for q in QUESTION_BANK[Role.HR_MANAGEMENT]}

    @pytest.mark.asyncio
    async def test_scoring_failure_uses_default_and_continues(self, settings, rng, failing_oracle):
        orchestrator = build_orchestrator(settings, rng, scoring_oracle=failing_oracle)
        first = await _first_question(orchestrator)

        second = await orchestrator.advance(first.interview_id, "answer")

        session = await orchestrator.store.get(first.interview_id)
        assert session.history[0].score == 5
        assert second.question_number == 2
        assert second.difficulty == Difficulty.MEDIUM


class TestDuplicateSubmission:
    """An answered current question is never re-scored."""

    @pytest.mark.asyncio
    async def test_moves_to_existing_next_entry(self, settings, rng):
        oracle = CountingOracle(score="8")
        orchestrator = build_orchestrator(settings, rng, scoring_oracle=oracle)
        first = await _first_question(orchestrator)
        second = await orchestrator.advance(first.interview_id, "original answer")

        session = await orchestrator.store.get(first.interview_id)
        recorded = session.history[0].state
        session.current_question_index = 0  # index left behind, as after an interrupted request

        turn = await orchestrator.advance(first.interview_id, "duplicate answer")

        assert turn == second
        assert session.current_question_index == 1
        assert session.history[0].state is recorded
        assert session.history[0].answer == "original answer"
        assert len(session.history) == 2
        assert oracle.calls == 1

    @pytest.mark.asyncio
    async def test_issues_next_from_recorded_score(self, settings, rng):
        oracle = CountingOracle(score="9")
        orchestrator = build_orchestrator(settings, rng, scoring_oracle=oracle)
        first = await _first_question(orchestrator)

        session = await orchestrator.store.get(first.interview_id)
        session.history[0].record_answer("answered elsewhere", 9)

        turn = await orchestrator.advance(first.interview_id, "answered elsewhere")

        assert turn.question_number == 2
        assert turn.difficulty == Difficulty.HARD
        assert session.history[0].answer == "answered elsewhere"
        assert oracle.calls == 0


class TestConcurrency:
    """Per-session serialization."""

    @pytest.mark.asyncio
    async def test_concurrent_advances_on_same_session_are_serialized(self, settings, rng):
        oracle = CountingOracle(delay=0.05)
        orchestrator = build_orchestrator(settings, rng, scoring_oracle=oracle)
        first = await _first_question(orchestrator)

        turns = await asyncio.gather(
            orchestrator.advance(first.interview_id, "answer one"),
            orchestrator.advance(first.interview_id, "answer two"),
        )

        session = await orchestrator.store.get(first.interview_id)
        assert len(session.history) == 3
        assert [q.answer for q in session.history[:2]] == ["answer one", "answer two"]
        assert sorted(t.question_number for t in turns) == [2, 3]
        assert oracle.calls == 2

    @pytest.mark.asyncio
    async def test_distinct_sessions_run_concurrently(self, settings, rng):
        oracle = CountingOracle(delay=0.2)
        orchestrator = build_orchestrator(settings, rng, scoring_oracle=oracle)
        a = await _first_question(orchestrator)
        b = await _first_question(orchestrator, role="Data Analyst")

        loop = asyncio.get_running_loop()
        started = loop.time()
        await asyncio.gather(
            orchestrator.advance(a.interview_id, "answer"),
            orchestrator.advance(b.interview_id, "answer"),
        )

        assert loop.time() - started < 0.35


class TestFinish:
    """Evaluation requests."""

    @pytest.mark.asyncio
    async def test_unknown_session_returns_generic_report(self, orchestrator):
        report = await orchestrator.finish("missing")

        assert report.score == 0
        assert report.status == ReportStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_finish_before_any_question(self, orchestrator):
        welcome = await orchestrator.start("Data Analyst")

        report = await orchestrator.finish(welcome.interview_id)

        assert report.status == ReportStatus.INCOMPLETE
        assert report.total_questions == 0

    @pytest.mark.asyncio
    async def test_finish_is_repeatable_and_does_not_end_session(self, orchestrator):
        first = await _first_question(orchestrator)
        await orchestrator.advance(first.interview_id, "answer")

        one = await orchestrator.finish(first.interview_id)
        two = await orchestrator.finish(first.interview_id)
        third = await orchestrator.advance(first.interview_id, "another answer")

        assert one.score == two.score == 60
        assert third.question_number == 3

    @pytest.mark.asyncio
    async def test_session_stats(self, orchestrator):
        first = await _first_question(orchestrator)
        await orchestrator.advance(first.interview_id, "answer")

        stats = await orchestrator.get_session_stats(first.interview_id)

        assert stats["questions_asked"] == 2
        assert stats["questions_answered"] == 1
        assert stats["average_score"] == 6.0
        assert stats["phase"] == "awaiting_answer"

    @pytest.mark.asyncio
    async def test_session_stats_unknown_session(self, orchestrator):
        with pytest.raises(InvalidSessionError):
            await orchestrator.get_session_stats("missing")
