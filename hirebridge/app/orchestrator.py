"""
HireBridge - Interview Orchestrator.

Runs the interview state machine for every session and coordinates the
question selector, the answer scorer and the evaluation aggregator.

State Flow:
WELCOME -> AWAITING_ANSWER -> (answer scored, next question) -> AWAITING_ANSWER ...

"Finished" is not a stored state: `finish` evaluates whatever history exists
at the time of the call and can be called any number of times.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from hirebridge.app.evaluation import EvaluationAggregator
from hirebridge.app.scoring import AnswerScorer
from hirebridge.app.selector import QuestionSelector
from hirebridge.core.config import Settings, get_settings
from hirebridge.core.domain.models import (
    AskedQuestion,
    EvaluationReport,
    InterviewPhase,
    InterviewSession,
    QuestionTurn,
    Role,
)
from hirebridge.core.exceptions import InvalidSessionError
from hirebridge.core.prompts import WELCOME_MESSAGE
from hirebridge.infra.llm.gemini import TextOracle, create_oracle
from hirebridge.infra.persistence.session_store import SessionStore, create_session_store


logger = logging.getLogger(__name__)


class InterviewOrchestrator:
    """
    Session manager for the start -> advance -> finish lifecycle.

    Mutations of one session are serialized through the store's per-session
    lock; different sessions proceed concurrently.

    Usage:
        orchestrator = create_orchestrator()

        turn = await orchestrator.start("Software Developer")
        turn = await orchestrator.advance(turn.interview_id)               # first question
        turn = await orchestrator.advance(turn.interview_id, "My answer")  # scored, next question
        report = await orchestrator.finish(turn.interview_id)
    """

    def __init__(
        self,
        store: SessionStore | None = None,
        selector: QuestionSelector | None = None,
        scorer: AnswerScorer | None = None,
        aggregator: EvaluationAggregator | None = None,
        oracle: TextOracle | None = None,
        settings: Settings | None = None,
    ):
        self._settings = settings or get_settings()
        self._store = store or create_session_store(self._settings)
        self._selector = selector or QuestionSelector()
        self._scorer = scorer or AnswerScorer(oracle, self._settings)
        self._aggregator = aggregator or EvaluationAggregator(oracle, self._settings)
        self._oracle = oracle

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def oracle_enabled(self) -> bool:
        return self._oracle is not None

    @property
    def active_sessions(self) -> int:
        return len(self._store)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self, role: Role | str, interview_id: str | None = None) -> QuestionTurn:
        """
        Create a session, or resume the one `interview_id` points to.

        A new session opens with the welcome message; a resumed one returns
        its pending question unchanged.

        Raises:
            UnsupportedRoleError: role is not a supported interview track
        """
        resolved = Role.parse(role)

        if interview_id:
            async with self._store.lock(interview_id):
                session = await self._store.get(interview_id)
                if session is not None:
                    logger.info(f"Resuming interview {interview_id}")
                    return await self._resume(session)
            logger.info(f"Interview {interview_id} not found; starting a new one")

        session = InterviewSession(session_id=str(uuid.uuid4()), role=resolved)
        session.welcome_shown = True
        await self._store.create(session)

        logger.info(f"🎙️ Interview started: {session.session_id} ({resolved.value})")
        return self._welcome_turn(session)

    async def advance(
        self,
        interview_id: str,
        last_answer: str | None = None,
        role: Role | str | None = None,
        is_first_question: bool = False,
    ) -> QuestionTurn:
        """
        Record the answer to the pending question and move to the next one.

        Raises:
            InvalidSessionError: interview_id does not resolve to a session
            UnsupportedRoleError: role is given and is not supported
        """
        if not interview_id:
            raise InvalidSessionError(interview_id)

        requested_role = Role.parse(role) if role is not None else None

        async with self._store.lock(interview_id):
            session = await self._store.get(interview_id)
            if session is None:
                raise InvalidSessionError(interview_id)

            if requested_role is not None and requested_role != session.role:
                logger.warning(
                    f"Role {requested_role.value} ignored for {interview_id}; "
                    f"session role is {session.role.value}"
                )

            try:
                return await self._advance(session, last_answer, is_first_question)
            finally:
                await self._store.save(session)

    async def finish(self, interview_id: str | None) -> EvaluationReport:
        """Evaluate the session as it stands. Never raises."""
        session = None
        if interview_id:
            try:
                session = await self._store.get(interview_id)
            except Exception as e:
                logger.error(f"Session lookup failed for {interview_id}: {e}")

        report = await self._aggregator.evaluate(session)
        logger.info(
            f"🏁 Interview evaluated: {interview_id} "
            f"score={report.score} rating={report.rating} source={report.source.value}"
        )
        return report

    async def get_session_stats(self, interview_id: str) -> dict[str, Any]:
        """
        Get current session statistics.

        Raises:
            InvalidSessionError: interview_id does not resolve to a session
        """
        session = await self._store.get(interview_id)
        if session is None:
            raise InvalidSessionError(interview_id)

        scores = [q.score for q in session.answered]
        return {
            "interview_id": session.session_id,
            "role": session.role.value,
            "phase": session.phase.value,
            "questions_asked": len(session.history),
            "questions_answered": len(scores),
            "average_score": round(sum(scores) / len(scores), 1) if scores else 0.0,
            "duration_minutes": round(session.duration_minutes, 1),
            "asked_topics": list(session.asked_topics),
        }

    def evict_stale(self) -> int:
        """Drop sessions idle past the configured TTL."""
        return self._store.evict_expired()

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    async def _resume(self, session: InterviewSession) -> QuestionTurn:
        if session.phase is InterviewPhase.WELCOME:
            session.welcome_shown = True
            await self._store.save(session)
            return self._welcome_turn(session)
        return self._current_turn(session)

    async def _advance(
        self,
        session: InterviewSession,
        last_answer: str | None,
        is_first_question: bool,
    ) -> QuestionTurn:
        if session.phase is InterviewPhase.WELCOME:
            # Replies to the welcome prompt are not scored
            return self._issue_next(session, previous=None)

        current = session.current_question
        if current is None:
            logger.warning(f"Index {session.current_question_index} out of range; resetting")
            session.current_question_index = len(session.history) - 1
            current = session.history[-1]

        answer = (last_answer or "").strip()
        if not answer or is_first_question:
            return self._current_turn(session)

        if current.is_answered:
            return self._step_past_answered(session, current)

        score = await self._scorer.score(current, answer)
        current.record_answer(answer, score)
        logger.info(
            f"✅ Q{session.current_question_index + 1} answered for {session.session_id}: "
            f"score={score} ({current.difficulty.value}/{current.topic})"
        )

        return self._issue_next(session, previous=current)

    def _step_past_answered(
        self,
        session: InterviewSession,
        current: AskedQuestion,
    ) -> QuestionTurn:
        """Duplicate submission: move on without re-scoring."""
        logger.info(
            f"Duplicate answer for Q{session.current_question_index + 1} "
            f"in {session.session_id}; not re-scoring"
        )
        if session.current_question_index + 1 < len(session.history):
            session.current_question_index += 1
            return self._current_turn(session)
        return self._issue_next(session, previous=current)

    def _issue_next(
        self,
        session: InterviewSession,
        previous: AskedQuestion | None,
    ) -> QuestionTurn:
        question = self._selector.select_next(
            session.role,
            last_score=previous.score if previous else None,
            last_topic=previous.topic if previous else None,
            asked_topics=session.asked_topics,
            asked_questions=session.asked_questions,
        )

        session.append_question(question)
        if previous is not None:
            session.current_question_index += 1
        else:
            session.current_question_index = len(session.history) - 1
        session.welcome_shown = True

        logger.info(
            f"📝 Question {session.current_question_index + 1} for {session.session_id}: "
            f"{question.difficulty.value}/{question.topic}"
        )
        return self._current_turn(session)

    # -------------------------------------------------------------------------
    # Turns
    # -------------------------------------------------------------------------

    def _welcome_turn(self, session: InterviewSession) -> QuestionTurn:
        return QuestionTurn(
            interview_id=session.session_id,
            question=WELCOME_MESSAGE.format(role=session.role.value),
            question_number=0,
            is_welcome=True,
        )

    def _current_turn(self, session: InterviewSession) -> QuestionTurn:
        return QuestionTurn.for_question(
            session.session_id,
            session.current_question,
            question_number=session.current_question_index + 1,
        )


# -----------------------------------------------------------------------------
# Factory Function
# -----------------------------------------------------------------------------

def create_orchestrator(settings: Settings | None = None) -> InterviewOrchestrator:
    """Create a fully initialized orchestrator."""
    settings = settings or get_settings()
    oracle = create_oracle(settings)
    return InterviewOrchestrator(
        store=create_session_store(settings),
        selector=QuestionSelector(),
        scorer=AnswerScorer(oracle, settings),
        aggregator=EvaluationAggregator(oracle, settings),
        oracle=oracle,
        settings=settings,
    )
