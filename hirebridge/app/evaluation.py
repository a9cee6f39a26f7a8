"""
HireBridge - Evaluation Aggregator.

Reduces a session's history into the final report. The numeric part is always
computed locally; the oracle may only rewrite the narrative. No path through
`evaluate` raises.

Fallback ladder:
1. No session                      -> generic "completed" report, score 0
2. Empty or malformed history      -> "incomplete" report, score 0
3. Questions asked, none answered  -> "incomplete" report with counts
4. Answers present                 -> local numeric report + narrative
5. Oracle available                -> narrative replaced when it parses
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from statistics import mean
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hirebridge.core.config import Settings, get_settings
from hirebridge.core.domain.models import (
    Answered,
    AskedQuestion,
    Difficulty,
    EvaluationReport,
    InterviewSession,
    Pending,
    QuestionType,
    ReportSource,
    ReportStatus,
)
from hirebridge.core.prompts import EVALUATION_PROMPT, TRANSCRIPT_LINE
from hirebridge.infra.llm.gemini import TextOracle


logger = logging.getLogger(__name__)


# (minimum normalized score, rating), checked top-down
RATING_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (80, "Excellent"),
    (70, "Very Good"),
    (60, "Good"),
    (50, "Average"),
)
LOWEST_RATING = "Below Average"
RATING_LABELS = tuple(label for _, label in RATING_THRESHOLDS) + (LOWEST_RATING,)

RECOMMENDATIONS = {
    "Excellent": "You are interview-ready. Practice system-level questions to stay sharp.",
    "Very Good": "Strong performance. Polish the weaker topics below and aim for consistently complete answers.",
    "Good": "Good foundation. Work through the improvement areas and practice explaining trade-offs out loud.",
    "Average": "Review the core concepts for this role and practice structured answers before your next interview.",
    "Below Average": "Rebuild the fundamentals for this role, then retake a mock interview at the easy tier.",
}

HANDS_ON_TYPES = (QuestionType.CODING, QuestionType.DEBUGGING)

STRONG_SCORE = 7
WEAK_SCORE = 4
MAX_NARRATIVE_ITEMS = 4


def rating_for(score: int) -> str:
    """Map a 0-100 score to its rating label."""
    for threshold, label in RATING_THRESHOLDS:
        if score >= threshold:
            return label
    return LOWEST_RATING


def normalize_score(avg_score: float) -> int:
    """Convert a 1-10 average into a 0-100 score, halves rounded up."""
    scaled = Decimal(str(avg_score)) * 10
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class OracleEvaluation(BaseModel):
    """Shape the oracle must return for its narrative to be used."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    score: int = Field(ge=0, le=100)
    rating: Literal[RATING_LABELS]
    strengths: list[str] = Field(min_length=1)
    improvements: list[str] = Field(default_factory=list)
    recommendation: str = Field(min_length=1)
    technical_score: float | None = Field(default=None, ge=0, le=10, alias="technicalScore")
    communication_score: float | None = Field(default=None, ge=0, le=10, alias="communicationScore")
    problem_solving_score: float | None = Field(default=None, ge=0, le=10, alias="problemSolvingScore")


def parse_oracle_evaluation(response: str) -> OracleEvaluation:
    """Pull the JSON object out of an oracle response and validate it."""
    json_match = re.search(r"\{.*\}", response or "", re.DOTALL)
    if not json_match:
        raise ValueError("No JSON found in response")

    return OracleEvaluation.model_validate(json.loads(json_match.group()))


class EvaluationAggregator:
    """
    Builds the final EvaluationReport from a session's history.

    Reports are recomputed on every call; nothing is cached.
    """

    def __init__(
        self,
        oracle: TextOracle | None = None,
        settings: Settings | None = None,
    ):
        self._oracle = oracle
        self._settings = settings or get_settings()

    async def evaluate(self, session: InterviewSession | None) -> EvaluationReport:
        """Produce a well-formed report for any input."""
        if session is None:
            logger.info("Evaluation requested for unknown session")
            return self._generic_report()

        try:
            return await self._evaluate_session(session)
        except Exception as e:
            logger.error(f"Evaluation failed for {session.session_id}: {e}", exc_info=True)
            return self._generic_report(session)

    # -------------------------------------------------------------------------
    # Ladder
    # -------------------------------------------------------------------------

    async def _evaluate_session(self, session: InterviewSession) -> EvaluationReport:
        history = session.history
        if not self._is_well_formed(history):
            return self._incomplete_report(session, total=0, message=(
                "The interview ended before any question was asked."
            ))

        answered = [q for q in history if q.is_answered]
        if not answered:
            return self._incomplete_report(session, total=len(history), message=(
                "No answers were recorded. Answer at least one question to receive a score."
            ))

        report = self._local_report(session, answered)

        if self._oracle is not None:
            await self._apply_oracle_narrative(session, report)

        return report

    def _local_report(
        self,
        session: InterviewSession,
        answered: list[AskedQuestion],
    ) -> EvaluationReport:
        scores = [q.score for q in answered]
        avg_score = mean(scores)
        score = normalize_score(avg_score)
        rating = rating_for(score)

        strengths, improvements = self._narrative(session.history, answered)

        return EvaluationReport(
            score=score,
            rating=rating,
            strengths=strengths,
            improvements=improvements,
            recommendation=RECOMMENDATIONS[rating],
            avg_score=round(avg_score, 2),
            technical_score=self._sub_score(answered, (QuestionType.CONCEPTUAL,), avg_score),
            communication_score=round(avg_score, 1),
            problem_solving_score=self._sub_score(answered, HANDS_ON_TYPES, avg_score),
            total_questions=len(session.history),
            answered_questions=len(answered),
            interview_duration=self._duration(session),
            status=ReportStatus.EVALUATED,
            source=ReportSource.FALLBACK,
        )

    async def _apply_oracle_narrative(
        self,
        session: InterviewSession,
        report: EvaluationReport,
    ) -> None:
        """Overwrite the narrative with the oracle's, leaving metrics alone."""
        prompt = EVALUATION_PROMPT.format(
            role=session.role.value,
            transcript=self._transcript(session.history),
            avg_score=report.avg_score,
            answered=report.answered_questions,
            total=report.total_questions,
        )

        try:
            response = await asyncio.wait_for(
                self._oracle.complete(prompt),
                timeout=self._settings.ORACLE_TIMEOUT_SECONDS,
            )
            narrative = parse_oracle_evaluation(response)
        except asyncio.TimeoutError:
            logger.warning("Oracle evaluation timed out; keeping local report")
            return
        except (ValueError, ValidationError) as e:
            logger.warning(f"Unparsable oracle evaluation; keeping local report: {e}")
            return
        except Exception as e:
            logger.warning(f"Oracle evaluation failed; keeping local report: {e}")
            return

        report.score = narrative.score
        report.rating = narrative.rating
        report.strengths = narrative.strengths[:MAX_NARRATIVE_ITEMS]
        report.improvements = narrative.improvements[:MAX_NARRATIVE_ITEMS]
        report.recommendation = narrative.recommendation
        if narrative.technical_score is not None:
            report.technical_score = narrative.technical_score
        if narrative.communication_score is not None:
            report.communication_score = narrative.communication_score
        if narrative.problem_solving_score is not None:
            report.problem_solving_score = narrative.problem_solving_score
        report.source = ReportSource.ORACLE

    # -------------------------------------------------------------------------
    # Fallback Reports
    # -------------------------------------------------------------------------

    def _generic_report(self, session: InterviewSession | None = None) -> EvaluationReport:
        total, answered = 0, 0
        if session is not None and isinstance(session.history, list):
            total = len(session.history)
            answered = sum(
                1 for q in session.history
                if isinstance(getattr(q, "state", None), Answered)
            )

        return EvaluationReport(
            score=0,
            rating="Completed",
            strengths=["Completed the interview session"],
            improvements=["Answer more questions to receive a detailed evaluation"],
            recommendation="Start a new interview to receive a full assessment.",
            total_questions=total,
            answered_questions=answered,
            interview_duration=self._duration(session) if session else 0.0,
            status=ReportStatus.COMPLETED,
        )

    def _incomplete_report(
        self,
        session: InterviewSession,
        total: int,
        message: str,
    ) -> EvaluationReport:
        return EvaluationReport(
            score=0,
            rating="Incomplete",
            strengths=[],
            improvements=["Complete the interview by answering the questions asked"],
            recommendation=message,
            total_questions=total,
            answered_questions=0,
            interview_duration=self._duration(session),
            status=ReportStatus.INCOMPLETE,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _is_well_formed(history: object) -> bool:
        return (
            isinstance(history, list)
            and len(history) > 0
            and all(
                isinstance(q, AskedQuestion) and isinstance(q.state, (Pending, Answered))
                for q in history
            )
        )

    @staticmethod
    def _duration(session: InterviewSession) -> float:
        if not isinstance(session.start_time, datetime):
            return 0.0
        return round(max(session.duration_minutes, 0.0), 1)

    @staticmethod
    def _sub_score(
        answered: list[AskedQuestion],
        types: tuple[QuestionType, ...],
        default: float,
    ) -> float:
        scores = [q.score for q in answered if q.question_type in types]
        return round(mean(scores) if scores else default, 1)

    @staticmethod
    def _narrative(
        history: list[AskedQuestion],
        answered: list[AskedQuestion],
    ) -> tuple[list[str], list[str]]:
        strengths: list[str] = []
        improvements: list[str] = []

        for q in answered:
            topic = q.topic.replace("_", " ")
            if q.score >= STRONG_SCORE:
                item = f"Confident answer on {topic} ({q.difficulty.value})"
                if item not in strengths:
                    strengths.append(item)
            elif q.score <= WEAK_SCORE:
                item = f"Revisit {topic} fundamentals"
                if item not in improvements:
                    improvements.append(item)

        if any(q.difficulty == Difficulty.HARD for q in answered):
            strengths.append("Progressed to hard-level questions")
        elif len(answered) >= 2:
            improvements.append("Give deeper, more complete answers to unlock harder questions")

        if any(q.question_type in HANDS_ON_TYPES and q.score >= STRONG_SCORE for q in answered):
            strengths.append("Worked through hands-on code problems")

        unanswered = len(history) - len(answered)
        if unanswered > 1:
            improvements.append(f"Answer every question ({unanswered} left unanswered)")

        if not strengths:
            strengths.append(f"Completed {len(answered)} question(s) under interview conditions")
        if not improvements:
            improvements.append("Keep practicing with timed mock interviews")

        return strengths[:MAX_NARRATIVE_ITEMS], improvements[:MAX_NARRATIVE_ITEMS]

    @staticmethod
    def _transcript(history: list[AskedQuestion]) -> str:
        lines = []
        for number, q in enumerate(history, start=1):
            lines.append(TRANSCRIPT_LINE.format(
                number=number,
                difficulty=q.difficulty.value,
                topic=q.topic,
                question=q.question,
                answer=q.answer if q.is_answered else "(no answer)",
                score=q.score if q.is_answered else "-",
            ))
        return "\n\n".join(lines)
