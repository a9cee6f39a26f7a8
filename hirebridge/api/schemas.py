"""
HireBridge - API Request/Response Schemas.

Pydantic models for API validation. Field names on the wire follow the
browser client (camelCase ids and counters, snake_case question metadata).
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hirebridge.core.domain.models import EvaluationReport, QuestionTurn

logger = logging.getLogger(__name__)


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Request Schemas
# =============================================================================

class StartInterviewRequest(_Schema):
    """Request to start (or resume) an interview."""
    role: str = Field(..., description="Interview track, e.g. 'Software Developer'")
    interview_id: Optional[str] = Field(default=None, alias="interviewId")


class NextQuestionRequest(_Schema):
    """Submit the answer to the pending question and get the next one."""
    interview_id: str = Field(..., alias="interviewId")
    role: Optional[str] = None
    last_answer: Optional[str] = Field(default=None, alias="lastAnswer")
    is_first_question: bool = Field(default=False, alias="isFirstQuestion")


class FinishInterviewRequest(_Schema):
    """Request the final evaluation. Either id field is accepted."""
    interview_id: Optional[str] = Field(default=None, alias="interviewId")
    session_id: Optional[str] = Field(default=None, alias="sessionId")

    @property
    def resolved_id(self) -> Optional[str]:
        return self.interview_id or self.session_id

    @classmethod
    def from_body(cls, raw: bytes) -> Optional["FinishInterviewRequest"]:
        """Parse a raw request body, or None when it is empty or invalid."""
        if not raw or not raw.strip():
            return None
        try:
            return cls.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable finish request body: {e.error_count()} error(s)")
            return None


# =============================================================================
# Response Schemas
# =============================================================================

class QuestionResponse(_Schema):
    """A question (or the welcome message) shown to the candidate."""
    interview_id: str = Field(..., alias="interviewId")
    question: str
    question_number: int = Field(..., alias="questionNumber")
    is_welcome: bool = Field(default=False, alias="isWelcome")
    question_type: Optional[str] = None
    code_snippet: Optional[str] = None
    topic_tag: Optional[str] = None
    difficulty: Optional[str] = None

    @classmethod
    def from_turn(cls, turn: QuestionTurn) -> "QuestionResponse":
        return cls(
            interview_id=turn.interview_id,
            question=turn.question,
            question_number=turn.question_number,
            is_welcome=turn.is_welcome,
            question_type=turn.question_type.value if turn.question_type else None,
            code_snippet=turn.code_snippet,
            topic_tag=turn.topic_tag,
            difficulty=turn.difficulty.value if turn.difficulty else None,
        )


class EvaluationReportResponse(_Schema):
    """Final interview report."""
    score: int = Field(..., ge=0, le=100)
    rating: str
    strengths: list[str]
    improvements: list[str]
    recommendation: str
    avg_score: float = Field(..., alias="avgScore")
    technical_score: Optional[float] = Field(default=None, alias="technicalScore")
    communication_score: Optional[float] = Field(default=None, alias="communicationScore")
    problem_solving_score: Optional[float] = Field(default=None, alias="problemSolvingScore")
    total_questions: int = Field(..., alias="totalQuestions")
    answered_questions: int = Field(..., alias="answeredQuestions")
    interview_duration: float = Field(..., alias="interviewDuration")
    status: str
    source: str

    @classmethod
    def from_report(cls, report: EvaluationReport) -> "EvaluationReportResponse":
        return cls(**report.to_dict())


class SessionStatsResponse(_Schema):
    """Session statistics."""
    interview_id: str = Field(..., alias="interviewId")
    role: str
    phase: str
    questions_asked: int
    questions_answered: int
    average_score: float
    duration_minutes: float
    asked_topics: list[str]


class RoleInfo(BaseModel):
    """A supported role and its question counts per difficulty."""
    role: str
    questions: dict[str, int]


class ErrorResponse(BaseModel):
    """Error response."""
    error: str
    detail: Optional[str] = None
