"""
HireBridge - Domain Models.

Defines the core data structures used throughout the application.
Uses dataclasses for clarity and immutability where appropriate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union

from hirebridge.core.exceptions import AnswerAlreadyRecordedError, UnsupportedRoleError


MIN_SCORE = 1
MAX_SCORE = 10


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class Role(str, Enum):
    """Job tracks an interview can target."""
    SOFTWARE_DEVELOPER = "Software Developer"
    DATA_ANALYST = "Data Analyst"
    AI_ML_ENGINEER = "AI / ML Engineer"
    HR_MANAGEMENT = "HR / Management"

    @classmethod
    def parse(cls, value: Role | str | None) -> Role:
        """Resolve a role name, raising UnsupportedRoleError for anything else."""
        if isinstance(value, Role):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip())
            except ValueError:
                pass
        raise UnsupportedRoleError(value)


class Difficulty(str, Enum):
    """Question difficulty tiers."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuestionType(str, Enum):
    """Kind of answer a question expects."""
    CONCEPTUAL = "conceptual"
    CODING = "coding"
    DEBUGGING = "debugging"


class InterviewPhase(str, Enum):
    """Phases of the interview state machine."""
    WELCOME = "welcome"
    AWAITING_ANSWER = "awaiting_answer"


# -----------------------------------------------------------------------------
# Question Models
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Question:
    """A question from the static bank."""

    difficulty: Difficulty
    topic: str
    question_type: QuestionType
    text: str
    code_snippet: str | None = None


@dataclass(frozen=True)
class Pending:
    """Answer state of a question still waiting for the candidate."""

    is_answered = False


@dataclass(frozen=True)
class Answered:
    """Answer state once the candidate has responded. Never replaced."""

    answer: str
    score: int
    answered_at: datetime

    is_answered = True

    def __post_init__(self) -> None:
        if not MIN_SCORE <= self.score <= MAX_SCORE:
            raise ValueError(f"Score out of range: {self.score}")


AnswerState = Union[Pending, Answered]

PENDING = Pending()


@dataclass
class AskedQuestion:
    """A question issued during a session, copied from the bank at selection time."""

    question: str
    topic: str
    difficulty: Difficulty
    question_type: QuestionType
    code_snippet: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)
    state: AnswerState = PENDING

    @classmethod
    def from_question(cls, question: Question) -> AskedQuestion:
        return cls(
            question=question.text,
            topic=question.topic,
            difficulty=question.difficulty,
            question_type=question.question_type,
            code_snippet=question.code_snippet,
        )

    @property
    def is_answered(self) -> bool:
        return self.state.is_answered

    @property
    def answer(self) -> str | None:
        return self.state.answer if isinstance(self.state, Answered) else None

    @property
    def score(self) -> int | None:
        return self.state.score if isinstance(self.state, Answered) else None

    @property
    def answered_at(self) -> datetime | None:
        return self.state.answered_at if isinstance(self.state, Answered) else None

    def record_answer(
        self,
        answer: str,
        score: int,
        answered_at: datetime | None = None,
    ) -> None:
        """Record the candidate's answer. Allowed exactly once."""
        if self.is_answered:
            raise AnswerAlreadyRecordedError(self.question)
        self.state = Answered(
            answer=answer,
            score=score,
            answered_at=answered_at or datetime.now(),
        )


# -----------------------------------------------------------------------------
# Interview Session Model
# -----------------------------------------------------------------------------

@dataclass
class InterviewSession:
    """Per-candidate interview state."""

    session_id: str
    role: Role
    history: list[AskedQuestion] = field(default_factory=list)
    current_question_index: int = 0
    asked_topics: list[str] = field(default_factory=list)
    asked_questions: list[str] = field(default_factory=list)
    start_time: datetime = field(default_factory=datetime.now)
    welcome_shown: bool = False
    last_active: datetime = field(default_factory=datetime.now)

    @property
    def phase(self) -> InterviewPhase:
        if not self.history:
            return InterviewPhase.WELCOME
        return InterviewPhase.AWAITING_ANSWER

    @property
    def current_question(self) -> AskedQuestion | None:
        """The question awaiting (or most recently given) an answer."""
        if 0 <= self.current_question_index < len(self.history):
            return self.history[self.current_question_index]
        return None

    @property
    def answered(self) -> list[AskedQuestion]:
        return [q for q in self.history if q.is_answered]

    @property
    def duration_minutes(self) -> float:
        """Minutes elapsed since the session started."""
        return (datetime.now() - self.start_time).total_seconds() / 60

    def append_question(self, question: Question) -> AskedQuestion:
        """Add a newly selected question to history and the asked-sets."""
        asked = AskedQuestion.from_question(question)
        self.history.append(asked)
        if question.topic not in self.asked_topics:
            self.asked_topics.append(question.topic)
        if question.text not in self.asked_questions:
            self.asked_questions.append(question.text)
        return asked

    def touch(self) -> None:
        self.last_active = datetime.now()


# -----------------------------------------------------------------------------
# Turn & Report Models
# -----------------------------------------------------------------------------

@dataclass
class QuestionTurn:
    """What the candidate is shown after start/advance."""

    interview_id: str
    question: str
    question_number: int
    is_welcome: bool = False
    question_type: QuestionType | None = None
    code_snippet: str | None = None
    topic_tag: str | None = None
    difficulty: Difficulty | None = None

    @classmethod
    def for_question(
        cls,
        interview_id: str,
        asked: AskedQuestion,
        question_number: int,
    ) -> QuestionTurn:
        return cls(
            interview_id=interview_id,
            question=asked.question,
            question_number=question_number,
            question_type=asked.question_type,
            code_snippet=asked.code_snippet,
            topic_tag=asked.topic,
            difficulty=asked.difficulty,
        )


class ReportStatus(str, Enum):
    """Which rung of the evaluation ladder produced a report."""
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    EVALUATED = "evaluated"


class ReportSource(str, Enum):
    FALLBACK = "fallback"
    ORACLE = "oracle"


@dataclass
class EvaluationReport:
    """Final interview report for the candidate. Derived, never stored."""

    score: int
    rating: str
    strengths: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)
    recommendation: str = ""

    avg_score: float = 0.0
    technical_score: float | None = None
    communication_score: float | None = None
    problem_solving_score: float | None = None

    total_questions: int = 0
    answered_questions: int = 0
    interview_duration: float = 0.0

    status: ReportStatus = ReportStatus.COMPLETED
    source: ReportSource = ReportSource.FALLBACK

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "rating": self.rating,
            "strengths": list(self.strengths),
            "improvements": list(self.improvements),
            "recommendation": self.recommendation,
            "avg_score": self.avg_score,
            "technical_score": self.technical_score,
            "communication_score": self.communication_score,
            "problem_solving_score": self.problem_solving_score,
            "total_questions": self.total_questions,
            "answered_questions": self.answered_questions,
            "interview_duration": self.interview_duration,
            "status": self.status.value,
            "source": self.source.value,
        }
