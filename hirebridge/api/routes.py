"""
HireBridge - API Routes.

FastAPI router with the interview endpoints.
Includes rate limiting on the oracle-backed endpoints to prevent Gemini credit drain.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from hirebridge.api.schemas import (
    EvaluationReportResponse,
    ErrorResponse,
    FinishInterviewRequest,
    NextQuestionRequest,
    QuestionResponse,
    RoleInfo,
    SessionStatsResponse,
    StartInterviewRequest,
)
from hirebridge.app.orchestrator import InterviewOrchestrator
from hirebridge.core.config import get_settings
from hirebridge.core.domain.models import Difficulty
from hirebridge.core.question_bank import QUESTION_BANK


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["interview"])

limiter = Limiter(key_func=get_remote_address)


def get_orchestrator(request: Request) -> InterviewOrchestrator:
    """Orchestrator attached to the running app."""
    return request.app.state.orchestrator


# =============================================================================
# Interview Flow
# =============================================================================

@router.post(
    "/interview/start",
    response_model=QuestionResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}},
)
async def start_interview(
    start_request: StartInterviewRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
):
    """Start a new interview, or resume the one identified by interviewId."""
    turn = await orchestrator.start(
        role=start_request.role,
        interview_id=start_request.interview_id,
    )
    logger.info(f"Active interviews: {orchestrator.active_sessions}")
    return QuestionResponse.from_turn(turn)


@router.post(
    "/interview/next",
    response_model=QuestionResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}},
)
@limiter.limit(lambda: get_settings().RATE_LIMIT_ADVANCE)
async def next_question(
    request: Request,
    next_request: NextQuestionRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
):
    """Score the last answer and return the next question. Rate-limited to prevent LLM abuse."""
    turn = await orchestrator.advance(
        interview_id=next_request.interview_id,
        last_answer=next_request.last_answer,
        role=next_request.role,
        is_first_question=next_request.is_first_question,
    )
    return QuestionResponse.from_turn(turn)


@router.post(
    "/interview/finish",
    response_model=EvaluationReportResponse,
    openapi_extra={
        "requestBody": {
            "required": False,
            "content": {"application/json": {"schema": FinishInterviewRequest.model_json_schema()}},
        }
    },
)
@limiter.limit(lambda: get_settings().RATE_LIMIT_FINISH)
async def finish_interview(
    request: Request,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
):
    """
    Evaluate the interview. Always answers with a report.

    The body is read leniently: a missing, non-JSON or mistyped body
    evaluates as an unknown interview instead of failing validation.
    """
    finish_request = FinishInterviewRequest.from_body(await request.body())
    interview_id = finish_request.resolved_id if finish_request else None
    report = await orchestrator.finish(interview_id)
    return EvaluationReportResponse.from_report(report)


@router.get(
    "/interview/stats",
    response_model=SessionStatsResponse,
    responses={400: {"model": ErrorResponse}},
)
async def get_interview_stats(
    interview_id: str = Query(..., alias="interviewId", description="Interview ID"),
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
):
    """Get current interview statistics."""
    stats = await orchestrator.get_session_stats(interview_id)
    return SessionStatsResponse(**stats)


# =============================================================================
# Catalog
# =============================================================================

@router.get("/roles", response_model=list[RoleInfo])
async def list_roles():
    """Supported roles and how many bank questions each difficulty has."""
    return [
        RoleInfo(
            role=role.value,
            questions={
                d.value: sum(1 for q in questions if q.difficulty == d)
                for d in Difficulty
            },
        )
        for role, questions in QUESTION_BANK.items()
    ]


# =============================================================================
# Health Check
# =============================================================================

@router.get("/health")
async def health_check(orchestrator: InterviewOrchestrator = Depends(get_orchestrator)):
    """API health check."""
    return {
        "status": "healthy",
        "service": "HireBridge",
        "active_sessions": orchestrator.active_sessions,
        "oracle_enabled": orchestrator.oracle_enabled,
    }
