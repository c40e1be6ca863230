"""Exam preparation API routes."""
from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Request, status

from campus_agent.api.routes.assignments import to_busy_slots
from campus_agent.api.schemas.exam_prep import ExamPrepRequest, ExamPrepResponse
from campus_agent.core.context import bind_user_id
from campus_agent.core.errors import InvalidInputError
from campus_agent.observability.metrics import log_metric
from campus_agent.observability.tracing import trace
from campus_agent.services.exam_prep import plan_exam_preparation

router = APIRouter(prefix="/agentic/exam-prep")


@router.post("/plan", response_model=ExamPrepResponse, tags=["exam-prep"])
def exam_prep_plan(request: ExamPrepRequest, http_request: Request) -> ExamPrepResponse:
    """Build a day-by-day revision plan leading up to an exam."""
    request_id = getattr(http_request.state, "request_id", None)
    bind_user_id(request.user_id)

    with trace(
        "exam_prep.plan",
        metadata={"route": "/agentic/exam-prep/plan", "topics": len(request.topics), "subject": request.subject},
        user_id=request.user_id,
        request_id=request_id,
    ):
        try:
            plan = plan_exam_preparation(
                request.exam_name,
                request.exam_date,
                topics=request.topics,
                subject=request.subject,
                busy_slots=to_busy_slots(request.busy_slots),
                today=request.today,
            )
        except InvalidInputError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    log_metric("exam_prep.days_until_exam", plan.days_until_exam, metadata={"user_id": request.user_id})
    return ExamPrepResponse(**asdict(plan), request_id=request_id or "")
