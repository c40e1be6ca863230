"""Goal analysis and plan creation API routes."""
from __future__ import annotations

from time import perf_counter

from fastapi import APIRouter, Depends, HTTPException, Request, status

from campus_agent.api.deps import get_llm, get_store
from campus_agent.api.schemas.goals import (
    CreatePlanRequest,
    CreatePlanResponse,
    UnderstandGoalsRequest,
    UnderstandGoalsResponse,
)
from campus_agent.core.context import bind_user_id
from campus_agent.core.errors import InvalidInputError
from campus_agent.observability.metrics import log_metric
from campus_agent.observability.tracing import trace
from campus_agent.services import goal_analyzer, plan_builder
from campus_agent.services.llm_client import LLMClient
from campus_agent.services.plan_store import PlanStore

router = APIRouter(prefix="/agentic")


@router.post("/understand-goals", response_model=UnderstandGoalsResponse, tags=["goals"])
def understand_goals(
    request: UnderstandGoalsRequest,
    http_request: Request,
    llm: LLMClient = Depends(get_llm),
) -> UnderstandGoalsResponse:
    """Analyze a free-text goal and return the questions to ask before planning."""
    request_id = getattr(http_request.state, "request_id", None)
    start_time = perf_counter()

    with trace(
        "goal.understand",
        metadata={"route": "/agentic/understand-goals", "goal_length": len(request.goal or "")},
        request_id=request_id,
    ):
        try:
            analysis = goal_analyzer.analyze(request.goal, request.context, llm=llm)
        except InvalidInputError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    log_metric("goal.understand.success", 1, metadata={"goal_type": analysis.goal_type})
    log_metric("goal.understand.latency_ms", (perf_counter() - start_time) * 1000)
    return UnderstandGoalsResponse(
        analysis=analysis,
        requires_input=bool(analysis.clarifying_questions),
        request_id=request_id or "",
    )


@router.post("/create-plan", response_model=CreatePlanResponse, tags=["goals"])
def create_plan(
    request: CreatePlanRequest,
    http_request: Request,
    store: PlanStore = Depends(get_store),
    llm: LLMClient = Depends(get_llm),
) -> CreatePlanResponse:
    """Build a phased plan from an analyzed goal and make it the user's active plan."""
    request_id = getattr(http_request.state, "request_id", None)
    bind_user_id(request.user_id)

    with trace(
        "plan.create",
        metadata={"route": "/agentic/create-plan", "goal_type": request.goal_details.goal_type},
        user_id=request.user_id,
        request_id=request_id,
    ):
        try:
            plan = plan_builder.build(request.user_id, request.goal_details, request.user_answers, store, llm=llm)
        except InvalidInputError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    log_metric("plan.create.success", 1, metadata={"user_id": request.user_id})
    return CreatePlanResponse(plan=plan, request_id=request_id or "")
