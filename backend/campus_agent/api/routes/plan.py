"""Active plan, progress and task completion API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from campus_agent.api.deps import get_store
from campus_agent.api.schemas.plan import (
    AutomationStatusResponse,
    CompleteTaskRequest,
    CompleteTaskResponse,
    MyPlanResponse,
)
from campus_agent.core.context import bind_user_id
from campus_agent.observability.metrics import log_metric
from campus_agent.observability.tracing import trace
from campus_agent.services import progress_tracker
from campus_agent.services.plan_store import PlanStore

router = APIRouter(prefix="/agentic")


@router.get("/my-plan", response_model=MyPlanResponse, tags=["plan"])
def my_plan(
    http_request: Request,
    user_id: str = Query(..., min_length=1, max_length=64, description="User owning the plan"),
    store: PlanStore = Depends(get_store),
) -> MyPlanResponse:
    """Return the user's active plan with its progress."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("plan.get", metadata={"route": "/agentic/my-plan"}, user_id=user_id, request_id=request_id):
        plan = progress_tracker.get_plan(store, user_id)
        if plan is None:
            return MyPlanResponse(has_plan=False)
        progress = progress_tracker.get_progress(store, user_id)

    return MyPlanResponse(has_plan=True, plan=plan, progress=progress)


@router.post("/complete-task", response_model=CompleteTaskResponse, tags=["plan"])
def complete_task(
    request: CompleteTaskRequest,
    http_request: Request,
    store: PlanStore = Depends(get_store),
) -> CompleteTaskResponse:
    """Mark a plan task complete. Unknown users and tasks report ``success=false``."""
    request_id = getattr(http_request.state, "request_id", None)
    bind_user_id(request.user_id)

    with trace(
        "plan.complete_task",
        metadata={"route": "/agentic/complete-task", "task_id": request.task_id},
        user_id=request.user_id,
        request_id=request_id,
    ):
        success = progress_tracker.complete_task(store, request.user_id, request.task_id)
        progress = progress_tracker.get_progress(store, request.user_id)

    log_metric("plan.complete_task.success", 1 if success else 0, metadata={"user_id": request.user_id})
    return CompleteTaskResponse(success=success, progress=progress, request_id=request_id or "")


@router.get("/automation-status", response_model=AutomationStatusResponse, tags=["plan"])
def automation_status(
    http_request: Request,
    user_id: str = Query(..., min_length=1, max_length=64),
    store: PlanStore = Depends(get_store),
) -> AutomationStatusResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("plan.automation_status", metadata={"route": "/agentic/automation-status"}, user_id=user_id, request_id=request_id):
        status_payload = progress_tracker.automation_status(store, user_id)
    return AutomationStatusResponse(**status_payload)
