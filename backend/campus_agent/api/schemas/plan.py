"""Schemas for the active plan and its progress."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from campus_agent.services.planning_models import Plan, Progress


class MyPlanResponse(BaseModel):
    has_plan: bool
    plan: Optional[Plan] = None
    progress: Optional[Progress] = None


class CompleteTaskRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    task_id: str = Field(..., min_length=1)


class CompleteTaskResponse(BaseModel):
    success: bool
    progress: Progress
    request_id: str


class AutomationStatusResponse(BaseModel):
    automated_tasks: List[str]
    manual_tasks: List[str]
