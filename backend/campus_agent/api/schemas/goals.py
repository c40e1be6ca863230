"""Schemas for goal analysis and plan creation."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from campus_agent.services.planning_models import Goal, Plan


class UnderstandGoalsRequest(BaseModel):
    goal: str
    context: Optional[Dict[str, Any]] = None


class UnderstandGoalsResponse(BaseModel):
    analysis: Goal
    requires_input: bool
    request_id: str


class CreatePlanRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    goal_details: Goal
    user_answers: Union[Dict[str, Any], List[Any], str, None] = None


class CreatePlanResponse(BaseModel):
    plan: Plan
    request_id: str
