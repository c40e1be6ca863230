"""Schemas for exam preparation plans."""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from campus_agent.api.schemas.assignments import BusySlotPayload


class ExamPrepRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    exam_name: str = Field(..., min_length=1)
    exam_date: date
    subject: Optional[str] = None
    topics: List[str] = Field(default_factory=list)
    busy_slots: List[BusySlotPayload] = Field(default_factory=list)
    today: Optional[date] = None


class DailyGoalPayload(BaseModel):
    day: int
    date: date
    hours: float
    topics: List[str]
    tasks: List[str]


class WeeklyGoalPayload(BaseModel):
    week: int
    focus: str
    goals: List[str]
    estimated_hours: int


class ExamPrepResponse(BaseModel):
    exam_name: str
    subject: Optional[str]
    exam_date: date
    days_until_exam: int
    hours_per_day: float
    topics_per_day: int
    daily_goals: List[DailyGoalPayload]
    weekly_goals: List[WeeklyGoalPayload]
    resources: List[str]
    recommendations: List[str]
    request_id: str
