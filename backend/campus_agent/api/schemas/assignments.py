"""Schemas for workload allocation and assignment drafting."""
from __future__ import annotations

from datetime import date, datetime, time
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field


class WorkItemPayload(BaseModel):
    title: str = Field(..., min_length=1)
    due_date: Union[date, datetime]
    estimated_hours: float = Field(..., gt=0)
    priority: Literal["low", "medium", "high", "urgent"] = "medium"
    kind: Literal["assignment", "exam", "project", "quiz", "presentation", "lab", "other"] = "assignment"
    course: Optional[str] = None


class BusySlotPayload(BaseModel):
    start_time: time
    end_time: time
    day: Optional[str] = None
    on: Optional[date] = None
    label: str = ""


class ManageAssignmentsRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    items: List[WorkItemPayload] = Field(default_factory=list)
    busy_slots: List[BusySlotPayload] = Field(default_factory=list)
    today: Optional[date] = None


class AllocationEntryPayload(BaseModel):
    day: int
    date: date
    hours: float


class ItemAllocationPayload(BaseModel):
    title: str
    kind: str
    course: Optional[str]
    priority: str
    due_date: Union[date, datetime]
    estimated_hours: float
    days_remaining: int
    allocated_hours: float
    remaining_hours: float
    urgent: bool
    urgency_reason: Optional[str]
    daily_allocation: List[AllocationEntryPayload]


class WorkloadAnalysisPayload(BaseModel):
    total_items: int
    total_estimated_hours: float
    due_within_week: int
    hours_due_within_week: float
    urgent_count: int
    overdue_count: int
    intensity: Literal["low", "medium", "high"]


class StudySchedulePayload(BaseModel):
    weekly: List[ItemAllocationPayload]
    recommendations: List[str]


class ManageAssignmentsResponse(BaseModel):
    workload_analysis: WorkloadAnalysisPayload
    urgent_tasks: List[ItemAllocationPayload]
    study_schedule: StudySchedulePayload
    request_id: str


class GenerateContentRequest(BaseModel):
    title: str = ""
    problem_statement: str
    requirements: Optional[str] = None
    assignment_type: Optional[str] = None


class GenerateContentResponse(BaseModel):
    content: str
    sections: List[str]
    word_count: int
    fallback_used: bool
    request_id: str


class ConvertIEEERequest(BaseModel):
    content: str
    title: str = ""
