"""Assignment workload and drafting API routes."""
from __future__ import annotations

import re
from time import perf_counter
from typing import List, Sequence

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from campus_agent.api.deps import get_llm
from campus_agent.api.schemas.assignments import (
    AllocationEntryPayload,
    BusySlotPayload,
    ConvertIEEERequest,
    GenerateContentRequest,
    GenerateContentResponse,
    ItemAllocationPayload,
    ManageAssignmentsRequest,
    ManageAssignmentsResponse,
    StudySchedulePayload,
    WorkloadAnalysisPayload,
)
from campus_agent.core.context import bind_user_id
from campus_agent.core.errors import InvalidInputError
from campus_agent.observability.metrics import log_metric
from campus_agent.observability.tracing import trace
from campus_agent.services import content_formatter
from campus_agent.services.llm_client import LLMClient
from campus_agent.services.workload_allocator import BusySlot, ItemAllocation, WorkItem, allocate

router = APIRouter(prefix="/agentic/assignments")


@router.post("/manage", response_model=ManageAssignmentsResponse, tags=["assignments"])
def manage_assignments(request: ManageAssignmentsRequest, http_request: Request) -> ManageAssignmentsResponse:
    """Spread pending work over the coming days and flag what is urgent."""
    request_id = getattr(http_request.state, "request_id", None)
    bind_user_id(request.user_id)
    start_time = perf_counter()

    with trace(
        "assignments.manage",
        metadata={
            "route": "/agentic/assignments/manage",
            "items": len(request.items),
            "busy_slots": len(request.busy_slots),
        },
        user_id=request.user_id,
        request_id=request_id,
    ):
        try:
            items = [WorkItem(**item.model_dump()) for item in request.items]
            report = allocate(items, to_busy_slots(request.busy_slots), today=request.today)
        except InvalidInputError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    analysis = report.workload_analysis
    metadata = {"user_id": request.user_id}
    log_metric("assignments.manage.items", analysis.total_items, metadata=metadata)
    log_metric("assignments.manage.urgent", analysis.urgent_count, metadata=metadata)
    log_metric("assignments.manage.latency_ms", (perf_counter() - start_time) * 1000, metadata=metadata)

    return ManageAssignmentsResponse(
        workload_analysis=WorkloadAnalysisPayload(**vars(analysis)),
        urgent_tasks=_serialize(report.urgent_tasks),
        study_schedule=StudySchedulePayload(
            weekly=_serialize(report.weekly),
            recommendations=report.recommendations,
        ),
        request_id=request_id or "",
    )


@router.post("/generate-content", response_model=GenerateContentResponse, tags=["assignments"])
def generate_content(
    request: GenerateContentRequest,
    http_request: Request,
    llm: LLMClient = Depends(get_llm),
) -> GenerateContentResponse:
    """Produce a starting draft for an assignment."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "assignments.generate_content",
        metadata={"route": "/agentic/assignments/generate-content", "assignment_type": request.assignment_type},
        request_id=request_id,
    ):
        try:
            content, fallback_used = content_formatter.draft_assignment(
                request.title,
                request.problem_statement,
                request.requirements,
                request.assignment_type,
                llm=llm,
            )
        except InvalidInputError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return GenerateContentResponse(
        content=content,
        sections=content_formatter.draft_sections(content),
        word_count=content_formatter.word_count(content),
        fallback_used=fallback_used,
        request_id=request_id or "",
    )


@router.post("/convert-ieee", response_class=PlainTextResponse, tags=["assignments"])
def convert_ieee(request: ConvertIEEERequest, http_request: Request) -> PlainTextResponse:
    """Return the content laid out in IEEE format as a downloadable text file."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("assignments.convert_ieee", metadata={"content_length": len(request.content)}, request_id=request_id):
        try:
            document = content_formatter.to_fixed_template(request.content, request.title)
        except InvalidInputError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    log_metric("assignments.convert_ieee.length", len(document))
    return PlainTextResponse(
        document,
        headers={"Content-Disposition": f'attachment; filename="{_ieee_filename(request.title)}"'},
    )


def to_busy_slots(payloads: Sequence[BusySlotPayload]) -> List[BusySlot]:
    return [BusySlot(**payload.model_dump()) for payload in payloads]


def _serialize(allocations: Sequence[ItemAllocation]) -> List[ItemAllocationPayload]:
    return [
        ItemAllocationPayload(
            title=allocation.item.title,
            kind=allocation.item.kind,
            course=allocation.item.course,
            priority=allocation.item.priority,
            due_date=allocation.item.due_date,
            estimated_hours=allocation.item.estimated_hours,
            days_remaining=allocation.days_remaining,
            allocated_hours=allocation.allocated_hours,
            remaining_hours=allocation.remaining_hours,
            urgent=allocation.urgent,
            urgency_reason=allocation.urgency_reason,
            daily_allocation=[
                AllocationEntryPayload(day=entry.day, date=entry.date, hours=entry.hours)
                for entry in allocation.entries
            ],
        )
        for allocation in allocations
    ]


def _ieee_filename(title: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "_", title or "").strip("_") or "document"
    return f"{slug}_IEEE.txt"
