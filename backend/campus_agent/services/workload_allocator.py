"""Distributes study hours for pending assignments and exams across free days.

Each work item is scheduled independently from ``today`` up to and including
its due date. Days whose study window is fully covered by timetable blocks are
skipped, and no item receives more than the daily cap on any day. Output
ordering is fixed by (due date, priority, title) so identical inputs always
produce an identical schedule.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from campus_agent.core.config import Settings, settings
from campus_agent.core.errors import InvalidInputError

PRIORITY_RANK = {"urgent": 4, "high": 3, "medium": 2, "low": 1}
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
WEEK_HORIZON_DAYS = 7
WORK_ITEM_KINDS = ("assignment", "exam", "project", "quiz", "presentation", "lab", "other")

# Strictest first; an item reports the first reason that applies.
URGENCY_OVERDUE = "overdue"
URGENCY_DUE_TODAY = "due_today"
URGENCY_INSUFFICIENT_TIME = "insufficient_time"
URGENCY_DEADLINE_NEAR = "deadline_near"


@dataclass(frozen=True)
class AllocatorConfig:
    daily_cap_hours: float = 4.0
    urgent_threshold_days: int = 2
    study_day_start: time = time(8, 0)
    study_day_end: time = time(22, 0)
    intensity_low_max_hours: float = 10.0
    intensity_high_min_hours: float = 25.0

    def __post_init__(self) -> None:
        if self.daily_cap_hours <= 0:
            raise InvalidInputError("daily_cap_hours must be positive")
        if self.study_day_end <= self.study_day_start:
            raise InvalidInputError("study day must end after it starts")

    @classmethod
    def from_settings(cls, source: Settings = settings) -> "AllocatorConfig":
        return cls(
            daily_cap_hours=source.daily_study_cap_hours,
            urgent_threshold_days=source.urgent_threshold_days,
            study_day_start=time.fromisoformat(source.study_day_start),
            study_day_end=time.fromisoformat(source.study_day_end),
            intensity_low_max_hours=source.intensity_low_max_hours,
            intensity_high_min_hours=source.intensity_high_min_hours,
        )


@dataclass(frozen=True)
class WorkItem:
    title: str
    due_date: date
    estimated_hours: float
    priority: str = "medium"
    kind: str = "assignment"
    course: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise InvalidInputError("Work item title is required")
        if self.estimated_hours is None or self.estimated_hours <= 0:
            raise InvalidInputError(f"estimated_hours must be positive for '{self.title}'")
        if self.kind not in WORK_ITEM_KINDS:
            raise InvalidInputError(f"Unknown work item kind '{self.kind}'")


@dataclass(frozen=True)
class BusySlot:
    """A committed block: recurring on a weekday (``day``) or on one date (``on``)."""

    start_time: time
    end_time: time
    day: Optional[str] = None
    on: Optional[date] = None
    label: str = ""

    def __post_init__(self) -> None:
        if (self.day is None) == (self.on is None):
            raise InvalidInputError("Busy slot needs exactly one of a weekday or a date")
        if self.end_time <= self.start_time:
            raise InvalidInputError("Busy slot must end after it starts")
        if self.day is not None:
            weekday = self.day.strip().lower()
            if weekday not in WEEKDAYS:
                raise InvalidInputError(f"Unknown weekday '{self.day}'")
            object.__setattr__(self, "day", weekday)

    def applies_to(self, current: date) -> bool:
        if self.on is not None:
            return self.on == current
        return WEEKDAYS[current.weekday()] == self.day


@dataclass(frozen=True)
class AllocationEntry:
    day: int
    date: date
    hours: float


@dataclass
class ItemAllocation:
    item: WorkItem
    days_remaining: int
    entries: List[AllocationEntry] = field(default_factory=list)
    allocated_hours: float = 0.0
    remaining_hours: float = 0.0
    urgent: bool = False
    urgency_reason: Optional[str] = None


@dataclass
class WorkloadAnalysis:
    total_items: int
    total_estimated_hours: float
    due_within_week: int
    hours_due_within_week: float
    urgent_count: int
    overdue_count: int
    intensity: str


@dataclass
class WorkloadReport:
    per_item: List[ItemAllocation]
    workload_analysis: WorkloadAnalysis
    urgent_tasks: List[ItemAllocation]
    weekly: List[ItemAllocation]
    recommendations: List[str]


def allocate(
    work_items: Iterable[WorkItem],
    busy_slots: Sequence[BusySlot] = (),
    today: date | None = None,
    config: AllocatorConfig | None = None,
) -> WorkloadReport:
    """Allocate study hours for every item and summarize the workload."""
    config = config or AllocatorConfig.from_settings()
    reference = today or date.today()
    ordered = sorted(work_items, key=_item_sort_key)

    per_item = [allocate_item(item, busy_slots, reference, config) for item in ordered]
    urgent = sorted(
        (entry for entry in per_item if entry.urgent),
        key=lambda entry: (entry.days_remaining, -PRIORITY_RANK.get(entry.item.priority, 0), entry.item.title),
    )
    weekly = [entry for entry in per_item if entry.days_remaining <= WEEK_HORIZON_DAYS]
    analysis = analyze_workload(per_item, config)
    return WorkloadReport(
        per_item=per_item,
        workload_analysis=analysis,
        urgent_tasks=urgent,
        weekly=weekly,
        recommendations=build_recommendations(per_item, analysis, config),
    )


def allocate_item(
    item: WorkItem,
    busy_slots: Sequence[BusySlot],
    today: date,
    config: AllocatorConfig,
) -> ItemAllocation:
    days_remaining = days_until(item.due_date, today)
    start = as_date(today)
    remaining = float(item.estimated_hours)
    entries: List[AllocationEntry] = []

    # Empty range when the deadline has already passed.
    for offset in range(days_remaining + 1):
        if remaining <= 0:
            break
        current = start + timedelta(days=offset)
        free = free_hours(current, busy_slots, config)
        if free <= 0:
            continue
        hours = min(remaining, config.daily_cap_hours, free)
        entries.append(AllocationEntry(day=offset + 1, date=current, hours=_round_hours(hours)))
        remaining = _round_hours(remaining - hours)

    allocated = _round_hours(sum(entry.hours for entry in entries))
    remaining = _round_hours(max(0.0, float(item.estimated_hours) - allocated))
    reason = urgency_reason(days_remaining, remaining, config)
    return ItemAllocation(
        item=item,
        days_remaining=days_remaining,
        entries=entries,
        allocated_hours=allocated,
        remaining_hours=remaining,
        urgent=reason is not None,
        urgency_reason=reason,
    )


def urgency_reason(days_remaining: int, remaining_hours: float, config: AllocatorConfig) -> Optional[str]:
    if days_remaining < 0:
        return URGENCY_OVERDUE
    if days_remaining == 0:
        return URGENCY_DUE_TODAY
    if remaining_hours > 0:
        return URGENCY_INSUFFICIENT_TIME
    if days_remaining <= config.urgent_threshold_days:
        return URGENCY_DEADLINE_NEAR
    return None


def analyze_workload(per_item: Sequence[ItemAllocation], config: AllocatorConfig) -> WorkloadAnalysis:
    within_week = [entry for entry in per_item if entry.days_remaining <= WEEK_HORIZON_DAYS]
    hours_within_week = _round_hours(sum(entry.item.estimated_hours for entry in within_week))
    return WorkloadAnalysis(
        total_items=len(per_item),
        total_estimated_hours=_round_hours(sum(entry.item.estimated_hours for entry in per_item)),
        due_within_week=len(within_week),
        hours_due_within_week=hours_within_week,
        urgent_count=sum(1 for entry in per_item if entry.urgent),
        overdue_count=sum(1 for entry in per_item if entry.days_remaining < 0),
        intensity=classify_intensity(hours_within_week, config),
    )


def classify_intensity(hours: float, config: AllocatorConfig) -> str:
    if hours < config.intensity_low_max_hours:
        return "low"
    if hours > config.intensity_high_min_hours:
        return "high"
    return "medium"


def build_recommendations(
    per_item: Sequence[ItemAllocation],
    analysis: WorkloadAnalysis,
    config: AllocatorConfig,
) -> List[str]:
    if not per_item:
        return ["All assignments are completed. Nothing is due."]

    recommendations: List[str] = []
    if analysis.overdue_count:
        recommendations.append(
            f"You have {analysis.overdue_count} overdue item(s). Focus on completing these first."
        )

    due_soon = [entry for entry in per_item if 0 <= entry.days_remaining <= config.urgent_threshold_days]
    if due_soon:
        recommendations.append(f"{len(due_soon)} item(s) due within {config.urgent_threshold_days} days.")

    for entry in per_item:
        if entry.urgency_reason == URGENCY_INSUFFICIENT_TIME:
            recommendations.append(
                f'"{entry.item.title}" needs {entry.remaining_hours:g} more hours than fit before its deadline; '
                "consider asking for an extension or reducing scope."
            )
        elif entry.days_remaining > WEEK_HORIZON_DAYS:
            recommendations.append(
                f'Start working on "{entry.item.title}" early - {entry.days_remaining} days available.'
            )

    if analysis.intensity == "high":
        recommendations.append(
            f"Heavy week ahead ({analysis.hours_due_within_week:g} hours due within {WEEK_HORIZON_DAYS} days). "
            "Break large tasks into smaller chunks and schedule regular breaks."
        )
    return recommendations


def days_until(due: date, today: date) -> int:
    """Whole days from ``today`` to ``due``, rounded up."""
    if isinstance(today, datetime):
        due_at = due if isinstance(due, datetime) else datetime.combine(due, time.min, tzinfo=today.tzinfo)
        return math.ceil((due_at - today).total_seconds() / 86400)
    return (as_date(due) - today).days


def free_hours(current: date, busy_slots: Sequence[BusySlot], config: AllocatorConfig) -> float:
    """Hours of the study window on ``current`` not covered by busy slots."""
    window_start = _minutes(config.study_day_start)
    window_end = _minutes(config.study_day_end)
    intervals = sorted(
        (max(window_start, _minutes(slot.start_time)), min(window_end, _minutes(slot.end_time)))
        for slot in busy_slots
        if slot.applies_to(current)
    )
    busy = 0
    cursor = window_start
    for start, end in intervals:
        start = max(start, cursor)
        if end > start:
            busy += end - start
            cursor = end
    return _round_hours((window_end - window_start - busy) / 60)


def _item_sort_key(item: WorkItem) -> Tuple:
    due = item.due_date
    due_key = due.replace(tzinfo=None) if isinstance(due, datetime) else datetime.combine(due, time.min)
    return (due_key, -PRIORITY_RANK.get(item.priority, 0), item.title, item.estimated_hours)


def as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _round_hours(value: float) -> float:
    return round(value, 2)
