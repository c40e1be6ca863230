"""Exam preparation plans built on the workload allocator's day model."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional, Sequence

from campus_agent.core.errors import InvalidInputError
from campus_agent.services.workload_allocator import (
    AllocatorConfig,
    BusySlot,
    as_date,
    days_until,
    free_hours,
)

MAX_DAILY_GOALS = 7
DAILY_TASKS = ("Review theory and concepts", "Solve practice problems", "Make revision notes")
PREP_RESOURCES = (
    "Review class notes and textbooks",
    "Practice previous year questions",
    "Create summary notes for each topic",
    "Join study groups for discussion",
    "Take mock tests to assess preparation",
)


@dataclass
class DailyGoal:
    day: int
    date: date
    hours: float
    topics: List[str]
    tasks: List[str] = field(default_factory=lambda: list(DAILY_TASKS))


@dataclass
class WeeklyGoal:
    week: int
    focus: str
    goals: List[str]
    estimated_hours: int


@dataclass
class ExamPrepPlan:
    exam_name: str
    subject: Optional[str]
    exam_date: date
    days_until_exam: int
    hours_per_day: float
    topics_per_day: int
    daily_goals: List[DailyGoal]
    weekly_goals: List[WeeklyGoal]
    resources: List[str]
    recommendations: List[str]


def plan_exam_preparation(
    exam_name: str,
    exam_date: date,
    topics: Sequence[str] = (),
    subject: Optional[str] = None,
    busy_slots: Sequence[BusySlot] = (),
    today: date | None = None,
    config: AllocatorConfig | None = None,
) -> ExamPrepPlan:
    """Spread exam topics over the days before the exam."""
    if not exam_name or not exam_name.strip():
        raise InvalidInputError("Exam name is required")

    config = config or AllocatorConfig.from_settings()
    reference = today or date.today()
    days = days_until(exam_date, reference)
    if days < 0:
        raise InvalidInputError("Exam date has already passed")

    topic_list = [topic.strip() for topic in topics if topic and topic.strip()]
    hours_per_day = min(2.0 if days > 7 else 4.0, config.daily_cap_hours)
    topics_per_day = math.ceil((len(topic_list) or 5) / max(days - 2, 1))

    daily_goals = _daily_goals(reference, days, topic_list, topics_per_day, hours_per_day, busy_slots, config)
    weekly_goals = weekly_exam_goals(topic_list, days)
    recommendations = [
        f"You have {days} day(s) to prepare.",
        f"Study {hours_per_day:g} hours daily.",
        f"Focus on {topics_per_day} topic(s) per day.",
        "Complete revision 2 days before the exam.",
        "Stay consistent and take regular breaks.",
    ]
    if days == 0:
        recommendations.insert(0, "The exam is today: skim your summary notes and rest.")

    return ExamPrepPlan(
        exam_name=exam_name.strip(),
        subject=subject,
        exam_date=exam_date,
        days_until_exam=days,
        hours_per_day=hours_per_day,
        topics_per_day=topics_per_day,
        daily_goals=daily_goals,
        weekly_goals=weekly_goals,
        resources=list(PREP_RESOURCES),
        recommendations=recommendations,
    )


def weekly_exam_goals(topics: Sequence[str], days_available: int) -> List[WeeklyGoal]:
    weeks = math.ceil(days_available / 7)
    per_week = math.ceil(len(topics) / max(weeks, 1))
    goals: List[WeeklyGoal] = []
    for week in range(weeks):
        week_topics = list(topics[week * per_week:(week + 1) * per_week]) if per_week else []
        final_week = week == weeks - 1
        goals.append(
            WeeklyGoal(
                week=week + 1,
                focus=", ".join(week_topics) if week_topics else "General revision",
                goals=[
                    f"Complete theory for: {', '.join(week_topics) or 'all topics'}",
                    "Solve practice problems",
                    "Create summary notes",
                    "Final revision and mock tests" if final_week else "Self-assessment quiz",
                ],
                estimated_hours=15 if final_week else 10,
            )
        )
    return goals


def _daily_goals(
    today: date,
    days: int,
    topics: List[str],
    topics_per_day: int,
    hours_per_day: float,
    busy_slots: Sequence[BusySlot],
    config: AllocatorConfig,
) -> List[DailyGoal]:
    start = as_date(today)
    target = min(days - 1, MAX_DAILY_GOALS)
    goals: List[DailyGoal] = []
    for offset in range(max(days - 1, 0)):
        if len(goals) >= target:
            break
        current = start + timedelta(days=offset)
        free = free_hours(current, busy_slots, config)
        if free <= 0:
            continue
        index = len(goals)
        day_topics = topics[index * topics_per_day:(index + 1) * topics_per_day]
        if not day_topics:
            day_topics = ["Revision"] if topics else [f"Study session {index + 1}"]
        goals.append(
            DailyGoal(
                day=index + 1,
                date=current,
                hours=min(hours_per_day, free),
                topics=list(day_topics),
            )
        )
    return goals
