"""Structured goal, plan and progress models shared by the planning services."""
from __future__ import annotations

from typing import Any, List, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

GoalType = Literal["academic", "skill", "project", "career", "exam"]
Difficulty = Literal["beginner", "intermediate", "advanced"]
Priority = Literal["low", "medium", "high"]

GOAL_TYPES: tuple[str, ...] = ("academic", "skill", "project", "career", "exam")


class Goal(BaseModel):
    """Structured representation of a stated objective."""

    model_config = ConfigDict(frozen=True)

    main_goal: str = Field(..., min_length=1)
    goal_type: GoalType
    description: str
    clarifying_questions: List[str] = Field(..., min_length=1, description="Questions to ask before planning.")
    estimated_duration: str = Field(..., description="Free-text time estimate such as '4-8 weeks'.")
    difficulty: Difficulty = "intermediate"
    key_milestones: List[str] = Field(default_factory=list)


class PlanTask(BaseModel):
    model_config = ConfigDict(frozen=True)

    task_id: str = Field(..., min_length=1)
    task_name: str
    description: str = ""
    priority: Priority = "medium"
    can_automate: bool = False
    estimated_time: str = ""
    deadline: str = ""


class Phase(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase_number: int = Field(..., ge=1)
    phase_name: str
    duration: str
    description: str = ""
    tasks: List[PlanTask] = Field(..., min_length=1)


class AutomationPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    automated_tasks: List[str] = Field(default_factory=list)
    manual_tasks: List[str] = Field(default_factory=list)


class Plan(BaseModel):
    """Phased action plan owned by one user."""

    model_config = ConfigDict(frozen=True)

    plan_title: str
    total_duration: str
    phases: List[Phase] = Field(..., min_length=1)
    automation_plan: AutomationPlan = Field(default_factory=AutomationPlan)
    resources: List[str] = Field(default_factory=list)
    success_metrics: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _number_phases_and_tasks(cls, data: Any) -> Any:
        # Generated plans frequently omit numbering or use bare integer task ids;
        # fill numbering from list position and keep ids as strings.
        if not isinstance(data, dict) or not isinstance(data.get("phases"), list):
            return data
        phases = []
        for phase_index, phase in enumerate(data["phases"], start=1):
            if not isinstance(phase, dict):
                phases.append(phase)
                continue
            phase = dict(phase)
            phase.setdefault("phase_number", phase_index)
            tasks = []
            for task_index, task in enumerate(phase.get("tasks") or [], start=1):
                if isinstance(task, dict) and not task.get("task_id"):
                    task = {**task, "task_id": f"phase-{phase['phase_number']}-task-{task_index}"}
                elif isinstance(task, dict) and not isinstance(task["task_id"], str):
                    task = {**task, "task_id": str(task["task_id"])}
                tasks.append(task)
            phase["tasks"] = tasks
            phases.append(phase)
        return {**data, "phases": phases}

    @model_validator(mode="after")
    def _check_structure(self) -> "Plan":
        numbers = [phase.phase_number for phase in self.phases]
        if numbers != sorted(numbers) or len(set(numbers)) != len(numbers):
            raise ValueError("phase numbers must be unique and ascending")
        task_ids = [task.task_id for task in self.iter_tasks()]
        if len(set(task_ids)) != len(task_ids):
            raise ValueError("task ids must be unique within a plan")
        return self

    def iter_tasks(self):
        for phase in self.phases:
            yield from phase.tasks

    @property
    def total_task_count(self) -> int:
        return sum(len(phase.tasks) for phase in self.phases)

    def task_ids(self) -> List[str]:
        return [task.task_id for task in self.iter_tasks()]


class Progress(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall_progress: int = Field(0, ge=0, le=100)
    current_phase: int = Field(1, ge=1)
    completed_tasks: int = Field(0, ge=0)


ZERO_PROGRESS = Progress(overall_progress=0, current_phase=1, completed_tasks=0)
