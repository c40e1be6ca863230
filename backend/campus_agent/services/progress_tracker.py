"""Plan lifecycle and progress recomputation on top of a PlanStore."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from campus_agent.observability.metrics import log_metric
from campus_agent.services.plan_store import PlanRecord, PlanStore
from campus_agent.services.planning_models import AutomationPlan, Goal, Plan, Progress, ZERO_PROGRESS

logger = logging.getLogger(__name__)


def compute_progress(plan: Plan, completed_task_ids: Iterable[str]) -> Progress:
    """Derive progress from the set of completed task ids.

    ``current_phase`` is the first phase that still has an open task, or the
    last phase once everything is done.
    """
    known = set(plan.task_ids())
    completed = known.intersection(completed_task_ids)
    total = plan.total_task_count
    percentage = round(len(completed) / total * 100) if total else 0

    current_phase = plan.phases[-1].phase_number
    for phase in plan.phases:
        if any(task.task_id not in completed for task in phase.tasks):
            current_phase = phase.phase_number
            break

    return Progress(
        overall_progress=max(0, min(100, percentage)),
        current_phase=current_phase,
        completed_tasks=len(completed),
    )


def set_plan(store: PlanStore, user_id: str, plan: Plan, goal: Optional[Goal] = None) -> None:
    """Replace the user's plan. Any previous plan and its progress are discarded."""
    previous = store.get(user_id)
    if previous is not None:
        logger.info(
            "Replacing plan for user %s (%d/%d tasks were complete)",
            user_id,
            len(previous.completed_task_ids),
            previous.plan.total_task_count,
        )
    store.set(user_id, PlanRecord(plan=plan, goal=goal, completed_task_ids=()))


def get_plan(store: PlanStore, user_id: str) -> Optional[Plan]:
    record = store.get(user_id)
    return record.plan if record else None


def get_progress(store: PlanStore, user_id: str) -> Progress:
    record = store.get(user_id)
    if record is None:
        return ZERO_PROGRESS
    return compute_progress(record.plan, record.completed_task_ids)


def complete_task(store: PlanStore, user_id: str, task_id: str) -> bool:
    """Mark ``task_id`` complete. Repeated calls for the same task are no-ops.

    Returns False when the user has no plan or the plan has no such task.
    """
    record = store.get(user_id)
    if record is None:
        logger.info("complete_task: user %s has no active plan", user_id)
        return False
    if task_id not in record.plan.task_ids():
        logger.info("complete_task: task %s not in plan for user %s", task_id, user_id)
        return False

    def _mark(current: PlanRecord) -> PlanRecord:
        if task_id in current.completed_task_ids or task_id not in current.plan.task_ids():
            return current
        return replace(current, completed_task_ids=current.completed_task_ids + (task_id,))

    updated = store.update(user_id, _mark)
    if updated is None:
        return False

    progress = compute_progress(updated.plan, updated.completed_task_ids)
    log_metric(
        "plan.task.completed",
        1,
        metadata={"user_id": user_id, "task_id": task_id, "overall_progress": progress.overall_progress},
    )
    return True


def completed_task_ids(store: PlanStore, user_id: str) -> List[str]:
    record = store.get(user_id)
    return list(record.completed_task_ids) if record else []


def automation_status(store: PlanStore, user_id: str) -> Dict[str, List[str]]:
    record = store.get(user_id)
    automation = record.plan.automation_plan if record else AutomationPlan()
    return {
        "automated_tasks": list(automation.automated_tasks),
        "manual_tasks": list(automation.manual_tasks),
    }
