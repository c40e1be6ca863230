from __future__ import annotations

import threading

from campus_agent.services import goal_analyzer, plan_builder, progress_tracker
from campus_agent.services.plan_store import InMemoryPlanStore


def _store_with_plan(user_id: str = "student-1"):
    store = InMemoryPlanStore()
    plan = plan_builder.fallback_plan()
    progress_tracker.set_plan(store, user_id, plan)
    return store, plan


def test_new_plan_starts_at_zero() -> None:
    store, _ = _store_with_plan()

    progress = progress_tracker.get_progress(store, "student-1")

    assert progress.overall_progress == 0
    assert progress.current_phase == 1
    assert progress.completed_tasks == 0


def test_missing_plan_reports_zero_progress() -> None:
    store = InMemoryPlanStore()

    assert progress_tracker.get_plan(store, "nobody") is None
    assert progress_tracker.get_progress(store, "nobody").completed_tasks == 0
    assert progress_tracker.complete_task(store, "nobody", "phase-1-task-1") is False


def test_completion_is_idempotent() -> None:
    store, _ = _store_with_plan()

    assert progress_tracker.complete_task(store, "student-1", "phase-1-task-2") is True
    assert progress_tracker.complete_task(store, "student-1", "phase-1-task-2") is True

    assert progress_tracker.get_progress(store, "student-1").completed_tasks == 1
    assert progress_tracker.completed_task_ids(store, "student-1") == ["phase-1-task-2"]


def test_unknown_task_is_rejected() -> None:
    store, _ = _store_with_plan()

    assert progress_tracker.complete_task(store, "student-1", "phase-9-task-1") is False
    assert progress_tracker.get_progress(store, "student-1").completed_tasks == 0


def test_progress_is_bounded_and_non_decreasing() -> None:
    store, plan = _store_with_plan()
    seen = []

    for task_id in plan.task_ids() + plan.task_ids():
        progress_tracker.complete_task(store, "student-1", task_id)
        seen.append(progress_tracker.get_progress(store, "student-1").overall_progress)

    assert seen == sorted(seen)
    assert all(0 <= value <= 100 for value in seen)
    final = progress_tracker.get_progress(store, "student-1")
    assert final.overall_progress == 100
    assert final.current_phase == 3


def test_current_phase_is_first_with_open_task() -> None:
    store, _ = _store_with_plan()
    for task_id in ("phase-1-task-1", "phase-1-task-2", "phase-2-task-1"):
        progress_tracker.complete_task(store, "student-1", task_id)
    assert progress_tracker.get_progress(store, "student-1").current_phase == 1

    progress_tracker.complete_task(store, "student-1", "phase-1-task-3")
    assert progress_tracker.get_progress(store, "student-1").current_phase == 2


def test_goal_to_progress_walkthrough() -> None:
    store = InMemoryPlanStore()
    goal = goal_analyzer.analyze("I want to learn machine learning in 3 months")
    assert goal.goal_type == "academic"

    plan = plan_builder.build("student-ml", goal, None, store)
    assert plan.total_task_count == 9

    for task_id in plan.task_ids()[:3]:
        assert progress_tracker.complete_task(store, "student-ml", task_id) is True

    progress = progress_tracker.get_progress(store, "student-ml")
    assert progress.overall_progress == 33
    assert progress.completed_tasks == 3
    assert progress.current_phase == 2


def test_concurrent_completions_are_not_lost() -> None:
    store, plan = _store_with_plan()
    task_ids = plan.task_ids()
    barrier = threading.Barrier(len(task_ids) * 2)

    def worker(task_id: str) -> None:
        barrier.wait()
        progress_tracker.complete_task(store, "student-1", task_id)

    threads = [threading.Thread(target=worker, args=(task_id,)) for task_id in task_ids * 2]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    progress = progress_tracker.get_progress(store, "student-1")
    assert progress.completed_tasks == len(task_ids)
    assert progress.overall_progress == 100


def test_users_are_isolated() -> None:
    store, _ = _store_with_plan("student-a")
    progress_tracker.set_plan(store, "student-b", plan_builder.fallback_plan())

    progress_tracker.complete_task(store, "student-a", "phase-1-task-1")

    assert progress_tracker.get_progress(store, "student-a").completed_tasks == 1
    assert progress_tracker.get_progress(store, "student-b").completed_tasks == 0


def test_automation_status_reflects_active_plan() -> None:
    store, plan = _store_with_plan()

    status = progress_tracker.automation_status(store, "student-1")

    assert status["automated_tasks"] == plan.automation_plan.automated_tasks
    assert progress_tracker.automation_status(store, "nobody") == {"automated_tasks": [], "manual_tasks": []}
