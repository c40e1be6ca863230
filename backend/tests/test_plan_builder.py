from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from campus_agent.core.errors import InvalidInputError
from campus_agent.services import goal_analyzer, plan_builder, progress_tracker
from campus_agent.services.llm_client import LLMClient
from campus_agent.services.plan_store import InMemoryPlanStore


def _llm(content: str) -> LLMClient:
    def create(**kwargs):
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])

    fake = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    return LLMClient(api_key=None, model="test-model", timeout_seconds=1, client=fake)


def _goal(text: str = "I want to learn machine learning in 3 months"):
    return goal_analyzer.fallback_goal(text)


def test_fallback_plan_has_three_phases_of_three_tasks() -> None:
    store = InMemoryPlanStore()

    plan = plan_builder.build("student-1", _goal(), None, store)

    assert [phase.phase_name for phase in plan.phases] == ["Foundation Phase", "Development Phase", "Mastery Phase"]
    assert plan.total_task_count == 9
    assert plan.task_ids()[0] == "phase-1-task-1"
    assert plan.task_ids()[-1] == "phase-3-task-3"
    assert len(plan.automation_plan.automated_tasks) == 3
    assert len(plan.automation_plan.manual_tasks) == 3


def test_build_stores_plan_with_zero_progress() -> None:
    store = InMemoryPlanStore()
    goal = _goal()

    plan = plan_builder.build("student-1", goal, {"experience": "beginner"}, store)

    record = store.get("student-1")
    assert record is not None
    assert record.plan == plan
    assert record.goal == goal
    assert record.completed_task_ids == ()


def test_build_requires_goal_and_user() -> None:
    store = InMemoryPlanStore()

    with pytest.raises(InvalidInputError):
        plan_builder.build("student-1", None, None, store)
    with pytest.raises(InvalidInputError):
        plan_builder.build("", _goal(), None, store)
    assert store.get("student-1") is None


def test_generated_plan_gets_numbered_task_ids() -> None:
    generated = {
        "plan_title": "Rust in six weeks",
        "total_duration": "6 weeks",
        "phases": [
            {
                "phase_name": "Basics",
                "duration": "2 weeks",
                "tasks": [
                    {"task_name": "Read the book", "priority": "high"},
                    {"task_name": "Install toolchain", "can_automate": True},
                ],
            },
            {
                "phase_name": "Projects",
                "duration": "4 weeks",
                "tasks": [{"task_name": "Write a CLI"}],
            },
        ],
        "automation_plan": {"automated_tasks": ["Install toolchain"], "manual_tasks": ["Read the book"]},
    }
    store = InMemoryPlanStore()

    plan = plan_builder.build("student-2", _goal("Learn Rust"), None, store, llm=_llm(json.dumps(generated)))

    assert plan.plan_title == "Rust in six weeks"
    assert plan.task_ids() == ["phase-1-task-1", "phase-1-task-2", "phase-2-task-1"]
    assert [phase.phase_number for phase in plan.phases] == [1, 2]


def test_invalid_generated_plan_falls_back() -> None:
    store = InMemoryPlanStore()

    plan = plan_builder.build("student-3", _goal(), ["8 hours a week"], store, llm=_llm('{"phases": []}'))

    assert plan.plan_title == "Three-Phase Action Plan"
    assert plan.total_task_count == 9


def test_rebuilding_resets_progress() -> None:
    store = InMemoryPlanStore()
    plan_builder.build("student-1", _goal(), None, store)
    progress_tracker.complete_task(store, "student-1", "phase-1-task-1")
    assert progress_tracker.get_progress(store, "student-1").completed_tasks == 1

    plan_builder.build("student-1", _goal("Prepare for the career fair"), None, store)

    progress = progress_tracker.get_progress(store, "student-1")
    assert (progress.overall_progress, progress.current_phase, progress.completed_tasks) == (0, 1, 0)


def test_answers_are_normalized() -> None:
    assert plan_builder._normalize_answers(None) == {}
    assert plan_builder._normalize_answers("weekends only") == {"answer_1": "weekends only"}
    assert plan_builder._normalize_answers(["beginner", "", "laptop"]) == {"answer_1": "beginner", "answer_3": "laptop"}
    assert plan_builder._normalize_answers({"level": "beginner", "skip": None}) == {"level": "beginner"}


def test_generated_plan_with_integer_task_ids_is_kept() -> None:
    generated = {
        "plan_title": "Statistics refresher",
        "total_duration": "3 weeks",
        "phases": [
            {
                "phase_number": 1,
                "phase_name": "Review",
                "duration": "3 weeks",
                "tasks": [
                    {"task_id": 1, "task_name": "Descriptive statistics"},
                    {"task_id": 2, "task_name": "Hypothesis testing"},
                ],
            }
        ],
    }

    outcome = plan_builder.parse_plan(json.dumps(generated))

    assert not isinstance(outcome, Exception)
    assert outcome.task_ids() == ["1", "2"]

    store = InMemoryPlanStore()
    plan = plan_builder.build("student-4", _goal(), None, store, llm=_llm(json.dumps(generated)))
    assert plan.plan_title == "Statistics refresher"
    assert progress_tracker.complete_task(store, "student-4", "2") is True
