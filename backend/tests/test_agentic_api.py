from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from campus_agent.api.deps import get_llm, get_store
from campus_agent.main import app
from campus_agent.services.llm_client import LLMClient
from campus_agent.services.plan_store import InMemoryPlanStore


@pytest.fixture()
def client():
    store = InMemoryPlanStore()
    offline_llm = LLMClient(api_key=None, model="test-model", timeout_seconds=1)

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_llm] = lambda: offline_llm
    with TestClient(app) as test_client:
        yield test_client, store
    app.dependency_overrides.clear()


def _analyze(client: TestClient, goal: str) -> dict:
    response = client.post("/agentic/understand-goals", json={"goal": goal})
    assert response.status_code == 200
    return response.json()["analysis"]


def _create_plan(client: TestClient, user_id: str, goal: str = "I want to learn machine learning in 3 months") -> dict:
    analysis = _analyze(client, goal)
    response = client.post(
        "/agentic/create-plan",
        json={"user_id": user_id, "goal_details": analysis, "user_answers": {"experience": "beginner"}},
    )
    assert response.status_code == 200
    return response.json()["plan"]


def test_understand_goals_returns_analysis_and_questions(client):
    test_client, _ = client

    response = test_client.post(
        "/agentic/understand-goals",
        json={"goal": "I want to learn machine learning in 3 months", "context": {"year": "second"}},
        headers={"X-Request-Id": "req-goal-1"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["analysis"]["goal_type"] == "academic"
    assert len(data["analysis"]["clarifying_questions"]) == 5
    assert data["requires_input"] is True
    assert data["request_id"] == "req-goal-1"


def test_understand_goals_rejects_blank_goal(client):
    test_client, _ = client

    response = test_client.post("/agentic/understand-goals", json={"goal": "   "})

    assert response.status_code == 400
    assert response.json()["detail"] == "Please provide your goal"


def test_understand_goals_requires_goal_field(client):
    test_client, _ = client

    response = test_client.post("/agentic/understand-goals", json={})

    assert response.status_code == 422


def test_create_plan_and_fetch_it(client):
    test_client, _ = client
    plan = _create_plan(test_client, "student-1")

    assert len(plan["phases"]) == 3
    assert sum(len(phase["tasks"]) for phase in plan["phases"]) == 9

    response = test_client.get("/agentic/my-plan", params={"user_id": "student-1"})
    assert response.status_code == 200
    data = response.json()
    assert data["has_plan"] is True
    assert data["plan"]["plan_title"] == plan["plan_title"]
    assert data["progress"] == {"overall_progress": 0, "current_phase": 1, "completed_tasks": 0}


def test_my_plan_without_plan(client):
    test_client, _ = client

    response = test_client.get("/agentic/my-plan", params={"user_id": "nobody"})

    assert response.status_code == 200
    assert response.json() == {"has_plan": False, "plan": None, "progress": None}


def test_create_plan_rejects_incomplete_goal(client):
    test_client, _ = client

    response = test_client.post(
        "/agentic/create-plan",
        json={"user_id": "student-1", "goal_details": {"main_goal": "Learn Rust"}},
    )

    assert response.status_code == 422


def test_complete_task_updates_progress(client):
    test_client, _ = client
    plan = _create_plan(test_client, "student-1")
    task_ids = [task["task_id"] for phase in plan["phases"] for task in phase["tasks"]]

    for task_id in task_ids[:3]:
        response = test_client.post("/agentic/complete-task", json={"user_id": "student-1", "task_id": task_id})
        assert response.status_code == 200
        assert response.json()["success"] is True

    repeat = test_client.post("/agentic/complete-task", json={"user_id": "student-1", "task_id": task_ids[0]})
    assert repeat.json()["success"] is True
    assert repeat.json()["progress"] == {"overall_progress": 33, "current_phase": 2, "completed_tasks": 3}


def test_complete_task_for_unknown_task_or_user(client):
    test_client, _ = client
    _create_plan(test_client, "student-1")

    unknown_task = test_client.post("/agentic/complete-task", json={"user_id": "student-1", "task_id": "nope"})
    assert unknown_task.status_code == 200
    assert unknown_task.json()["success"] is False

    no_plan = test_client.post("/agentic/complete-task", json={"user_id": "ghost", "task_id": "phase-1-task-1"})
    assert no_plan.status_code == 200
    assert no_plan.json()["success"] is False
    assert no_plan.json()["progress"]["completed_tasks"] == 0


def test_new_plan_resets_progress(client):
    test_client, _ = client
    _create_plan(test_client, "student-1")
    test_client.post("/agentic/complete-task", json={"user_id": "student-1", "task_id": "phase-1-task-1"})

    _create_plan(test_client, "student-1", goal="Get an internship: career planning")

    data = test_client.get("/agentic/my-plan", params={"user_id": "student-1"}).json()
    assert data["progress"]["completed_tasks"] == 0


def test_automation_status(client):
    test_client, _ = client
    _create_plan(test_client, "student-1")

    response = test_client.get("/agentic/automation-status", params={"user_id": "student-1"})

    assert response.status_code == 200
    data = response.json()
    assert "Schedule study sessions" in data["automated_tasks"]
    assert len(data["manual_tasks"]) == 3
