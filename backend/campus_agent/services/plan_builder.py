"""Action plan construction from an analyzed goal."""
from __future__ import annotations

import json
import logging
from time import perf_counter
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from campus_agent.core.errors import ExternalServiceError, InvalidInputError
from campus_agent.observability.metrics import log_metric
from campus_agent.observability.tracing import trace
from campus_agent.services import progress_tracker
from campus_agent.services.llm_client import LLMClient
from campus_agent.services.plan_store import PlanStore
from campus_agent.services.planning_models import Goal, Plan

logger = logging.getLogger(__name__)

UserAnswers = Union[Mapping[str, Any], Sequence[Any], None]

FALLBACK_PHASES: List[Dict[str, Any]] = [
    {
        "phase_name": "Foundation Phase",
        "duration": "1-2 weeks",
        "description": "Build the groundwork: understand the topic and prepare your environment.",
        "tasks": [
            ("Research and understand the topic", "high", False, "3 hours", "End of week 1"),
            ("Gather necessary resources", "medium", True, "1 hour", "End of week 1"),
            ("Set up learning environment", "medium", False, "1 hour", "End of week 2"),
        ],
    },
    {
        "phase_name": "Development Phase",
        "duration": "2-4 weeks",
        "description": "Turn knowledge into practice with steady, hands-on work.",
        "tasks": [
            ("Start practical implementation", "high", False, "5 hours", "End of week 3"),
            ("Practice key concepts", "high", False, "4 hours", "End of week 4"),
            ("Build initial projects", "medium", False, "6 hours", "End of week 6"),
        ],
    },
    {
        "phase_name": "Mastery Phase",
        "duration": "1-2 weeks",
        "description": "Consolidate, apply to real problems and review what worked.",
        "tasks": [
            ("Advanced practice", "medium", False, "4 hours", "End of week 7"),
            ("Real-world application", "high", False, "5 hours", "End of week 8"),
            ("Review and optimize", "low", True, "2 hours", "End of week 8"),
        ],
    },
]

FALLBACK_AUTOMATION = {
    "automated_tasks": [
        "Schedule study sessions",
        "Track progress automatically",
        "Send reminder notifications",
    ],
    "manual_tasks": [
        "Complete practice exercises",
        "Review and reflect on learning",
        "Apply knowledge to real projects",
    ],
}

SYSTEM_PROMPT = (
    "You are the campus study planner. Break an analyzed student goal into ordered phases of concrete, "
    "checkable tasks, and separate tasks the assistant can automate (scheduling, reminders, tracking) from "
    "tasks the student must do. Respond with JSON only."
)


def build(
    user_id: str,
    goal: Optional[Goal],
    user_answers: UserAnswers,
    store: PlanStore,
    llm: Optional[LLMClient] = None,
) -> Plan:
    """Build a plan for ``goal`` and make it the user's active plan."""
    if goal is None:
        raise InvalidInputError("Goal details are required to create a plan")
    if not user_id:
        raise InvalidInputError("A user id is required to store the plan")

    answers = _normalize_answers(user_answers)
    start_time = perf_counter()
    with trace(
        "plan.build",
        metadata={"goal_type": goal.goal_type, "answers": len(answers)},
        user_id=user_id,
    ):
        outcome = _try_external(goal, answers, llm)
        fallback_used = not isinstance(outcome, Plan)
        if isinstance(outcome, Plan):
            plan = outcome
        else:
            logger.info("Plan building using fixed template for user %s (%s)", user_id, outcome)
            plan = fallback_plan()

        progress_tracker.set_plan(store, user_id, plan, goal=goal)

    latency_ms = (perf_counter() - start_time) * 1000
    metric_metadata = {"user_id": user_id, "goal_type": goal.goal_type}
    log_metric("plan.build.fallback.used", 1 if fallback_used else 0, metadata=metric_metadata)
    log_metric("plan.build.tasks_generated", plan.total_task_count, metadata=metric_metadata)
    log_metric("plan.build.latency_ms", latency_ms, metadata=metric_metadata)
    return plan


def _try_external(goal: Goal, answers: Dict[str, Any], llm: Optional[LLMClient]) -> Plan | ExternalServiceError:
    if llm is None:
        return ExternalServiceError("no text-generation client", stage="plan.build")

    result = llm.complete_json(
        SYSTEM_PROMPT,
        build_prompt(goal, answers),
        stage="plan.build",
        trace_metadata={"goal_type": goal.goal_type},
    )
    if not result.ok:
        return result.error or ExternalServiceError("empty completion", stage="plan.build")
    return parse_plan(result.content or "")


def build_prompt(goal: Goal, answers: Dict[str, Any]) -> str:
    schema_json = json.dumps(Plan.model_json_schema(), indent=2)
    answers_payload = json.dumps(answers, indent=2, default=str) if answers else "No additional context"
    return (
        "Create a detailed action plan.\n"
        f"Goal: {goal.model_dump_json(indent=2)}\n"
        f"User Answers: {answers_payload}\n\n"
        "### PLAN RULES\n"
        "- 2-5 phases, numbered from 1, each with 2-5 tasks.\n"
        "- Every task needs a priority (low, medium, high), an estimated_time and a deadline description.\n"
        "- Set can_automate only for work the assistant can do itself (scheduling, reminders, tracking).\n"
        "- automation_plan lists automatable tasks separately from manual ones.\n\n"
        "Return strictly valid JSON matching this schema:\n"
        f"{schema_json}"
    )


def parse_plan(content: str) -> Plan | ExternalServiceError:
    try:
        return Plan.model_validate_json(content)
    except ValidationError as exc:
        return ExternalServiceError(f"plan response failed validation: {exc.error_count()} errors", stage="plan.parse")


def fallback_plan() -> Plan:
    """Fixed three-phase skeleton, independent of the goal."""
    phases = []
    for phase_number, template in enumerate(FALLBACK_PHASES, start=1):
        tasks = [
            {
                "task_id": f"phase-{phase_number}-task-{task_number}",
                "task_name": name,
                "description": f"{name} ({template['phase_name']}).",
                "priority": priority,
                "can_automate": can_automate,
                "estimated_time": estimated_time,
                "deadline": deadline,
            }
            for task_number, (name, priority, can_automate, estimated_time, deadline) in enumerate(
                template["tasks"], start=1
            )
        ]
        phases.append(
            {
                "phase_number": phase_number,
                "phase_name": template["phase_name"],
                "duration": template["duration"],
                "description": template["description"],
                "tasks": tasks,
            }
        )

    return Plan.model_validate(
        {
            "plan_title": "Three-Phase Action Plan",
            "total_duration": "4-8 weeks total",
            "phases": phases,
            "automation_plan": FALLBACK_AUTOMATION,
            "resources": [
                "Online tutorials and documentation",
                "Practice exercises and projects",
                "Community forums and support",
            ],
            "success_metrics": [
                "Completion of all phases",
                "Successful project implementation",
                "Demonstrated competency",
            ],
        }
    )


def _normalize_answers(user_answers: UserAnswers) -> Dict[str, Any]:
    if not user_answers:
        return {}
    if isinstance(user_answers, Mapping):
        return {str(key): value for key, value in user_answers.items() if value not in (None, "")}
    if isinstance(user_answers, str):
        return {"answer_1": user_answers}
    return {f"answer_{index}": value for index, value in enumerate(user_answers, start=1) if value not in (None, "")}
