"""Goal understanding: free text in, structured Goal out."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from campus_agent.core.errors import ExternalServiceError, InvalidInputError
from campus_agent.observability.metrics import log_metric
from campus_agent.observability.tracing import trace
from campus_agent.services.llm_client import LLMClient
from campus_agent.services.planning_models import Goal

logger = logging.getLogger(__name__)

# Scanned in order; the first keyword found anywhere in the text wins.
GOAL_TYPE_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("programming", "skill"),
    ("study", "academic"),
    ("project", "project"),
    ("career", "career"),
    ("exam", "exam"),
)
DEFAULT_GOAL_TYPE = "academic"

FALLBACK_QUESTIONS: List[str] = [
    "What is your current level of experience in this area?",
    "What is your target timeline for achieving this goal?",
    "What resources do you currently have available?",
    "How will you measure success?",
    "What specific skills or knowledge do you want to gain?",
]

FALLBACK_MILESTONES: List[str] = [
    "Week 1: Initial research and planning",
    "Week 2: Core concepts and skill building",
    "Week 3: Guided practice and application",
    "Week 4: Independent project or mock assessment",
    "Week 5: Review, optimization and next steps",
]

SYSTEM_PROMPT = (
    "You are the campus study assistant. You turn a student's stated goal into a structured "
    "analysis so a planner can build a phased action plan. Respond with JSON only."
)


def analyze(goal_text: str, context: Optional[Dict[str, Any]] = None, llm: Optional[LLMClient] = None) -> Goal:
    """Analyze a goal, preferring the LLM and falling back to keyword rules."""
    if not goal_text or not goal_text.strip():
        raise InvalidInputError("Please provide your goal")

    cleaned = goal_text.strip()
    with trace("goal.analyze", metadata={"goal_length": len(cleaned), "llm_available": bool(llm and llm.available)}):
        outcome = _try_external(cleaned, context or {}, llm)
        if isinstance(outcome, Goal):
            log_metric("goal.analysis.fallback.used", 0)
            return outcome

        logger.info("Goal analysis using keyword fallback (%s)", outcome)
        log_metric("goal.analysis.fallback.used", 1, {"stage": outcome.stage})
        return fallback_goal(cleaned)


def _try_external(goal_text: str, context: Dict[str, Any], llm: Optional[LLMClient]) -> Goal | ExternalServiceError:
    if llm is None:
        return ExternalServiceError("no text-generation client", stage="goal.analyze")

    result = llm.complete_json(SYSTEM_PROMPT, build_prompt(goal_text, context), stage="goal.analyze")
    if not result.ok:
        return result.error or ExternalServiceError("empty completion", stage="goal.analyze")
    return parse_goal(result.content or "", goal_text)


def build_prompt(goal_text: str, context: Dict[str, Any]) -> str:
    schema_json = json.dumps(Goal.model_json_schema(), indent=2)
    context_payload = json.dumps(context, indent=2, default=str) if context else "Not provided"
    return (
        "Analyze this student goal and provide a structured response.\n"
        f"Goal: '{goal_text}'\n"
        f"Student Context: {context_payload}\n\n"
        "Provide:\n"
        "1. goal_type: one of academic, skill, project, career, exam\n"
        "2. description: an enhanced description of the goal\n"
        "3. clarifying_questions: 3-5 specific questions\n"
        "4. estimated_duration: time estimate\n"
        "5. difficulty: beginner, intermediate or advanced\n"
        "6. key_milestones: the major milestones in order\n\n"
        "Return strictly valid JSON matching this schema:\n"
        f"{schema_json}"
    )


def parse_goal(content: str, goal_text: str) -> Goal | ExternalServiceError:
    """Validate an LLM response against the Goal shape."""
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as exc:
        return ExternalServiceError(f"goal response is not JSON: {exc}", stage="goal.parse")
    if not isinstance(payload, dict):
        return ExternalServiceError("goal response is not an object", stage="goal.parse")

    payload.setdefault("main_goal", goal_text)
    for enum_field in ("goal_type", "difficulty"):
        if isinstance(payload.get(enum_field), str):
            payload[enum_field] = payload[enum_field].strip().lower()
    try:
        return Goal.model_validate(payload)
    except ValidationError as exc:
        return ExternalServiceError(f"goal response failed validation: {exc.error_count()} errors", stage="goal.parse")


def detect_goal_type(goal_text: str) -> str:
    lowered = goal_text.lower()
    for keyword, goal_type in GOAL_TYPE_KEYWORDS:
        if keyword in lowered:
            return goal_type
    return DEFAULT_GOAL_TYPE


def fallback_goal(goal_text: str) -> Goal:
    """Deterministic, content-agnostic analysis used when the LLM is unavailable."""
    return Goal(
        main_goal=goal_text,
        goal_type=detect_goal_type(goal_text),
        description=f"Enhanced goal: {goal_text}",
        clarifying_questions=list(FALLBACK_QUESTIONS),
        estimated_duration="4-8 weeks",
        difficulty="intermediate",
        key_milestones=list(FALLBACK_MILESTONES),
    )
