"""FastAPI dependencies shared by the API routes."""
from __future__ import annotations

from campus_agent.services.llm_client import LLMClient, get_llm_client
from campus_agent.services.plan_store import PlanStore, get_plan_store


def get_store() -> PlanStore:
    """Plan store for the request. Tests override this with a fresh store."""
    return get_plan_store()


def get_llm() -> LLMClient:
    return get_llm_client()
