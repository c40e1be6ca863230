"""ORM models exposed for metadata discovery."""
from campus_agent.db.models.agentic_plan import AgenticPlan

__all__ = [
    "AgenticPlan",
]
