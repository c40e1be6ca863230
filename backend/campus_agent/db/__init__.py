"""SQLAlchemy metadata and ORM models for plan persistence."""

from campus_agent.db.base import Base
from campus_agent.db.models import AgenticPlan

__all__ = ["AgenticPlan", "Base"]
