"""Active agentic plan per user."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, String, func

from campus_agent.db.base import Base
from campus_agent.db.types import JSONBCompat


class AgenticPlan(Base):
    __tablename__ = "agentic_plans"

    # One active plan per user; a new goal overwrites the row.
    user_id = Column(String(length=64), primary_key=True)
    plan_json = Column("plan", JSONBCompat, nullable=False)
    goal_json = Column("goal", JSONBCompat, nullable=True)
    completed_task_ids = Column(JSONBCompat, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
