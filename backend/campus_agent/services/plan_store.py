"""Per-user storage of the active plan and its completion state."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from threading import Lock
from typing import Callable, Dict, Optional, Tuple

from sqlalchemy.orm import Session, sessionmaker

from campus_agent.core.config import settings
from campus_agent.db.models.agentic_plan import AgenticPlan
from campus_agent.db.session import get_session_factory
from campus_agent.services.planning_models import Goal, Plan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanRecord:
    plan: Plan
    goal: Optional[Goal] = None
    completed_task_ids: Tuple[str, ...] = field(default_factory=tuple)


Mutator = Callable[[PlanRecord], PlanRecord]


class _UserLocks:
    """Hands out one lock per user key."""

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: Dict[str, Lock] = {}

    def for_user(self, user_id: str) -> Lock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = Lock()
            return lock


class PlanStore:
    """Base interface for plan storage.

    Implementations must serialize ``set`` and ``update`` for the same user;
    different users never block each other.
    """

    def get(self, user_id: str) -> Optional[PlanRecord]:
        raise NotImplementedError

    def set(self, user_id: str, record: PlanRecord) -> None:
        raise NotImplementedError

    def update(self, user_id: str, mutator: Mutator) -> Optional[PlanRecord]:
        """Apply ``mutator`` atomically; return the stored result or None when the user has no plan."""
        raise NotImplementedError


class InMemoryPlanStore(PlanStore):
    def __init__(self) -> None:
        self._records: Dict[str, PlanRecord] = {}
        self._locks = _UserLocks()

    def get(self, user_id: str) -> Optional[PlanRecord]:
        return self._records.get(user_id)

    def set(self, user_id: str, record: PlanRecord) -> None:
        with self._locks.for_user(user_id):
            self._records[user_id] = record

    def update(self, user_id: str, mutator: Mutator) -> Optional[PlanRecord]:
        with self._locks.for_user(user_id):
            current = self._records.get(user_id)
            if current is None:
                return None
            updated = mutator(current)
            self._records[user_id] = updated
            return updated


class SqlAlchemyPlanStore(PlanStore):
    """Stores one ``agentic_plans`` row per user."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self._locks = _UserLocks()

    def get(self, user_id: str) -> Optional[PlanRecord]:
        with self._session_factory() as db:
            row = db.get(AgenticPlan, user_id)
            return _row_to_record(row) if row else None

    def set(self, user_id: str, record: PlanRecord) -> None:
        with self._locks.for_user(user_id), self._session_factory() as db:
            row = _locked_row(db, user_id)
            if row is None:
                row = AgenticPlan(user_id=user_id)
            row.plan_json = record.plan.model_dump(mode="json")
            row.goal_json = record.goal.model_dump(mode="json") if record.goal else None
            row.completed_task_ids = list(record.completed_task_ids)
            db.add(row)
            try:
                db.commit()
            except Exception:
                db.rollback()
                raise
        logger.debug("Stored plan for user %s", user_id)

    def update(self, user_id: str, mutator: Mutator) -> Optional[PlanRecord]:
        with self._locks.for_user(user_id), self._session_factory() as db:
            row = _locked_row(db, user_id)
            if row is None:
                return None
            updated = mutator(_row_to_record(row))
            row.completed_task_ids = list(updated.completed_task_ids)
            db.add(row)
            try:
                db.commit()
            except Exception:
                db.rollback()
                raise
            return updated


def _locked_row(db: Session, user_id: str) -> Optional[AgenticPlan]:
    # FOR UPDATE guards against other processes; SQLite ignores it.
    return db.query(AgenticPlan).filter(AgenticPlan.user_id == user_id).with_for_update().one_or_none()


def _row_to_record(row: AgenticPlan) -> PlanRecord:
    goal = Goal.model_validate(row.goal_json) if row.goal_json else None
    return PlanRecord(
        plan=Plan.model_validate(row.plan_json),
        goal=goal,
        completed_task_ids=tuple(row.completed_task_ids or ()),
    )


@lru_cache
def get_plan_store() -> PlanStore:
    """Return the configured plan store."""
    backend = settings.plan_store_backend.lower()
    if backend == "database":
        return SqlAlchemyPlanStore(get_session_factory())
    if backend != "memory":
        logger.warning("Unknown PLAN_STORE_BACKEND %r; using in-memory store", backend)
    return InMemoryPlanStore()
