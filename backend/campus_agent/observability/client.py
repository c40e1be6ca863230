"""Lazily constructed Opik client shared by the tracing helpers."""
from __future__ import annotations

import logging
from threading import Lock
from typing import Optional

from campus_agent.core.config import settings

try:
    from opik import Opik
except ImportError:  # pragma: no cover
    Opik = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class _ClientSlot:
    """Process-wide client; construction is attempted at most once until reset."""

    def __init__(self) -> None:
        self.lock = Lock()
        self.client: Optional["Opik"] = None
        self.attempted = False


_slot = _ClientSlot()


def _build_client() -> Optional["Opik"]:
    if not settings.opik_enabled:
        logger.debug("Opik disabled; planner traces stay local.")
        return None
    if not settings.opik_api_key:
        logger.warning("OPIK_ENABLED is true but OPIK_API_KEY is missing; skipping Opik init.")
        return None

    try:
        client = Opik(project_name=settings.opik_project, api_key=settings.opik_api_key)
    except Exception as exc:  # pragma: no cover - SDK raises assorted errors on bad credentials
        logger.warning("Failed to initialize Opik, planner tracing will be disabled: %s", exc)
        return None

    logger.info("Opik enabled for planner traces (project=%s).", settings.opik_project)
    return client


def init_opik() -> Optional["Opik"]:
    """Build the client on first call and return it (None when tracing is off)."""
    if Opik is None:
        return None

    with _slot.lock:
        if not _slot.attempted:
            _slot.attempted = True
            _slot.client = _build_client()
        return _slot.client


def get_opik_client() -> Optional["Opik"]:
    if _slot.client is not None:
        return _slot.client
    return init_opik()


def reset_opik_client() -> None:
    """Forget the cached client so the next call re-reads settings."""
    with _slot.lock:
        _slot.client = None
        _slot.attempted = False
