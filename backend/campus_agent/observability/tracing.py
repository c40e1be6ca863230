"""Tracing utilities wrapping Opik."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional

from campus_agent.core.context import get_request_id
from campus_agent.observability.client import get_opik_client

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from opik.api_objects.trace.trace_client import Trace
else:  # pragma: no cover - typing helper
    Trace = object  # type: ignore[assignment]

logger = logging.getLogger(__name__)


@contextmanager
def trace(
    name: str,
    metadata: Optional[Dict[str, Any]] = None,
    user_id: Optional[str] = None,
    request_id: Optional[str] = None,
) -> Iterator[Optional["Trace"]]:
    """Wrap a planner step in an Opik trace.

    Yields None when Opik is off. ``request_id`` defaults to the id bound by
    RequestIDMiddleware. An exception escaping the block is recorded on the
    trace and re-raised.
    """
    span = _start(name, _trace_metadata(metadata, user_id, request_id or get_request_id()))
    try:
        yield span
    except Exception as exc:
        _record_error(span, name, exc)
        raise
    finally:
        _end(span, name)


def _trace_metadata(
    metadata: Optional[Dict[str, Any]],
    user_id: Optional[str],
    request_id: Optional[str],
) -> Dict[str, Any]:
    payload = {key: value for key, value in (metadata or {}).items() if value is not None}
    if user_id:
        payload.setdefault("user_id", str(user_id))
    if request_id:
        payload.setdefault("request_id", request_id)
    return payload


def _start(name: str, metadata: Dict[str, Any]) -> Optional["Trace"]:
    client = get_opik_client()
    if not client:
        return None
    try:
        return client.trace(name=name, metadata=metadata or None)
    except Exception as exc:  # pragma: no cover - SDK transport errors
        logger.debug("Unable to start Opik trace %s: %s", name, exc)
        return None


def _record_error(span: Optional["Trace"], name: str, exc: Exception) -> None:
    if not span:
        return
    try:
        span.update(error_info={"message": str(exc), "type": type(exc).__name__})
    except Exception:  # pragma: no cover
        logger.debug("Failed to attach error info to Opik trace %s", name, exc_info=True)


def _end(span: Optional["Trace"], name: str) -> None:
    if not span:
        return
    try:
        span.end()
    except Exception:  # pragma: no cover
        logger.debug("Failed to close Opik trace %s cleanly", name, exc_info=True)
