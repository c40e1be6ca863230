"""Request-scoped identifiers read by logging and tracing."""
from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class RequestContext:
    request_id: Optional[str] = None
    user_id: Optional[str] = None


_current: ContextVar[RequestContext] = ContextVar("campus_request_context", default=RequestContext())


def enter_request(request_id: str, user_id: Optional[str] = None) -> Token:
    """Start a request scope; hand the token back to ``exit_request``."""
    return _current.set(RequestContext(request_id=request_id, user_id=user_id))


def exit_request(token: Token) -> None:
    _current.reset(token)


def get_request_id() -> Optional[str]:
    return _current.get().request_id


def get_user_id() -> Optional[str]:
    return _current.get().user_id


def bind_user_id(user_id: Optional[str]) -> None:
    """Attach the acting user once it is known from the request body."""
    _current.set(replace(_current.get(), user_id=user_id))
