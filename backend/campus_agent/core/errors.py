"""Error taxonomy for the planning engine."""
from __future__ import annotations


class PlannerError(Exception):
    """Base class for planning engine errors."""


class InvalidInputError(PlannerError, ValueError):
    """A required field is missing or empty; surfaced to callers as a client error."""


class ExternalServiceError(PlannerError):
    """The text-generation call failed or returned unusable output.

    Never surfaced to callers: it is returned as a value and triggers the
    deterministic fallback.
    """

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage
