"""Gateway to the hosted text-generation API.

Calls are one-shot with a bounded timeout. Failures are returned as values so
callers can switch to their deterministic fallback without exception plumbing.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

import openai

from campus_agent.core.config import settings
from campus_agent.core.errors import ExternalServiceError
from campus_agent.observability.tracing import trace

logger = logging.getLogger(__name__)


@dataclass
class LLMResult:
    content: Optional[str] = None
    error: Optional[ExternalServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.content and self.content.strip())


class LLMClient:
    """Thin wrapper over the OpenAI chat completions API."""

    def __init__(self, *, api_key: str | None, model: str, timeout_seconds: float, client: Any = None) -> None:
        self.model = model
        if client is not None:
            self._client = client
        elif api_key:
            self._client = openai.OpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=0)
        else:
            self._client = None

    @property
    def available(self) -> bool:
        return self._client is not None

    def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        stage: str,
        trace_metadata: Optional[Dict[str, Any]] = None,
    ) -> LLMResult:
        """Request a JSON object response."""
        return self._complete(system_prompt, user_prompt, stage=stage, json_mode=True, trace_metadata=trace_metadata)

    def complete_text(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        stage: str,
        trace_metadata: Optional[Dict[str, Any]] = None,
    ) -> LLMResult:
        return self._complete(system_prompt, user_prompt, stage=stage, json_mode=False, trace_metadata=trace_metadata)

    def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        stage: str,
        json_mode: bool,
        trace_metadata: Optional[Dict[str, Any]],
    ) -> LLMResult:
        if self._client is None:
            return LLMResult(error=ExternalServiceError("OPENAI_API_KEY not configured", stage=stage))

        request: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        metadata = dict(trace_metadata or {})
        metadata.update({"model": self.model, "stage": stage, "llm_input_text": user_prompt[:500]})
        try:
            with trace(f"llm.{stage}", metadata=metadata):
                completion = self._client.chat.completions.create(**request)
        except openai.OpenAIError as exc:
            logger.warning("Text generation failed at %s: %s", stage, exc)
            return LLMResult(error=ExternalServiceError(str(exc), stage=stage))

        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            return LLMResult(error=ExternalServiceError("empty completion", stage=stage))
        return LLMResult(content=content)


@lru_cache
def get_llm_client() -> LLMClient:
    """Return the process-wide client built from settings."""
    return LLMClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        timeout_seconds=settings.llm_timeout_seconds,
    )
