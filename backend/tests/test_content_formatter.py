from __future__ import annotations

from types import SimpleNamespace

import pytest

from campus_agent.core.errors import InvalidInputError
from campus_agent.services import content_formatter
from campus_agent.services.llm_client import LLMClient


def test_draft_contains_expected_sections() -> None:
    draft = content_formatter.generate_draft(
        "Binary Search Trees",
        "Implement a balanced binary search tree.",
        "Use Python 3",
        "lab report",
    )

    assert draft.startswith("# Binary Search Trees")
    assert "Use Python 3" in draft
    assert "This lab report addresses the problem of implement a balanced binary search tree." in draft
    assert content_formatter.draft_sections(draft) == [
        "Problem Analysis",
        "Requirements Analysis",
        "Proposed Solution",
        "Introduction",
        "Methodology",
        "Technical Approach",
        "Expected Outcomes",
        "Conclusion",
        "References",
    ]


def test_draft_defaults_for_missing_fields() -> None:
    draft = content_formatter.generate_draft("", "Explain TCP congestion control")

    assert draft.startswith("# Untitled Assignment")
    assert "Standard academic requirements apply" in draft


def test_draft_requires_problem_statement() -> None:
    with pytest.raises(InvalidInputError):
        content_formatter.generate_draft("Title", "   ")


def test_ieee_layout_truncates_abstract() -> None:
    body = "x" * 250

    document = content_formatter.to_fixed_template(body, "Neural networks")

    assert document.startswith("IEEE STANDARD FORMAT")
    assert "NEURAL NETWORKS" in document
    assert f"Abstract - {'x' * 200}..." in document
    assert "I. INTRODUCTION" in document and "REFERENCES" in document


def test_ieee_layout_requires_content() -> None:
    with pytest.raises(InvalidInputError):
        content_formatter.to_fixed_template("", "Title")


def test_draft_assignment_uses_generated_text_when_available() -> None:
    def create(**kwargs):
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="  ## Intro\nGenerated  "))])

    fake = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    llm = LLMClient(api_key=None, model="test-model", timeout_seconds=1, client=fake)

    draft, fallback_used = content_formatter.draft_assignment("Essay", "Discuss ethics in AI", llm=llm)

    assert fallback_used is False
    assert draft == "## Intro\nGenerated"


def test_draft_assignment_falls_back_without_client() -> None:
    llm = LLMClient(api_key=None, model="test-model", timeout_seconds=1)

    draft, fallback_used = content_formatter.draft_assignment("Essay", "Discuss ethics in AI", llm=llm)

    assert fallback_used is True
    assert draft.startswith("# Essay")
