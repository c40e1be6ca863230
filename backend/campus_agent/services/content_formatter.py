"""Assignment draft templates used when generated text is unavailable."""
from __future__ import annotations

import logging
import re
from typing import List, Optional

from campus_agent.core.errors import InvalidInputError
from campus_agent.observability.metrics import log_metric
from campus_agent.services.llm_client import LLMClient

logger = logging.getLogger(__name__)

FOOTER = "*Generated by the Campus Companion assistant*"
ABSTRACT_CHARS = 200

DRAFT_SYSTEM_PROMPT = (
    "You help students start academic assignments. Write a structured markdown draft with the sections "
    "Problem Analysis, Requirements Analysis, Proposed Solution (Introduction, Methodology, Technical Approach, "
    "Expected Outcomes, Conclusion) and References."
)


def generate_draft(title: str, problem_statement: str, requirements: Optional[str] = None, kind: Optional[str] = None) -> str:
    """Render a fixed markdown draft for an assignment."""
    if not problem_statement or not problem_statement.strip():
        raise InvalidInputError("Problem statement is required")

    heading = (title or "").strip() or "Untitled Assignment"
    problem = problem_statement.strip()
    problem_lower = problem.lower().rstrip(".")
    return f"""# {heading}

## Problem Analysis
{problem}

## Requirements Analysis
{(requirements or "").strip() or "Standard academic requirements apply"}

## Proposed Solution

### 1. Introduction
This {(kind or "").strip() or "assignment"} addresses the problem of {problem_lower}. The solution takes a systematic approach to understanding and implementing the required functionality.

### 2. Methodology
- **Research Phase**: Conduct a thorough literature review
- **Design Phase**: Create the system architecture and design patterns
- **Implementation Phase**: Develop the solution using appropriate technologies
- **Testing Phase**: Validate the solution against the requirements

### 3. Technical Approach
```python
class Solution:
    def __init__(self):
        self.initialize()

    def initialize(self):
        # Set up initial parameters
        ...

    def solve(self):
        return self.process_data()

    def process_data(self):
        # Data processing implementation
        ...
```

### 4. Expected Outcomes
- Comprehensive understanding of the problem domain
- Efficient and scalable solution implementation
- Proper documentation and testing coverage
- Adherence to academic and industry standards

### 5. Conclusion
This solution provides a robust framework for addressing {problem_lower}. The implementation is organized for maintainability and extension.

### 6. References
1. Academic Source 1 - Relevant to {heading}
2. Industry Best Practices Guide
3. Technical Documentation Standards
4. Testing and Validation Methodologies

---
{FOOTER}"""


def to_fixed_template(text: str, title: str) -> str:
    """Wrap free-form text in an IEEE-style document layout."""
    if not text or not text.strip():
        raise InvalidInputError("Content is required")

    body = text.strip()
    abstract = body[:ABSTRACT_CHARS] + ("..." if len(body) > ABSTRACT_CHARS else "")
    return f"""IEEE STANDARD FORMAT

{((title or "").strip() or "Untitled").upper()}

Abstract - {abstract}

I. INTRODUCTION

{body}

II. METHODOLOGY

The proposed approach follows IEEE conventions for academic documentation and technical implementation.

III. RESULTS AND DISCUSSION

The implementation demonstrates effective problem-solving with adherence to academic standards.

IV. CONCLUSION

This work presents a solution that meets the specified requirements.

REFERENCES

[1] Author, "Title," Journal Name, vol. X, no. Y, pp. Z-Z, Year.
[2] Author, "Title," Conference Proceedings, pp. Z-Z, Year.
[3] Author, "Title," Book Publisher, Year.

---
Generated in IEEE format by the Campus Companion assistant"""


def draft_assignment(
    title: str,
    problem_statement: str,
    requirements: Optional[str] = None,
    kind: Optional[str] = None,
    llm: Optional[LLMClient] = None,
) -> tuple[str, bool]:
    """Return ``(draft, fallback_used)``; the fixed template is used whenever generation fails."""
    if not problem_statement or not problem_statement.strip():
        raise InvalidInputError("Problem statement is required")

    if llm is not None:
        prompt = (
            f"Title: {title}\n"
            f"Type: {kind or 'assignment'}\n"
            f"Problem statement: {problem_statement.strip()}\n"
            f"Requirements: {requirements or 'Standard academic requirements apply'}"
        )
        result = llm.complete_text(DRAFT_SYSTEM_PROMPT, prompt, stage="assignment.draft")
        if result.ok:
            log_metric("assignment.draft.fallback.used", 0)
            return (result.content or "").strip(), False
        logger.info("Assignment draft using fixed template (%s)", result.error)

    log_metric("assignment.draft.fallback.used", 1)
    return generate_draft(title, problem_statement, requirements, kind), True


def draft_sections(text: str) -> List[str]:
    """Section titles (``##``/``###`` headings) in document order, without numbering."""
    sections = []
    for match in re.finditer(r"^#{2,3}\s+(?:\d+\.\s*)?(.+?)\s*$", text, flags=re.MULTILINE):
        sections.append(match.group(1))
    return sections


def word_count(text: str) -> int:
    return len(text.split())
