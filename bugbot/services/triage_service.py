"""
Issue triage service.

Assigns a developer and a priority to a small batch of issues. A remote LLM
classifier is tried first; when it is unavailable, fails, or replies with
something that is not a list of assignments, the deterministic round-robin
classifier answers instead.
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

import requests  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from bugbot.constants import TRIAGE_DEVELOPERS, TRIAGE_PRIORITIES
from bugbot.enums import Priority
from bugbot.logging import get_logger

logger = get_logger("triage")

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

PROMPT_TEMPLATE = """You are BugBot AI.

You are given a list of GitHub issues.
For each issue, assign:
- a "priority" (high, medium, or low)
- a "developer" ({developers}) based on the issue's complexity or title

Return *only* valid JSON in this format:
[
  {{
    "issue_title": "...",
    "repo": "...",
    "assigned_dev": "...",
    "priority": "high/medium/low"
  }}
]

Here are the issues:
{issues}
"""


class TriageItem(BaseModel):
    title: str
    repo: str
    body: str = ""


class Assignment(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    issue_title: str
    repo: str
    assigned_dev: str
    priority: Priority


_assignments_adapter = TypeAdapter(list[Assignment])


class Classifier(ABC):
    """Something that can assign developers and priorities to issues."""

    @abstractmethod
    def classify(self, items: Sequence[TriageItem]) -> Optional[list[Assignment]]:
        """Return assignments, or None when this classifier cannot answer."""


class RoundRobinClassifier(Classifier):
    """Deterministic fallback: cycles through developers and priorities."""

    def classify(self, items: Sequence[TriageItem]) -> list[Assignment]:
        return [
            Assignment(
                issue_title=item.title,
                repo=item.repo,
                assigned_dev=TRIAGE_DEVELOPERS[i % len(TRIAGE_DEVELOPERS)],
                priority=TRIAGE_PRIORITIES[i % len(TRIAGE_PRIORITIES)],
            )
            for i, item in enumerate(items)
        ]


class RemoteClassifier(Classifier):
    """LLM classifier behind an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        url: str,
        model: str = "gpt-4o-mini",
        timeout: float = 60,
    ):
        self.api_key = api_key
        self.url = url
        self.model = model
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "RemoteClassifier":
        return cls(
            api_key=settings.openrouter_api_key,
            url=settings.openrouter_url,
            model=settings.triage_model,
        )

    def build_prompt(self, items: Sequence[TriageItem]) -> str:
        issues = json.dumps([item.model_dump() for item in items], indent=2)
        return PROMPT_TEMPLATE.format(developers=", ".join(TRIAGE_DEVELOPERS), issues=issues)

    def classify(self, items: Sequence[TriageItem]) -> Optional[list[Assignment]]:
        if not self.api_key:
            logger.debug("remote_classifier_unconfigured")
            return None

        try:
            response = requests.post(
                self.url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self.model,
                    "messages": [{"role": "user", "content": self.build_prompt(items)}],
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("classification_request_failed", error=str(e))
            return None

        if response.status_code != 200:
            logger.error("classification_request_failed", status=response.status_code)
            return None

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning("classification_response_malformed", error=str(e))
            return None

        return parse_assignments(content)


def parse_assignments(content: str) -> Optional[list[Assignment]]:
    """Parse a model reply into assignments; None if it is not a valid JSON list."""
    if not isinstance(content, str):
        return None
    text = _FENCE_PATTERN.sub("", content.strip())
    try:
        return _assignments_adapter.validate_json(text)
    except ValidationError as e:
        logger.warning("classification_unparseable", errors=e.error_count())
        return None


def items_from_issues(issues: Iterable) -> list[TriageItem]:
    """
    Build triage items from stored GlobalIssue rows.

    The store keeps no issue body, so items built here carry an empty body
    and the classifier works from title and repository alone.
    """
    return [TriageItem(title=issue.title, repo=issue.repo_name) for issue in issues]


def triage_issues(
    items: Sequence[TriageItem],
    classifier: Optional[Classifier] = None,
    fallback: Optional[Classifier] = None,
    batch_size: int = 5,
) -> list[Assignment]:
    """
    Assign developers and priorities to the first ``batch_size`` items.

    The remote classifier's answer is used when it returns one; otherwise the
    fallback (round-robin by default) classifies the same batch.
    """
    batch = list(items[:batch_size])
    if not batch:
        return []

    fallback = fallback or RoundRobinClassifier()
    assignments = classifier.classify(batch) if classifier is not None else None

    if assignments is None:
        logger.info("triage_fallback_used", items=len(batch))
        assignments = fallback.classify(batch) or []
    else:
        logger.info("triage_complete", items=len(batch), assignments=len(assignments))

    return assignments
