from __future__ import annotations

import json
import logging
from typing import Any, Optional, Protocol

from planner.config import Settings
from planner.domain.entities import Subtask
from planner.domain.errors import TransientExternalError
from planner.infra.gemini import GeminiClient

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """\
You are an expert event planner.
Break down this task into 3-5 concrete, actionable steps.
Task: "{title}"
Context: "{context}"

Return ONLY raw JSON in this format:
[{{"title": "Step 1", "is_done": false}}, {{"title": "Step 2", "is_done": false}}]
"""

VENUE_STEPS = ("Research capacity options", "Schedule site visits", "Review contract terms")
VENDOR_STEPS = ("Create application form", "Email past vendors", "Collect payments")
OFFLINE_STEPS = ("Draft initial plan (AI Offline)", "Review with team", "Execute")


class TextGenerationProvider(Protocol):
    def generate(self, prompt: str) -> list[str]:
        """Return the candidate texts for ``prompt``; raise TransientExternalError on failure."""
        ...


class SubtaskGenerator:
    """Breaks a task into steps with an LLM, falling back to fixed templates.

    ``generate`` never raises: a missing provider, a failed call or any reply
    that is not a clean JSON array of steps yields the keyword fallback.
    """

    def __init__(self, provider: Optional[TextGenerationProvider] = None) -> None:
        self._provider = provider

    def generate(self, title: str, context: str | None = None) -> list[Subtask]:
        if self._provider is None:
            return self._fallback(title, "no AI provider configured")

        prompt = PROMPT_TEMPLATE.format(title=title, context=context or "")
        try:
            candidates = self._provider.generate(prompt)
        except TransientExternalError as exc:
            return self._fallback(title, f"provider error: {exc}")
        except Exception as exc:
            logger.exception("Unexpected AI provider failure")
            return self._fallback(title, f"unexpected provider error: {exc!r}")

        if not candidates:
            return self._fallback(title, "no candidates returned")

        steps = parse_subtasks(candidates[0])
        if steps is None:
            return self._fallback(title, "could not parse a JSON array of steps")
        return steps

    @staticmethod
    def _fallback(title: str, reason: str) -> list[Subtask]:
        logger.warning("AI subtasks unavailable (%s); using offline steps for %r", reason, title)
        return fallback_subtasks(title)


def parse_subtasks(text: str) -> list[Subtask] | None:
    """Parse the JSON array between the first ``[`` and the last ``]``.

    Returns None unless every element is a step with a non-blank title.
    """
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end <= start:
        return None

    try:
        raw = json.loads(text[start : end + 1])
    except ValueError:
        return None

    if not isinstance(raw, list) or not raw:
        return None

    steps = []
    for item in raw:
        title = _step_title(item)
        if title is None:
            return None
        steps.append(Subtask(title=title, is_done=False))
    return steps


def _step_title(item: Any) -> str | None:
    if not isinstance(item, dict):
        return None
    title = item.get("title")
    if not isinstance(title, str) or not title.strip():
        return None
    return title.strip()


def fallback_subtasks(title: str) -> list[Subtask]:
    lowered = (title or "").lower()
    if "venue" in lowered:
        steps = VENUE_STEPS
    elif "vendor" in lowered:
        steps = VENDOR_STEPS
    else:
        steps = OFFLINE_STEPS
    return [Subtask(title=step, is_done=False) for step in steps]


def build_subtask_generator(settings: Settings) -> SubtaskGenerator:
    if not settings.gemini_api_key:
        return SubtaskGenerator()

    client = GeminiClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        timeout=settings.ai_timeout_seconds,
    )
    return SubtaskGenerator(client)
