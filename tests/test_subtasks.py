from __future__ import annotations

import logging

import pytest

from planner.config import Settings
from planner.domain.entities import Subtask
from planner.domain.errors import TransientExternalError
from planner.infra.gemini import GeminiClient
from planner.services.subtasks import SubtaskGenerator, build_subtask_generator, parse_subtasks


class FakeProvider:
    def __init__(self, candidates=None, error: Exception | None = None) -> None:
        self.candidates = candidates if candidates is not None else []
        self.error = error
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> list[str]:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.candidates


def _titles(steps: list[Subtask]) -> list[str]:
    return [step.title for step in steps]


def test_vendor_fallback_without_provider() -> None:
    steps = SubtaskGenerator().generate("Find Vendors")

    assert _titles(steps) == ["Create application form", "Email past vendors", "Collect payments"]
    assert all(step.is_done is False for step in steps)


def test_venue_fallback_is_case_insensitive() -> None:
    steps = SubtaskGenerator().generate("Book VENUE downtown")

    assert _titles(steps) == ["Research capacity options", "Schedule site visits", "Review contract terms"]


def test_generic_fallback() -> None:
    steps = SubtaskGenerator().generate("Print flyers")

    assert _titles(steps) == ["Draft initial plan (AI Offline)", "Review with team", "Execute"]


def test_parses_array_wrapped_in_prose_and_fences() -> None:
    reply = (
        "Sure! Here is the plan:\n```json\n"
        '[{"title": "Call caterer", "is_done": true}, {"title": "Confirm menu", "is_done": false}]\n'
        "```\nGood luck."
    )
    provider = FakeProvider([reply])

    steps = SubtaskGenerator(provider).generate("Arrange food", "Lunch for 200")

    assert steps == [Subtask("Call caterer", False), Subtask("Confirm menu", False)]
    assert 'Task: "Arrange food"' in provider.prompts[0]
    assert 'Context: "Lunch for 200"' in provider.prompts[0]


def test_provider_error_falls_back_and_logs(caplog) -> None:
    provider = FakeProvider(error=TransientExternalError("timeout"))

    with caplog.at_level(logging.WARNING):
        steps = SubtaskGenerator(provider).generate("Find vendors")

    assert _titles(steps)[0] == "Create application form"
    assert "timeout" in caplog.text


def test_unexpected_provider_failure_falls_back() -> None:
    steps = SubtaskGenerator(FakeProvider(error=RuntimeError("boom"))).generate("Print flyers")

    assert _titles(steps)[0] == "Draft initial plan (AI Offline)"


@pytest.mark.parametrize(
    "candidates",
    [
        [],
        ["I could not help with that."],
        ["] nothing [ here"],
        ['[{"title": "Step 1", "is_done": false}, {"title": ]'],
        ["[]"],
        ['[{"title": "Step 1"}, "Step 2"]'],
        ['[{"title": "Step 1"}, {"title": "   "}]'],
        ['{"title": "not an array"}'],
    ],
)
def test_unusable_replies_fall_back(candidates: list[str]) -> None:
    steps = SubtaskGenerator(FakeProvider(candidates)).generate("Book venue")

    assert _titles(steps) == ["Research capacity options", "Schedule site visits", "Review contract terms"]


def test_only_first_candidate_is_used() -> None:
    provider = FakeProvider(["no json here", '[{"title": "ignored"}]'])

    steps = SubtaskGenerator(provider).generate("Print flyers")

    assert _titles(steps)[0] == "Draft initial plan (AI Offline)"


def test_parse_subtasks_strips_titles() -> None:
    assert parse_subtasks('[{"title": "  Book hall "}]') == [Subtask("Book hall")]


def test_build_without_key_uses_no_provider() -> None:
    generator = build_subtask_generator(Settings(database_url="sqlite://"))

    assert generator._provider is None


def test_build_with_key_uses_gemini() -> None:
    settings = Settings(database_url="sqlite://", gemini_api_key="key", ai_timeout_seconds=12.0)

    generator = build_subtask_generator(settings)

    assert isinstance(generator._provider, GeminiClient)
    assert generator._provider.timeout == 12.0
