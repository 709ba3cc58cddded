from __future__ import annotations

import pytest
import requests

from planner.domain.errors import TransientExternalError
from planner.infra.gemini import GeminiClient
from planner.services.subtasks import SubtaskGenerator, fallback_subtasks


class DummyResponse:
    def __init__(self, status_code=200, payload=None, invalid_json: bool = False):
        self.status_code = status_code
        self._payload = payload or {}
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise ValueError("not json")
        return self._payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def _client(response) -> tuple[GeminiClient, FakeSession]:
    session = FakeSession(response)
    return GeminiClient("secret", model="gemini-test", session=session, timeout=30), session


def test_returns_candidate_texts() -> None:
    payload = {
        "candidates": [
            {"content": {"parts": [{"text": '[{"title": '}, {"text": '"A"}]'}]}},
            {"content": {"parts": []}},
        ]
    }
    client, session = _client(DummyResponse(200, payload))

    assert client.generate("plan it") == ['[{"title": "A"}]', ""]

    call = session.calls[0]
    assert call["url"].endswith("/models/gemini-test:generateContent")
    assert call["json"] == {"contents": [{"parts": [{"text": "plan it"}]}]}
    assert call["headers"]["x-goog-api-key"] == "secret"
    assert call["timeout"] == 30


def test_no_candidates_is_empty_list() -> None:
    client, _ = _client(DummyResponse(200, {"promptFeedback": {}}))

    assert client.generate("plan") == []


@pytest.mark.parametrize(
    "response",
    [
        requests.ConnectionError("down"),
        requests.Timeout("slow"),
        DummyResponse(500, {"error": "oops"}),
        DummyResponse(403, {"error": "denied"}),
        DummyResponse(200, invalid_json=True),
    ],
)
def test_failures_raise_transient_error(response) -> None:
    client, _ = _client(response)

    with pytest.raises(TransientExternalError):
        client.generate("plan")


def test_non_object_body_is_rejected() -> None:
    client, _ = _client(DummyResponse(200, ["unexpected"]))

    with pytest.raises(TransientExternalError):
        client.generate("plan")


def test_textless_first_candidate_keeps_its_place() -> None:
    payload = {
        "candidates": [
            {"content": {"parts": []}, "finishReason": "SAFETY"},
            {"content": {"parts": [{"text": '[{"title": "Wrong candidate"}]'}]}},
        ]
    }
    client, _ = _client(DummyResponse(200, payload))

    assert client.generate("plan") == ["", '[{"title": "Wrong candidate"}]']

    steps = SubtaskGenerator(client).generate("Print flyers")

    assert [step.title for step in steps] == [step.title for step in fallback_subtasks("Print flyers")]
