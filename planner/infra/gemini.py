from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from planner.domain.errors import TransientExternalError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiClient:
    """Minimal ``generateContent`` client returning the candidate texts."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        base_url: str = GEMINI_BASE_URL,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.session = session or requests.Session()
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    def generate(self, prompt: str) -> list[str]:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}
        try:
            resp = self.session.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransientExternalError(f"Gemini request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise TransientExternalError(f"Gemini HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise TransientExternalError("Gemini returned a non-JSON body") from exc

        logger.debug("Gemini response: %s", body)
        return _candidate_texts(body)


def _candidate_texts(body: Any) -> list[str]:
    if not isinstance(body, dict):
        raise TransientExternalError("Gemini response is not an object")
    candidates = body.get("candidates") or []
    if not isinstance(candidates, list):
        raise TransientExternalError("Gemini candidates is not a list")

    texts: list[str] = []
    for candidate in candidates:
        content = candidate.get("content") if isinstance(candidate, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            parts = []
        # keep position: an empty first candidate must not promote the next one
        texts.append(
            "".join(part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str))
        )
    return texts
