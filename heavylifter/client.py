"""
HTTP client for a running Heavy Lifter server.
"""

from __future__ import annotations

import re
from typing import Any, Optional

import requests


class HeavyLifterAPIError(Exception):
    """Error response (or no response) from the Heavy Lifter API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class HeavyLifterClient:
    """Thin wrapper around the JSON API."""

    def __init__(self, base_url: str = "http://localhost:5001", timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()

    @staticmethod
    def _compact_error_body(error_body: str, limit: int = 400) -> str:
        compact = re.sub(r"\s+", " ", error_body).strip()
        if len(compact) > limit:
            return compact[:limit] + "..."
        return compact

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as exc:
            raise HeavyLifterAPIError(f"Connection error via {url}: {exc}") from exc

        if response.status_code >= 400:
            try:
                message = response.json().get("error") or response.text
            except ValueError:
                message = response.text
            raise HeavyLifterAPIError(
                f"HTTP {response.status_code} via {url}: {self._compact_error_body(str(message))}",
                status_code=response.status_code,
            )
        return response

    def _post(self, path: str, payload: dict) -> dict[str, Any]:
        return self._request("POST", path, json=payload).json()

    def _get(self, path: str, params: dict) -> dict[str, Any]:
        return self._request("GET", path, params=params).json()

    # ── Conversation ──────────────────────────────────────────────

    def start_conversation(self, user_id: Optional[str] = None) -> dict:
        return self._post("/api/voice/conversation", {"action": "start", "userId": user_id})

    def send_message(self, conversation_id: str, message: str) -> dict:
        return self._post("/api/voice/conversation", {
            "action": "send_message",
            "conversationId": conversation_id,
            "message": message,
        })

    def get_conversation(self, conversation_id: str) -> dict:
        return self._post("/api/voice/conversation", {
            "action": "get_conversation",
            "conversationId": conversation_id,
        })

    def end_conversation(self, conversation_id: str) -> dict:
        return self._post("/api/voice/conversation", {
            "action": "end_conversation",
            "conversationId": conversation_id,
        })

    def process_requirements(self, transcript: str, history: Optional[list[dict]] = None,
                             current_state: Optional[str] = None) -> dict:
        payload: dict[str, Any] = {"transcript": transcript, "history": history or []}
        if current_state:
            payload["currentState"] = current_state
        return self._post("/api/voice/process-requirements", payload)

    # ── Generation and builds ─────────────────────────────────────

    def generate(self, idea: str, platforms: list[str], build_system: str = "npm") -> dict:
        return self._post("/api/generate", {
            "idea": idea,
            "platforms": platforms,
            "buildSystem": build_system,
        })

    def start_build(self, app: dict) -> str:
        return self._post("/api/build/start", {"app": app})["buildId"]

    def build_status(self, build_id: str) -> dict:
        return self._get("/api/build/status", {"build_id": build_id})

    def stop_build(self, build_id: str) -> bool:
        return bool(self._post("/api/build/stop", {"buildId": build_id}).get("stopped"))

    def download(self, build_id: str, platform: str) -> str:
        return self._request(
            "GET", "/api/build/download", params={"build_id": build_id, "platform": platform}
        ).text
