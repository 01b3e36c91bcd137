"""VOICEVOX engine HTTP client.

Responsibilities:
- Send the audio-query, synthesis, speaker-list, and version requests.
- Map transport failures and non-success responses to synthesis exceptions
  with enough metadata for room-scoped diagnostics.
"""

from __future__ import annotations

import json
import socket
from typing import Any

import requests

from ..errors import SynthesisError, SynthesisRejected, SynthesisUnavailable


class VoicevoxClient:
    """Minimal requests-based client for a VOICEVOX-compatible engine."""

    _MAX_ENGINE_MESSAGE_CHARS = 180

    def __init__(
        self,
        *,
        base_url: str = "http://localhost:50021",
        timeout_seconds: float = 30.0,
    ) -> None:
        """Initialize engine address and per-request timeout."""

        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def audio_query(self, *, text: str, speaker: int) -> dict[str, Any]:
        """Return the engine's acoustic query document for `text` at `speaker`."""

        response = self._request(
            "POST",
            "/audio_query",
            params={"text": text, "speaker": speaker},
        )
        payload = self._decode_json(response, endpoint_path="/audio_query")
        if not isinstance(payload, dict):
            raise SynthesisRejected(
                "Engine audio query is not a JSON object.",
                failure_kind="malformed_response",
                status_code=response.status_code,
            )
        return payload

    def synthesis(self, *, query: dict[str, Any], speaker: int) -> bytes:
        """Render audio bytes for a (possibly modified) query document."""

        response = self._request(
            "POST",
            "/synthesis",
            params={"speaker": speaker},
            json_payload=query,
        )
        audio = bytes(response.content)
        if not audio:
            raise SynthesisRejected(
                "Engine synthesis response is empty.",
                failure_kind="empty_audio",
                status_code=response.status_code,
            )
        return audio

    def speakers(self) -> list[Any]:
        """Return the raw speaker list reported by the engine."""

        response = self._request("GET", "/speakers")
        payload = self._decode_json(response, endpoint_path="/speakers")
        if not isinstance(payload, list):
            raise SynthesisRejected(
                "Engine speaker list is not a JSON array.",
                failure_kind="malformed_response",
                status_code=response.status_code,
            )
        return payload

    def version(self) -> str:
        """Return the engine version string."""

        response = self._request("GET", "/version")
        try:
            payload = json.loads(bytes(response.content).decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return bytes(response.content).decode("utf-8", errors="replace").strip()
        return str(payload).strip()

    def _request(
        self,
        method: str,
        endpoint_path: str,
        *,
        params: dict[str, Any] | None = None,
        json_payload: dict[str, Any] | None = None,
    ) -> requests.Response:
        """Execute one engine request and map failures consistently."""

        endpoint = f"{self.base_url}{endpoint_path}"
        try:
            response = requests.request(
                method,
                endpoint,
                params=params,
                json=json_payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise self._http_error_to_synthesis_error(exc, endpoint_path) from exc
        except requests.RequestException as exc:
            failure_kind = self._classify_transport_failure(exc)
            if failure_kind == "timeout":
                detail = f"Engine request `{endpoint_path}` timed out."
            else:
                detail = (
                    f"Engine request `{endpoint_path}` transport error: "
                    f"{self._short_message(str(exc))}"
                )
            raise SynthesisUnavailable(detail, failure_kind=failure_kind) from exc
        except TimeoutError as exc:
            raise SynthesisUnavailable(
                f"Engine request `{endpoint_path}` timed out.",
                failure_kind="timeout",
            ) from exc
        return response

    def _decode_json(self, response: requests.Response, *, endpoint_path: str) -> Any:
        """Decode a JSON response body or raise a rejection."""

        try:
            return json.loads(bytes(response.content).decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise SynthesisRejected(
                f"Engine returned invalid JSON for `{endpoint_path}`.",
                failure_kind="malformed_response",
                status_code=response.status_code,
            ) from exc

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap engine message length for logs and CLI output."""

        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_ENGINE_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_ENGINE_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _extract_engine_message(cls, exc: requests.HTTPError) -> str:
        """Extract a concise message from an engine error body."""

        response = exc.response
        if response is None:
            return ""
        body = bytes(response.content).decode("utf-8", errors="replace").strip()
        if not body:
            return ""
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._short_message(body)
        if isinstance(payload, dict) and "detail" in payload:
            return cls._short_message(json.dumps(payload["detail"], ensure_ascii=False))
        return cls._short_message(body)

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        """Classify network-layer failures into diagnostic kinds."""

        if isinstance(reason, TimeoutError | socket.timeout | requests.Timeout):
            return "timeout"
        return "transport"

    @classmethod
    def _http_error_to_synthesis_error(
        cls, exc: requests.HTTPError, endpoint_path: str
    ) -> SynthesisError:
        """Convert HTTP errors into rejections with status metadata."""

        status_code = exc.response.status_code if exc.response is not None else 0
        engine_message = cls._extract_engine_message(exc)
        if engine_message:
            detail = f"Engine rejected `{endpoint_path}` (HTTP {status_code}): {engine_message}"
        else:
            detail = f"Engine rejected `{endpoint_path}` (HTTP {status_code})."

        failure_kind = "invalid_request" if status_code == 422 else "http_error"
        return SynthesisRejected(detail, failure_kind=failure_kind, status_code=status_code)
