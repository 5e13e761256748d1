"""
Gemini-backed recognition oracle.

Sends the reference images and the live frame to the ``generateContent`` REST
endpoint as inline image parts and asks for a JSON answer matching the
response schema (confidence, reasoning, matchedUserId).
"""
from __future__ import annotations

from typing import Any, Dict, List

import requests

from ..common.images import guess_mime_type
from ..core.constants import DEFAULT_GEMINI_API_BASE, DEFAULT_GEMINI_MODEL
from ..core.exceptions import OracleFailure
from ..logging_config import get_logger
from .model import OracleRequest
from .oracle import RecognitionOracle

logger = get_logger(__name__)

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "matchedUserId": {
            "type": "STRING",
            "description": "The ID of the matched user, or null if no match found.",
            "nullable": True,
        },
        "confidence": {
            "type": "NUMBER",
            "description": "Confidence score between 0 and 1.",
        },
        "reasoning": {
            "type": "STRING",
            "description": "Brief explanation of why the face matched or didn't match.",
        },
    },
    "required": ["confidence", "reasoning"],
}


def _image_part(image: str) -> Dict[str, Any]:
    return {"inline_data": {"mime_type": guess_mime_type(image), "data": image}}


def build_payload(request: OracleRequest) -> Dict[str, Any]:
    parts: List[Dict[str, Any]] = [{"text": request.instruction}]
    for index, ref in enumerate(request.references, start=1):
        parts.append({"text": f"Reference User {index} (ID: {ref.identity_id}):"})
        parts.append(_image_part(ref.image))
    parts.append({"text": "Target Image (Live Camera):"})
    parts.append(_image_part(request.target_image))

    return {
        "contents": [{"role": "user", "parts": parts}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }


def extract_text(body: Dict[str, Any]) -> str:
    """Concatenated text of the first candidate; OracleFailure when there is none."""
    try:
        parts = body["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as e:
        feedback = body.get("promptFeedback") if isinstance(body, dict) else None
        raise OracleFailure(f"Empty response from Gemini (promptFeedback={feedback!r})") from e

    text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
    if not text.strip():
        raise OracleFailure("Empty response from Gemini")
    return text


class GeminiOracle(RecognitionOracle):
    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_GEMINI_MODEL,
        api_base: str = DEFAULT_GEMINI_API_BASE,
        session: requests.Session | None = None,
    ):
        self._api_key = api_key
        self._model = model
        self._api_base = api_base.rstrip("/")
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self._api_base}/models/{self._model}:generateContent"

    def compare(self, request: OracleRequest, *, timeout: float) -> str:
        if not self._api_key:
            raise OracleFailure("GEMINI_API_KEY is not configured")

        logger.info("Asking %s to compare frame against %d reference(s)", self._model, len(request.references))
        try:
            response = self._session.post(
                self.url,
                json=build_payload(request),
                headers={"x-goog-api-key": self._api_key},
                timeout=timeout,
            )
        except requests.exceptions.Timeout as e:
            raise OracleFailure(f"Timeout calling {self.url}") from e
        except requests.exceptions.ConnectionError as e:
            raise OracleFailure(f"Connection error calling {self.url}") from e
        except requests.exceptions.RequestException as e:
            raise OracleFailure(f"Error calling Gemini: {e}") from e

        if not response.ok:
            raise OracleFailure(f"Gemini returned {response.status_code}: {response.text[:200]}")

        try:
            body = response.json()
        except ValueError as e:
            raise OracleFailure("Gemini returned a non-JSON body") from e

        return extract_text(body)
