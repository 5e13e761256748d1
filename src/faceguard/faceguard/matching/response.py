from __future__ import annotations

import json
import math
from typing import Any, Mapping

from ..core.exceptions import OracleFailure
from .model import OracleResponse
from .oracle import RawOracleResponse


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid confidence.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_oracle_response(raw: RawOracleResponse) -> OracleResponse:
    """Check an oracle answer against the response schema.

    Required: ``confidence`` (number; NaN and infinities rejected) and ``reasoning`` (string).
    Optional: ``matchedUserId`` (string or null). Anything else is an
    ``OracleFailure``, never a silent no-match.
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")

    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise OracleFailure(f"Oracle response is not valid JSON: {e}") from e
    else:
        data = raw

    if not isinstance(data, Mapping):
        raise OracleFailure(f"Oracle response must be an object, got {type(data).__name__}")

    if "confidence" not in data:
        raise OracleFailure("Oracle response is missing 'confidence'")
    if "reasoning" not in data:
        raise OracleFailure("Oracle response is missing 'reasoning'")

    confidence = data["confidence"]
    if not _is_number(confidence):
        raise OracleFailure(f"Oracle confidence is not a number: {confidence!r}")
    try:
        value = float(confidence)
    except OverflowError:
        # Integer beyond float range: out of range, so the orchestrator clamps it.
        value = math.inf if confidence > 0 else -math.inf
    else:
        if not math.isfinite(value):
            raise OracleFailure(f"Oracle confidence is not a finite number: {confidence!r}")

    reasoning = data["reasoning"]
    if not isinstance(reasoning, str):
        raise OracleFailure(f"Oracle reasoning is not a string: {reasoning!r}")

    matched = data.get("matchedUserId")
    if matched is not None and not isinstance(matched, str):
        raise OracleFailure(f"Oracle matchedUserId is not a string or null: {matched!r}")

    return OracleResponse(
        confidence=value,
        reasoning=reasoning,
        matched_user_id=matched or None,
    )
