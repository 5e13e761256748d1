from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..core.constants import REASON_NO_IDENTITIES, REASON_ORACLE_ERROR


@dataclass(frozen=True)
class MatchResult:
    """Per-scan match decision. Never persisted.

    ``matched_identity_id`` is None for "no match". ``oracle_failed`` separates a
    broken oracle call from a clean "unknown face".
    """

    matched_identity_id: Optional[str]
    confidence: float
    reasoning: Optional[str] = None
    oracle_failed: bool = False

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence!r}")

    @property
    def is_match(self) -> bool:
        return self.matched_identity_id is not None

    @classmethod
    def no_match(cls, reasoning: Optional[str] = None) -> "MatchResult":
        return cls(matched_identity_id=None, confidence=0.0, reasoning=reasoning)

    @classmethod
    def empty_registry(cls) -> "MatchResult":
        return cls.no_match(REASON_NO_IDENTITIES)

    @classmethod
    def oracle_error(cls) -> "MatchResult":
        return cls(matched_identity_id=None, confidence=0.0, reasoning=REASON_ORACLE_ERROR, oracle_failed=True)


@dataclass(frozen=True)
class ReferenceImage:
    identity_id: str
    image: str


@dataclass(frozen=True)
class OracleRequest:
    """1:N comparison request: one target frame against labelled references."""

    target_image: str
    references: Sequence[ReferenceImage]
    instruction: str


@dataclass(frozen=True)
class OracleResponse:
    """Schema-checked oracle answer. Confidence is as reported (not yet clamped)."""

    confidence: float
    reasoning: str
    matched_user_id: Optional[str] = None
