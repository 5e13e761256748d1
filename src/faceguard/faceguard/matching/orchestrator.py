from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Sequence

from ..common.images import strip_data_url
from ..core.constants import DEFAULT_ORACLE_TIMEOUT_SECONDS, MATCH_INSTRUCTION
from ..core.exceptions import OracleFailure
from ..logging_config import get_logger
from ..registry.model import Identity
from .model import MatchResult, OracleRequest, ReferenceImage
from .oracle import RawOracleResponse, RecognitionOracle
from .response import parse_oracle_response

logger = get_logger(__name__)


def clamp_confidence(value: float) -> float:
    return min(1.0, max(0.0, value))


class MatchOrchestrator:
    """Turn a captured frame plus the registry into a ``MatchResult``.

    The oracle is the only slow, untrusted step: it runs on a worker thread
    bounded by ``timeout`` and its answer is schema-checked and cross-checked
    against the registry snapshot before it becomes a result. No retries.
    """

    def __init__(
        self,
        oracle: RecognitionOracle,
        *,
        timeout: float = DEFAULT_ORACLE_TIMEOUT_SECONDS,
        instruction: str = MATCH_INSTRUCTION,
    ):
        self._oracle = oracle
        self._timeout = float(timeout)
        self._instruction = instruction

    def build_request(self, frame: str, registry: Sequence[Identity]) -> OracleRequest:
        return OracleRequest(
            target_image=strip_data_url(frame),
            references=[ReferenceImage(identity_id=i.id, image=i.reference_image) for i in registry],
            instruction=self._instruction,
        )

    def _call_oracle(self, request: OracleRequest) -> RawOracleResponse:
        # A fresh worker per call: an oracle that never returns must not block the next scan.
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="oracle")
        try:
            future = executor.submit(self._oracle.compare, request, timeout=self._timeout)
            try:
                return future.result(timeout=self._timeout)
            except FutureTimeout as e:
                future.cancel()
                raise OracleFailure(f"Oracle did not answer within {self._timeout:.1f}s") from e
            except OracleFailure:
                raise
            except Exception as e:
                raise OracleFailure(f"Oracle call raised {type(e).__name__}: {e}") from e
        finally:
            executor.shutdown(wait=False)

    def identify(self, frame: str, registry: Sequence[Identity]) -> MatchResult:
        if not registry:
            return MatchResult.empty_registry()

        request = self.build_request(frame, registry)
        try:
            response = parse_oracle_response(self._call_oracle(request))
        except OracleFailure as e:
            logger.error("Oracle failure: %s", e)
            return MatchResult.oracle_error()

        confidence = clamp_confidence(response.confidence)
        if confidence != response.confidence:
            logger.warning("Oracle confidence %r clamped to %.2f", response.confidence, confidence)

        matched = response.matched_user_id
        if matched is not None and matched not in {i.id for i in registry}:
            logger.warning("Oracle matched unknown identity id %r, treating as no match", matched)
            matched = None

        return MatchResult(
            matched_identity_id=matched,
            confidence=confidence,
            reasoning=response.reasoning,
        )
