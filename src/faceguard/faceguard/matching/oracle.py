from __future__ import annotations

from typing import Any, Mapping, Protocol, Union

from .model import OracleRequest

RawOracleResponse = Union[str, bytes, Mapping[str, Any]]


class RecognitionOracle(Protocol):
    """External 1:N face comparison service.

    Implementations return the raw structured answer (JSON text or an already
    decoded mapping) and raise ``OracleFailure`` on transport problems. Schema
    checking is the orchestrator's job, since the oracle is not trusted.
    """

    def compare(self, request: OracleRequest, *, timeout: float) -> RawOracleResponse:
        raise NotImplementedError
