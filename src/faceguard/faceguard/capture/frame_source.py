from __future__ import annotations

from typing import Optional, Protocol

from ..common.images import decode_base64_image, strip_data_url
from ..core.exceptions import CaptureFailure


class FrameSource(Protocol):
    """Camera collaborator: one still frame per call, or ``CaptureFailure``."""

    def capture_frame(self) -> str:
        raise NotImplementedError


class Base64FrameSource(FrameSource):
    """Frame captured by the browser camera widget and posted with the scan request."""

    def __init__(self, payload: Optional[str]):
        self._payload = payload

    def capture_frame(self) -> str:
        if self._payload is None or (isinstance(self._payload, str) and not self._payload.strip()):
            raise CaptureFailure("No camera frame was captured")
        if not isinstance(self._payload, str):
            raise CaptureFailure(f"Camera frame must be base64 text, got {type(self._payload).__name__}")
        try:
            decode_base64_image(self._payload)
        except ValueError as e:
            raise CaptureFailure(f"Camera frame is unusable: {e}") from e
        return strip_data_url(self._payload)
