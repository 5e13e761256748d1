from __future__ import annotations

import threading
import time
from datetime import datetime, tzinfo
from typing import Callable, Optional

from ..attendance.ledger import AttendanceLedger
from ..capture.frame_source import FrameSource
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_DISPLAY_INTERVAL_SECONDS
from ..core.enums import SessionState, SubmitKind
from ..core.exceptions import CaptureFailure, InvalidTransitionError, SessionBusyError
from ..logging_config import get_logger
from ..matching.orchestrator import MatchOrchestrator
from ..registry.store import UserRegistry
from . import messages
from .model import ScanResolution

logger = get_logger(__name__)

TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.IDLE: frozenset({SessionState.CAPTURING}),
    SessionState.CAPTURING: frozenset({SessionState.AWAITING, SessionState.RESOLVED}),
    SessionState.AWAITING: frozenset({SessionState.RESOLVED}),
    SessionState.RESOLVED: frozenset({SessionState.IDLE}),
}

BUSY_STATES = frozenset({SessionState.CAPTURING, SessionState.AWAITING})


class AttendanceSession:
    """Kiosk scan cycle: IDLE -> CAPTURING -> AWAITING -> RESOLVED -> IDLE.

    A resolution stays on screen for ``display_interval`` seconds or until the
    next scan request, whichever comes first. Scans requested while a cycle is
    capturing or waiting on the oracle are rejected, not queued.
    """

    def __init__(
        self,
        registry: UserRegistry,
        orchestrator: MatchOrchestrator,
        ledger: AttendanceLedger,
        *,
        display_interval: float = DEFAULT_DISPLAY_INTERVAL_SECONDS,
        tz: Optional[tzinfo] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] | None = None,
    ):
        self._registry = registry
        self._orchestrator = orchestrator
        self._ledger = ledger
        self._display_interval = float(display_interval)
        self._clock = clock
        self._now = now or (lambda: now_local(tz))

        self._lock = threading.Lock()
        self._state = SessionState.IDLE
        self._resolution: Optional[ScanResolution] = None
        self._resolved_mono: Optional[float] = None

    # -- state -----------------------------------------------------------

    def _transition_locked(self, target: SessionState) -> None:
        if target not in TRANSITIONS[self._state]:
            raise InvalidTransitionError(f"{self._state.value} -> {target.value}")
        logger.debug("Session %s -> %s", self._state.value, target.value)
        self._state = target

    def _transition(self, target: SessionState) -> None:
        with self._lock:
            self._transition_locked(target)

    def _expire_locked(self) -> None:
        if self._state != SessionState.RESOLVED or self._resolved_mono is None:
            return
        if self._clock() - self._resolved_mono >= self._display_interval:
            self._transition_locked(SessionState.IDLE)
            self._resolution = None
            self._resolved_mono = None

    @property
    def state(self) -> SessionState:
        with self._lock:
            self._expire_locked()
            return self._state

    @property
    def resolution(self) -> Optional[ScanResolution]:
        """Resolution currently on display, if any."""
        with self._lock:
            self._expire_locked()
            return self._resolution

    @property
    def scan_enabled(self) -> bool:
        return self.state not in BUSY_STATES and self._registry.count() > 0

    def status(self) -> dict:
        with self._lock:
            self._expire_locked()
            state = self._state
            resolution = self._resolution
        return {
            "state": state.value,
            "scan_enabled": state not in BUSY_STATES and self._registry.count() > 0,
            "resolution": resolution.to_dict() if resolution else None,
        }

    # -- scan cycle ------------------------------------------------------

    def _begin(self) -> None:
        with self._lock:
            self._expire_locked()
            if self._state in BUSY_STATES:
                logger.warning("Scan rejected: session is %s", self._state.value)
                raise SessionBusyError("A scan is already in progress")
            if self._state == SessionState.RESOLVED:
                self._transition_locked(SessionState.IDLE)
                self._resolution = None
                self._resolved_mono = None
            self._transition_locked(SessionState.CAPTURING)

    def _resolve(self, resolution: ScanResolution) -> ScanResolution:
        with self._lock:
            self._transition_locked(SessionState.RESOLVED)
            self._resolution = resolution
            self._resolved_mono = self._clock()
        logger.info("Scan resolved: %s (%s)", resolution.outcome.value, resolution.message)
        return resolution

    def _abort(self) -> None:
        # Unexpected error mid-cycle: free the kiosk instead of staying busy forever.
        with self._lock:
            self._state = SessionState.IDLE
            self._resolution = None
            self._resolved_mono = None

    def scan(self, frame_source: FrameSource) -> ScanResolution:
        """Run one capture/identify/record cycle and return its resolution.

        Raises ``SessionBusyError`` when another cycle is still in flight.
        """
        self._begin()
        try:
            try:
                frame = frame_source.capture_frame()
            except CaptureFailure as e:
                logger.warning("Capture failed: %s", e)
                return self._resolve(messages.capture_failed(str(e), now=self._now()))

            self._transition(SessionState.AWAITING)
            match = self._orchestrator.identify(frame, self._registry.list_identities())

            now = self._now()
            if match.oracle_failed:
                return self._resolve(messages.oracle_failure(now=now))
            if not match.is_match:
                return self._resolve(messages.unknown_face(match, now=now))

            outcome = self._ledger.submit(match, self._registry.lookup, now)
            if outcome.kind == SubmitKind.RECORDED and outcome.record:
                return self._resolve(messages.matched_new(outcome.record, now=now))
            if outcome.kind == SubmitKind.REJECTED_DUPLICATE and outcome.record:
                return self._resolve(messages.matched_duplicate(outcome.record, match, now=now))
            return self._resolve(messages.unknown_face(match, now=now))
        except BaseException:
            self._abort()
            raise
