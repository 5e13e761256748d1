from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from conftest import BlockingOracle, FakeOracle

from src.faceguard.faceguard.capture.frame_source import Base64FrameSource
from src.faceguard.faceguard.core.enums import MessageCategory, ScanOutcome, SessionState
from src.faceguard.faceguard.core.exceptions import CaptureFailure, SessionBusyError
from src.faceguard.faceguard.matching.orchestrator import MatchOrchestrator
from src.faceguard.faceguard.session.state_machine import AttendanceSession


class FakeClock:
    def __init__(self):
        self.value = 1000.0

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class FailingCamera:
    def capture_frame(self) -> str:
        raise CaptureFailure("Permission denied")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_session(registry, ledger, clock, fixed_now):
    def _make(oracle, *, timeout=1.0):
        return AttendanceSession(
            registry,
            MatchOrchestrator(oracle, timeout=timeout),
            ledger,
            display_interval=5,
            clock=clock,
            now=lambda: fixed_now,
        )

    return _make


@pytest.fixture
def frame(image_b64):
    return Base64FrameSource(image_b64)


def test_scenario_a_empty_registry(make_session, ledger, frame):
    oracle = FakeOracle({"matchedUserId": "u1", "confidence": 0.9, "reasoning": "x"})
    session = make_session(oracle)

    resolution = session.scan(frame)

    assert resolution.outcome == ScanOutcome.UNKNOWN
    assert resolution.confidence == 0.0
    assert oracle.calls == []
    assert ledger.list_records() == ()
    assert session.scan_enabled is False


def test_scenario_b_match_then_duplicate(make_session, ledger, ana, frame, clock):
    oracle = FakeOracle({"matchedUserId": ana.id, "confidence": 0.92, "reasoning": "same face"})
    session = make_session(oracle)

    first = session.scan(frame)
    clock.advance(6)
    second = session.scan(frame)

    assert first.outcome == ScanOutcome.MATCHED_NEW
    assert first.category == MessageCategory.SUCCESS
    assert first.message == "Welcome, Ana!"
    assert "92%" in first.details
    assert first.record.confidence == pytest.approx(0.92)
    assert second.outcome == ScanOutcome.MATCHED_DUPLICATE
    assert second.category == MessageCategory.INFO
    assert len(ledger.list_records()) == 1


def test_scenario_c_timeout_is_system_error(make_session, ledger, ana, frame):
    oracle = BlockingOracle({"matchedUserId": ana.id, "confidence": 0.9, "reasoning": "late"})
    session = make_session(oracle, timeout=0.05)
    try:
        resolution = session.scan(frame)
    finally:
        oracle.release.set()

    assert resolution.outcome == ScanOutcome.ORACLE_FAILURE
    assert resolution.category == MessageCategory.ERROR
    assert resolution.message != "Face not recognized."
    assert ledger.list_records() == ()
    assert session.state == SessionState.RESOLVED


def test_unknown_face_is_recognition_negative(make_session, ana, frame):
    oracle = FakeOracle({"matchedUserId": None, "confidence": 0.1, "reasoning": "different person"})

    resolution = make_session(oracle).scan(frame)

    assert resolution.outcome == ScanOutcome.UNKNOWN
    assert resolution.category == MessageCategory.UNKNOWN
    assert resolution.message == "Face not recognized."
    assert resolution.details == "different person"


def test_capture_failure_never_reaches_oracle(make_session, ana):
    oracle = FakeOracle({"matchedUserId": ana.id, "confidence": 0.9, "reasoning": "x"})
    session = make_session(oracle)
    states = []
    original = session._transition_locked

    def spy(target):
        states.append(target)
        original(target)

    session._transition_locked = spy

    resolution = session.scan(FailingCamera())

    assert resolution.outcome == ScanOutcome.CAPTURE_FAILED
    assert resolution.category == MessageCategory.ERROR
    assert oracle.calls == []
    assert SessionState.AWAITING not in states


@pytest.mark.parametrize("payload", [None, "", "%%%", "bm90IGFuIGltYWdl", 12345, ["frame"]])
def test_bad_posted_frame_is_capture_failure(make_session, ana, payload):
    oracle = FakeOracle({"matchedUserId": ana.id, "confidence": 0.9, "reasoning": "x"})

    resolution = make_session(oracle).scan(Base64FrameSource(payload))

    assert resolution.outcome == ScanOutcome.CAPTURE_FAILED
    assert oracle.calls == []


def test_scan_while_awaiting_is_rejected(make_session, ana, frame):
    oracle = BlockingOracle({"matchedUserId": ana.id, "confidence": 0.9, "reasoning": "ok"})
    session = make_session(oracle, timeout=5)
    results = []

    worker = threading.Thread(target=lambda: results.append(session.scan(frame)))
    worker.start()
    try:
        assert oracle.entered.wait(2)
        assert session.state == SessionState.AWAITING
        assert session.scan_enabled is False
        with pytest.raises(SessionBusyError):
            session.scan(frame)
    finally:
        oracle.release.set()
        worker.join(5)

    assert oracle.calls == 1
    assert results[0].outcome == ScanOutcome.MATCHED_NEW


def test_resolution_expires_after_display_interval(make_session, ana, frame, clock):
    session = make_session(FakeOracle({"matchedUserId": None, "confidence": 0.1, "reasoning": "no"}))
    session.scan(frame)

    clock.advance(4.9)
    assert session.state == SessionState.RESOLVED
    assert session.resolution is not None

    clock.advance(0.1)
    assert session.state == SessionState.IDLE
    assert session.resolution is None
    assert session.status()["resolution"] is None


def test_next_scan_replaces_resolution_before_interval(make_session, ana, frame, clock):
    oracle = FakeOracle(
        {"matchedUserId": None, "confidence": 0.1, "reasoning": "no"},
        {"matchedUserId": ana.id, "confidence": 0.8, "reasoning": "yes"},
    )
    session = make_session(oracle)

    session.scan(frame)
    clock.advance(1)
    second = session.scan(frame)

    assert second.outcome == ScanOutcome.MATCHED_NEW
    assert session.resolution == second


def test_unexpected_error_frees_the_session(make_session, ana, frame, snapshots, fixed_now):
    session = make_session(FakeOracle({"matchedUserId": ana.id, "confidence": 0.9, "reasoning": "ok"}))

    def broken_save(name, payload):
        raise OSError("disk gone")

    snapshots.save = broken_save
    with pytest.raises(OSError):
        session.scan(frame)

    assert session.state == SessionState.IDLE


def test_status_is_json_ready(make_session, ana, frame, fixed_now):
    session = make_session(FakeOracle({"matchedUserId": ana.id, "confidence": 0.75, "reasoning": "ok"}))
    session.scan(frame)

    status = session.status()

    assert status["state"] == "RESOLVED"
    assert status["scan_enabled"] is True
    assert status["resolution"]["outcome"] == "MATCHED_NEW"
    assert status["resolution"]["identity_name"] == "Ana"
    assert status["resolution"]["resolved_at"] == fixed_now.isoformat()


def test_matched_new_details_use_record_time(make_session, ana, frame, fixed_now):
    resolution = make_session(FakeOracle({"matchedUserId": ana.id, "confidence": 0.5, "reasoning": "ok"})).scan(frame)

    assert resolution.details == f"Attendance marked at {fixed_now.strftime('%H:%M:%S')} (Confidence: 50%)"
    assert resolution.resolved_at - fixed_now == timedelta(0)
