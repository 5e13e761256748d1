from __future__ import annotations

import base64
import io
import threading
from datetime import datetime, timezone
from typing import Optional

import pytest
from PIL import Image

from src.faceguard.faceguard.attendance.ledger import AttendanceLedger
from src.faceguard.faceguard.core.exceptions import OracleFailure
from src.faceguard.faceguard.registry.model import RegistrationCandidate
from src.faceguard.faceguard.registry.store import UserRegistry


def make_image_b64(color=(200, 120, 80), fmt: str = "PNG") -> str:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), color).save(buf, format=fmt)
    return base64.b64encode(buf.getvalue()).decode("ascii")


class InMemorySnapshots:
    backend_name = "memory"

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.blobs: dict[str, str] = dict(initial or {})
        self.saves: list[str] = []

    def load(self, name: str) -> Optional[str]:
        return self.blobs.get(name)

    def save(self, name: str, payload: str) -> None:
        self.saves.append(name)
        self.blobs[name] = payload


class FakeOracle:
    """Scripted oracle: returns (or raises) the next queued answer, counting calls."""

    def __init__(self, *answers):
        self._answers = list(answers)
        self.calls = []

    def reply_with(self, answer) -> None:
        self._answers = [answer]

    def compare(self, request, *, timeout: float):
        self.calls.append(request)
        answer = self._answers.pop(0) if len(self._answers) > 1 else self._answers[0]
        if isinstance(answer, BaseException):
            raise answer
        return answer


class BlockingOracle:
    """Oracle that waits on ``release`` before answering; ``entered`` is set once called."""

    def __init__(self, answer):
        self.answer = answer
        self.entered = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def compare(self, request, *, timeout: float):
        self.calls += 1
        self.entered.set()
        if not self.release.wait(5):
            raise OracleFailure("test oracle was never released")
        return self.answer


class SequentialIds:
    def __init__(self, prefix: str):
        self._prefix = prefix
        self._n = 0

    def __call__(self) -> str:
        self._n += 1
        return f"{self._prefix}{self._n}"


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 8, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def image_b64() -> str:
    return make_image_b64()


@pytest.fixture
def snapshots() -> InMemorySnapshots:
    return InMemorySnapshots()


@pytest.fixture
def registry(snapshots) -> UserRegistry:
    return UserRegistry(snapshots, tz=timezone.utc, id_factory=SequentialIds("u"))


@pytest.fixture
def ledger(snapshots) -> AttendanceLedger:
    return AttendanceLedger(snapshots, tz=timezone.utc, id_factory=SequentialIds("r"))


@pytest.fixture
def ana(registry, image_b64, fixed_now):
    return registry.register(
        RegistrationCandidate(name="Ana", department="Engineering", reference_image=image_b64),
        now=fixed_now,
    )
