from typing import Any

import pytest

from edgelimit.core.storage.memory import InMemoryKVStore


class FakeContext:
    """Minimal request context recording headers and thrown errors."""

    def __init__(self, env: dict[str, Any] | None = None):
        self.env = env
        self.headers_set: dict[str, str] | None = None
        self.thrown: dict[str, Any] | None = None

    def set_headers(self, headers):
        self.headers_set = dict(headers)

    def throw(self, status_code, message, headers=None):
        self.thrown = {"status": status_code, "message": message, "headers": headers}


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def make_ctx():
    return FakeContext


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> InMemoryKVStore:
    """Fresh in-memory KV namespace sharing the test clock."""
    return InMemoryKVStore(clock=clock)
