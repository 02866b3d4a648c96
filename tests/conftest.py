from __future__ import annotations

import pytest
from _fakes import FakeClock, FakeLoop, FakeRenderer


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def loop(clock: FakeClock) -> FakeLoop:
    return FakeLoop(clock)


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()
