"""
Pytest configuration and shared fixtures

Fun fact: Files named conftest.py are discovered automatically by pytest and
their fixtures are available to every test below them.
"""

import pytest
from prometheus_client import REGISTRY

from optimist import Optimistic, OptimistConfig, optimistic
from tests.helpers import counter_reducer, trace_reducer


@pytest.fixture
def config() -> OptimistConfig:
    """Provide default wrapper configuration"""
    return OptimistConfig()


@pytest.fixture
def step() -> Optimistic:
    """Optimistic wrapper around the trace reducer, already initialized to ()"""
    wrapper = optimistic(trace_reducer)
    wrapper(None, {})
    return wrapper


@pytest.fixture
def initial(step: Optimistic):
    """Freshly initialized wrapped state with no history"""
    return step(None, {})


@pytest.fixture
def counter_step() -> Optimistic:
    return optimistic(counter_reducer)


@pytest.fixture
def metric():
    """
    Read a prometheus sample, treating an unobserved label set as zero

    Metrics are process-wide, so tests compare deltas rather than absolutes.
    """

    def read(name: str, labels: dict[str, str] | None = None) -> float:
        return REGISTRY.get_sample_value(name, labels or {}) or 0.0

    return read
