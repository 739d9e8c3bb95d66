"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.medstudy import Discipline, JsonFileStore, MemoryStore, StudyStore  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


class FakeClock:
    """Deterministic clock; every call advances by one millisecond."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        self.now += 0.001
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    """Empty in-memory key-value store."""
    return MemoryStore()


@pytest.fixture
def file_store(tmp_path):
    """JSON file store in a temporary directory."""
    return JsonFileStore(tmp_path / "data")


@pytest.fixture
def builtin_disciplines():
    """Provide a sample built-in discipline set."""
    return [
        Discipline(id=1, name="Cardiology", topics=("Arrhythmias", "Heart Failure")),
        Discipline(id=2, name="Pediatrics", topics=("Neonatology",)),
    ]


@pytest.fixture
def study_store(memory_store, clock):
    """Initialized StudyStore with no built-in disciplines."""
    store = StudyStore(memory_store, clock=clock)
    store.initialize()
    return store


@pytest.fixture
def seeded_store(memory_store, clock, builtin_disciplines):
    """Initialized StudyStore with built-in disciplines."""
    store = StudyStore(memory_store, seed_disciplines=builtin_disciplines, clock=clock)
    store.initialize()
    return store
