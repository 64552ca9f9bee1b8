"""
Shared pytest fixtures and configuration for all tests.
"""
import os

import pytest
from unittest.mock import MagicMock

from hypothesis import settings, Verbosity, Phase

from ingestion.service import LogIngestionService
from storage.memory_store import InMemoryLogStore

# Hypothesis profiles for property-based tests
settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    deadline=None,
    print_blob=True,
)

settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    derandomize=True,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    phases=[Phase.explicit, Phase.reuse, Phase.generate],
)

settings.register_profile(
    "fast",
    max_examples=20,
    verbosity=Verbosity.normal,
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


@pytest.fixture
def log_store() -> InMemoryLogStore:
    """A fresh, empty log store per test."""
    return InMemoryLogStore()


@pytest.fixture
def mock_observability() -> MagicMock:
    """Observability service double that records metric, audit and span calls."""
    observability = MagicMock()
    # Spans must not swallow exceptions raised inside them
    observability.trace_operation.return_value.__exit__.return_value = False
    return observability


@pytest.fixture
def ingestion_service(log_store, mock_observability) -> LogIngestionService:
    """Ingestion service wired to the per-test store."""
    return LogIngestionService(log_store, observability=mock_observability)


@pytest.fixture
def valid_log_batch() -> list:
    """Four valid log entries covering every component."""
    return [
        {"timestamp": 1638360000000, "component": "battery", "value": 75.2},
        {"timestamp": 1638360030000, "component": "motor", "value": 85.0},
        {"timestamp": 1638360060000, "component": "gps", "value": 0.045},
        {"timestamp": 1638360090000, "component": "battery", "value": 72.8},
    ]


@pytest.fixture
def raw_telemetry_samples() -> list:
    """Raw device samples with the usual kinds of corruption."""
    return [
        {"timestamp": 1000, "speed": 60, "battery": 90, "motorTemp": 70,
         "gps": {"lat": 52.1, "lng": 4.3}},
        {"timestamp": "2000", "speed": "20km/h", "battery": "89.5%", "motorTemp": None,
         "gps": {"lat": "52.2", "lng": None}},
        {"timestamp": None, "speed": 65, "battery": 88, "motorTemp": 71},
        {"timestamp": 3000, "speed": 345, "battery": 88, "motorTemp": 72,
         "gps": {"lat": 52.3, "lng": 4.5}},
        {"timestamp": 4000, "speed": 80, "battery": "n/a", "motorTemp": "95.5"},
    ]
