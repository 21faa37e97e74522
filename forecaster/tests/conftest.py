"""Shared test fixtures."""

import json
from pathlib import Path

import pytest

from forecaster.ingest.rate_limiter import AdmissionGate
from forecaster.ingest.yr_client import YrClient
from forecaster.storage.cache_store import MemoryCacheStore
from forecaster.tests.helpers import YR_TEST_URL, FakeClock


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def belgrade_payload(fixtures_dir: Path) -> dict:
    with open(fixtures_dir / "yr_compact_belgrade.json") as f:
        return json.load(f)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gate() -> AdmissionGate:
    """Gate that never actually sleeps."""
    return AdmissionGate(min_interval=0.0, max_concurrent=5, sleep=lambda _: None)


@pytest.fixture
def yr_client(gate: AdmissionGate, clock: FakeClock) -> YrClient:
    return YrClient(gate, base_url=YR_TEST_URL, clock=clock)


@pytest.fixture
def memory_store() -> MemoryCacheStore:
    return MemoryCacheStore()
