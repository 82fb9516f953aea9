"""
Pytest configuration and shared fixtures for mission engine tests.

Testing Standards:
- Async tests run under pytest-asyncio (auto mode enabled in pyproject.toml)
- Time-dependent tests use FakeTimeAuthority, never the system clock
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

import pytest

from smartfunds.application.services.lifecycle_engine import LifecycleEngine
from smartfunds.application.services.mission_clock import MissionClock
from smartfunds.domain.models.mission import MissionCreateRequest
from smartfunds.infrastructure.stubs import MissionStoreStub
from tests.helpers import FakeTimeAuthority


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from smartfunds import __version__

    return __version__


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    """Frozen wall clock at 2026-01-01T00:00:00Z."""
    return FakeTimeAuthority()


@pytest.fixture
def mission_clock(fake_time_authority: FakeTimeAuthority) -> MissionClock:
    """Mission clock driven by the fake time authority."""
    return MissionClock(fake_time_authority)


@pytest.fixture
def mission_store() -> MissionStoreStub:
    """Fresh in-memory mission store."""
    return MissionStoreStub()


@pytest.fixture
def lifecycle_engine(
    mission_store: MissionStoreStub, mission_clock: MissionClock
) -> LifecycleEngine:
    """Lifecycle engine over the in-memory store and fake clock."""
    return LifecycleEngine(store=mission_store, clock=mission_clock)


@pytest.fixture
def growth_fund_request() -> MissionCreateRequest:
    """A valid creation request used across scenarios."""
    return MissionCreateRequest(
        offering_name="Growth Fund I",
        asset_type="Equity",
        target_raise=5_000_000,
        jurisdiction="Delaware",
    )
