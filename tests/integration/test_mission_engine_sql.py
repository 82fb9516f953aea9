"""End-to-end lifecycle tests with the engine over SQLite."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from smartfunds.bootstrap.mission_engine import build_mission_engine
from smartfunds.config import MissionEngineConfig
from smartfunds.domain.errors import InvalidTransitionError, MissionNotFoundError
from smartfunds.domain.models.mission import (
    MissionCreateRequest,
    MissionStatus,
    is_legal_walk,
)
from tests.helpers import FakeTimeAuthority

pytestmark = pytest.mark.integration

S = MissionStatus

REQUEST = MissionCreateRequest(
    offering_name="Growth Fund I",
    asset_type="Equity",
    target_raise=1_000_000,
    jurisdiction="Delaware",
)


class TestMissionEngineOverSql:
    """The composition root wired to a SQLite file."""

    async def test_full_lifecycle_with_rejection_loop(
        self, sqlite_config: MissionEngineConfig
    ) -> None:
        container = await build_mission_engine(sqlite_config, FakeTimeAuthority())
        try:
            engine = container.engine
            mission = await engine.create(REQUEST, actor="operator")
            for status in [
                S.LEGAL_STRUCTURING,
                S.COMPOSITION,
                S.IMPLEMENTATION,
                S.PR_GATE,
                S.VERIFICATION,
                S.IMPLEMENTATION,
                S.PR_GATE,
                S.VERIFICATION,
                S.HUMAN_CHECKPOINT,
                S.APPROVED,
                S.LAUNCHED,
                S.ARCHIVED,
            ]:
                await engine.transition(mission.id, status, actor="operator")

            entries = await engine.get_audit_log(mission.id)
            stored = await engine.get(mission.id)

            assert stored is not None
            assert stored.status is S.ARCHIVED
            assert len(entries) == 13
            assert is_legal_walk([entry.to_status for entry in entries])
            assert all(a.timestamp < b.timestamp for a, b in zip(entries, entries[1:]))
            assert stored.updated_at == entries[-1].timestamp
        finally:
            await container.close()

    async def test_rejected_transition_leaves_database_unchanged(
        self, sqlite_config: MissionEngineConfig
    ) -> None:
        container = await build_mission_engine(sqlite_config, FakeTimeAuthority())
        try:
            engine = container.engine
            mission = await engine.create(REQUEST, actor="operator")

            with pytest.raises(InvalidTransitionError):
                await engine.transition(mission.id, S.IMPLEMENTATION, actor="operator")

            assert await engine.get(mission.id) == mission
            assert len(await engine.get_audit_log(mission.id)) == 1
        finally:
            await container.close()

    async def test_state_survives_restart(self, sqlite_config: MissionEngineConfig) -> None:
        time_authority = FakeTimeAuthority()
        first = await build_mission_engine(sqlite_config, time_authority)
        try:
            mission = await first.engine.create(REQUEST, actor="operator")
            await first.engine.transition(
                mission.id, S.LEGAL_STRUCTURING, actor="operator", metadata={"note": "ready"}
            )
        finally:
            await first.close()

        time_authority.advance(delta=timedelta(seconds=1))
        second = await build_mission_engine(sqlite_config, time_authority)
        try:
            entries = await second.engine.get_audit_log(mission.id)
            stored = await second.engine.get(mission.id)

            assert stored is not None
            assert stored.status is S.LEGAL_STRUCTURING
            assert entries[-1].metadata == {"note": "ready"}
        finally:
            await second.close()

    async def test_audit_log_unknown_mission(self, sqlite_config: MissionEngineConfig) -> None:
        container = await build_mission_engine(sqlite_config, FakeTimeAuthority())
        try:
            with pytest.raises(MissionNotFoundError):
                await container.engine.get_audit_log("nonexistent-id")
        finally:
            await container.close()


class TestConcurrentTransitionsOverSql:
    """Concurrent transitions on one mission never both commit."""

    async def test_identical_transitions_apply_once(
        self, sqlite_config: MissionEngineConfig
    ) -> None:
        container = await build_mission_engine(sqlite_config, FakeTimeAuthority())
        try:
            engine = container.engine
            mission = await engine.create(REQUEST, actor="operator")

            results = await asyncio.gather(
                engine.transition(mission.id, S.LEGAL_STRUCTURING, actor="a0"),
                engine.transition(mission.id, S.LEGAL_STRUCTURING, actor="a1"),
                return_exceptions=True,
            )

            errors = [r for r in results if isinstance(r, BaseException)]
            entries = await engine.get_audit_log(mission.id)
            assert len(errors) == 1
            assert isinstance(errors[0], InvalidTransitionError)
            assert [entry.from_status for entry in entries] == [None, S.INTAKE]
            assert is_legal_walk([entry.to_status for entry in entries])
        finally:
            await container.close()

    async def test_engines_sharing_one_database_file_apply_once(
        self, sqlite_config: MissionEngineConfig
    ) -> None:
        first = await build_mission_engine(sqlite_config, FakeTimeAuthority())
        second = await build_mission_engine(
            sqlite_config,
            FakeTimeAuthority(frozen_at=datetime(2026, 1, 1, 0, 0, 1, tzinfo=timezone.utc)),
        )
        try:
            mission = await first.engine.create(REQUEST, actor="operator")

            results = await asyncio.gather(
                first.engine.transition(mission.id, S.LEGAL_STRUCTURING, actor="a0"),
                second.engine.transition(mission.id, S.LEGAL_STRUCTURING, actor="a1"),
                return_exceptions=True,
            )

            errors = [r for r in results if isinstance(r, BaseException)]
            entries = await first.engine.get_audit_log(mission.id)
            assert len(errors) == 1
            assert isinstance(errors[0], InvalidTransitionError)
            assert len(entries) == 2
            assert is_legal_walk([entry.to_status for entry in entries])
        finally:
            await first.close()
            await second.close()
