"""
Unit Tests for the Headless Runner

Only the play loop is tested here; startup wiring touches the real
environment and is covered by the store and engine tests.
"""

import pytest

from stargazer.core.config.manager import ProgressionSettings
from stargazer.main import _play


@pytest.mark.unit
@pytest.mark.asyncio
class TestPlayLoop:
    async def test_stops_when_catalog_is_exhausted(self, engine, small_catalog):
        discoveries = await _play(engine)

        assert discoveries == len(small_catalog)
        assert engine.collection_completion().overall == 1.0

    async def test_stops_when_energy_runs_out(self, make_engine):
        engine = make_engine(settings=ProgressionSettings(max_energy=2, explore_delay_seconds=0))

        discoveries = await _play(engine)

        assert discoveries == 2
        assert engine.progress.energy == 0
