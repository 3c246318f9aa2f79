from __future__ import annotations

import pytest

from pepper.logic.game import GameManager
from pepper.logic.settings import GameSettings
from pepper.tests.helpers.builders import OPENING_DEALER, PLAYERS, TEAMS, FixedClock
from shared.storage import MemoryKeyValueStore


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def settings() -> GameSettings:
    return GameSettings()


@pytest.fixture
def manager(clock, settings) -> GameManager:
    return GameManager(PLAYERS, TEAMS, settings=settings, dealer=OPENING_DEALER, clock=clock)


@pytest.fixture
def series_manager(clock, settings) -> GameManager:
    return GameManager(PLAYERS, TEAMS, settings=settings, is_series=True, dealer=OPENING_DEALER, clock=clock)


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()
