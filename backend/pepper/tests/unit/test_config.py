import logging

import pytest
from pydantic import ValidationError

from pepper.config import ScorerSettings
from pepper.logic.enums import PepperBidSchedule
from pepper.logic.snapshot import DEFAULT_SNAPSHOT_KEY
from shared.storage import LocalFileKeyValueStore, MemoryKeyValueStore

_ENV_VARS = (
    "PEPPER_LOG_DIR",
    "PEPPER_LOG_LEVEL",
    "PEPPER_LOG_FORMAT",
    "PEPPER_SNAPSHOT_DIR",
    "PEPPER_SNAPSHOT_KEY",
    "PEPPER_TARGET_SCORE",
    "PEPPER_SERIES_GAMES_TO_WIN",
    "PEPPER_PEPPER_BID_SCHEDULE",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestScorerSettings:
    def test_defaults(self, clean_env):
        settings = ScorerSettings()
        assert settings.log_dir == "backend/logs/pepper"
        assert settings.log_level == "INFO"
        assert settings.log_format == "console"
        assert settings.snapshot_dir == ""
        assert settings.snapshot_key == DEFAULT_SNAPSHOT_KEY
        assert settings.target_score == 42
        assert settings.series_games_to_win == 2
        assert settings.pepper_bid_schedule == PepperBidSchedule.FIXED

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("PEPPER_TARGET_SCORE", "21")
        clean_env.setenv("PEPPER_SERIES_GAMES_TO_WIN", "3")
        clean_env.setenv("PEPPER_PEPPER_BID_SCHEDULE", "escalating")
        settings = ScorerSettings()
        assert settings.target_score == 21
        assert settings.series_games_to_win == 3
        assert settings.pepper_bid_schedule == PepperBidSchedule.ESCALATING

    def test_rejects_non_positive_target(self, clean_env):
        clean_env.setenv("PEPPER_TARGET_SCORE", "0")
        with pytest.raises(ValidationError):
            ScorerSettings()

    def test_rejects_empty_snapshot_key(self, clean_env):
        with pytest.raises(ValidationError):
            ScorerSettings(snapshot_key="")

    def test_rejects_unknown_schedule(self, clean_env):
        clean_env.setenv("PEPPER_PEPPER_BID_SCHEDULE", "random")
        with pytest.raises(ValidationError):
            ScorerSettings()

    def test_logging_from_environment(self, clean_env):
        clean_env.setenv("PEPPER_LOG_LEVEL", "DEBUG")
        clean_env.setenv("PEPPER_LOG_FORMAT", "json")
        settings = ScorerSettings()
        assert settings.logging_level == logging.DEBUG
        assert settings.log_format == "json"

    def test_rejects_unknown_log_level(self, clean_env):
        clean_env.setenv("PEPPER_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            ScorerSettings()

    def test_rejects_unknown_log_format(self, clean_env):
        with pytest.raises(ValidationError):
            ScorerSettings(log_format="xml")

    def test_to_game_settings(self, clean_env):
        game_settings = ScorerSettings(target_score=31, series_games_to_win=1).to_game_settings()
        assert game_settings.target_score == 31
        assert game_settings.series_games_to_win == 1
        assert game_settings.pepper_rounds == 4


class TestBuildStore:
    def test_memory_store_without_directory(self, clean_env):
        assert isinstance(ScorerSettings().build_store(), MemoryKeyValueStore)

    def test_file_store_with_directory(self, clean_env, tmp_path):
        clean_env.setenv("PEPPER_SNAPSHOT_DIR", str(tmp_path))
        store = ScorerSettings().build_store()
        assert isinstance(store, LocalFileKeyValueStore)
        store.set("table", "{}")
        assert (tmp_path / "table.json").read_text() == "{}"
