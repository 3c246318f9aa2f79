"""Scorer configuration via environment variables."""

import logging
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

from pepper.logic.enums import PepperBidSchedule
from pepper.logic.settings import GameSettings
from pepper.logic.snapshot import DEFAULT_SNAPSHOT_KEY
from shared.storage import KeyValueStore, LocalFileKeyValueStore, MemoryKeyValueStore


class ScorerSettings(BaseSettings):
    model_config = {"env_prefix": "PEPPER_"}

    log_dir: str = Field(default="backend/logs/pepper", min_length=1)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["console", "json"] = "console"
    # Empty keeps snapshots in memory only.
    snapshot_dir: str = ""
    snapshot_key: str = Field(default=DEFAULT_SNAPSHOT_KEY, min_length=1)

    target_score: int = Field(default=42, ge=1)
    series_games_to_win: int = Field(default=2, ge=1)
    pepper_bid_schedule: PepperBidSchedule = PepperBidSchedule.FIXED

    def to_game_settings(self) -> GameSettings:
        return GameSettings(
            target_score=self.target_score,
            series_games_to_win=self.series_games_to_win,
            pepper_bid_schedule=self.pepper_bid_schedule,
        )

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)

    def build_store(self) -> KeyValueStore:
        if self.snapshot_dir:
            return LocalFileKeyValueStore(self.snapshot_dir)
        return MemoryKeyValueStore()
