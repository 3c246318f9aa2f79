"""Centralized game settings for Pepper - all configurable scoring rules."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from pepper.logic.enums import Bid, PepperBidSchedule
from pepper.logic.exceptions import UnsupportedSettingsError

NUM_PLAYERS = 4
NUM_TEAMS = 2
MAX_PEPPER_ROUNDS = 4

# Bids recorded for pepper rounds 1-4 under the escalating schedule.
_ESCALATING_PEPPER_BIDS = (Bid.FOUR, Bid.FIVE, Bid.SIX, Bid.MOON)


class GameSettings(BaseModel):
    """
    Configuration for Pepper scoring and award selection.

    All fields have default values matching standard house rules.
    """

    model_config = ConfigDict(frozen=True)

    # --- Game Structure ---
    target_score: int = 42
    series_games_to_win: int = 2
    pepper_rounds: int = 4
    pepper_bid_schedule: PepperBidSchedule = PepperBidSchedule.FIXED

    # --- Statistics ---
    comeback_deficit: int = 30

    # --- Award Selection ---
    max_game_awards: int = 5
    max_series_awards: int = 8


def validate_settings(settings: GameSettings) -> None:
    """Validate that all settings values are supported by the scorer.

    Raises UnsupportedSettingsError listing every offending value.
    """
    errors: list[str] = []

    if settings.target_score <= 0:
        errors.append(f"target_score={settings.target_score} must be positive")

    if settings.series_games_to_win <= 0:
        errors.append(f"series_games_to_win={settings.series_games_to_win} must be positive")

    if not (0 <= settings.pepper_rounds <= MAX_PEPPER_ROUNDS):
        errors.append(f"pepper_rounds={settings.pepper_rounds} is not supported (0-{MAX_PEPPER_ROUNDS})")

    if settings.comeback_deficit <= 0:
        errors.append(f"comeback_deficit={settings.comeback_deficit} must be positive")

    if settings.max_game_awards < 0 or settings.max_series_awards < 0:
        errors.append("award caps must not be negative")

    if errors:
        raise UnsupportedSettingsError("; ".join(errors))


def pepper_bid_for_round(settings: GameSettings, hand_index: int) -> Bid:
    """Return the bid forced onto pepper round ``hand_index`` (0-based)."""
    if settings.pepper_bid_schedule == PepperBidSchedule.ESCALATING:
        return _ESCALATING_PEPPER_BIDS[hand_index]
    return Bid.PEPPER
