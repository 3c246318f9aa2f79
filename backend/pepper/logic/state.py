"""
Game state models for Pepper.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict

from pepper.logic.codec import Hand  # noqa: TC001
from pepper.logic.enums import HandKind

DEFAULT_TEAMS = ("Team 1", "Team 2")


class GameSummary(BaseModel):
    """Snapshot of a finished game kept in the series history."""

    model_config = ConfigDict(frozen=True)

    winner: int  # team index 0 or 1
    final_scores: tuple[int, int]
    hands: tuple[Hand, ...]
    start_time: datetime
    end_time: datetime

    @property
    def hand_strings(self) -> list[str]:
        return [hand.encoded for hand in self.hands]


class GameState(BaseModel):
    """
    Complete state of one game, plus series bookkeeping when in series mode.

    ``scores`` is always the fold-sum of completed hands' deltas; the
    GameManager re-derives it after every mutation and on restore.
    """

    model_config = ConfigDict(frozen=True)

    players: tuple[str, ...]  # seat-indexed; seat n is players[n - 1]
    teams: tuple[str, ...]  # seat n belongs to teams[(n - 1) % 2]
    hands: tuple[Hand, ...] = ()
    scores: tuple[int, int] = (0, 0)
    is_complete: bool = False
    start_time: datetime

    # --- Series ---
    is_series: bool = False
    series_scores: tuple[int, int] | None = None
    game_number: int | None = None
    series_winner: int | None = None
    completed_games: tuple[GameSummary, ...] | None = None

    @property
    def hand_strings(self) -> list[str]:
        return [hand.encoded for hand in self.hands]


class HandClassification(BaseModel):
    """How a hand played out, for history display and statistics."""

    model_config = ConfigDict(frozen=True)

    kind: HandKind
    set_team: int | None = None  # team index that went negative on a set
