"""
Scorer session: one table's manager, its settings and its snapshot store.

Every mutation that goes through the session is followed by a save, so a
restarted process can resume() exactly where the table left off.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, TypeVar
from uuid import uuid4

import structlog

from pepper.awards.selection import select_game_awards, select_series_awards
from pepper.config import ScorerSettings
from pepper.logic.exceptions import InvalidActionError
from pepper.logic.game import GameManager
from pepper.logic.snapshot import clear_game, load_game, save_game
from pepper.logic.state import DEFAULT_TEAMS
from pepper.stats.tracking import track_award_data, track_series_award_data
from shared.logging import setup_logging

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from pepper.awards.models import Award
    from pepper.logic.enums import UndoResult
    from shared.storage import KeyValueStore

logger = structlog.get_logger()

_Result = TypeVar("_Result")


class ScorerSession:
    def __init__(
        self,
        settings: ScorerSettings | None = None,
        store: KeyValueStore | None = None,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings if settings is not None else ScorerSettings()
        self._game_settings = self._settings.to_game_settings()
        self._store = store if store is not None else self._settings.build_store()
        self._rng = rng if rng is not None else random.Random()  # noqa: S311
        self._clock = clock
        self._manager: GameManager | None = None

    @property
    def manager(self) -> GameManager:
        if self._manager is None:
            raise InvalidActionError("no game in progress")
        return self._manager

    @property
    def has_game(self) -> bool:
        return self._manager is not None

    def _bind(self) -> None:
        structlog.contextvars.bind_contextvars(game_id=uuid4().hex[:12])

    def start_game(
        self,
        players: Sequence[str],
        teams: Sequence[str] = DEFAULT_TEAMS,
        dealer: int = 1,
        *,
        series: bool = False,
    ) -> GameManager:
        """Replace any saved game with a new one and persist it."""
        self._manager = GameManager(
            players,
            teams,
            settings=self._game_settings,
            is_series=series,
            dealer=dealer,
            clock=self._clock,
        )
        self._bind()
        logger.info("game started", players=list(players), teams=list(teams), dealer=dealer, series=series)
        self.save()
        return self._manager

    def resume(self) -> GameManager | None:
        """Restore the saved game, or return None when nothing is saved.

        Raises SnapshotLoadError when the saved data cannot be restored.
        """
        manager = load_game(
            self._store,
            self._settings.snapshot_key,
            settings=self._game_settings,
            clock=self._clock,
        )
        if manager is None:
            return None
        self._manager = manager
        self._bind()
        logger.info("game resumed", hand_count=len(manager.hands), game_number=manager.game_number)
        return manager

    def save(self) -> None:
        save_game(self._store, self.manager, self._settings.snapshot_key)

    def discard(self) -> None:
        """Forget the current game and remove its snapshot."""
        clear_game(self._store, self._settings.snapshot_key)
        self._manager = None
        logger.info("game discarded")

    def apply(self, action: Callable[[GameManager], _Result]) -> _Result:
        """Run ``action`` against the manager, then save the new state."""
        result = action(self.manager)
        self.save()
        return result

    def add_field(self, token: str) -> None:
        self.apply(lambda manager: manager.add_field(token))

    def undo(self) -> UndoResult:
        return self.apply(lambda manager: manager.undo())

    def convert_to_series(self) -> None:
        self.apply(lambda manager: manager.convert_to_series())

    def start_next_game(self) -> None:
        self.apply(lambda manager: manager.start_next_game())

    def start_new_series(self) -> GameManager:
        self._manager = self.manager.start_new_series()
        self._bind()
        self.save()
        return self._manager

    # ------------------------------------------------------------------
    # Awards
    # ------------------------------------------------------------------

    def game_awards(self) -> list[Award]:
        """Awards for the current game. Raises InvalidActionError if it is unfinished."""
        manager = self.manager
        if not manager.is_game_complete():
            raise InvalidActionError("awards are only available for a finished game")
        data = track_award_data(
            manager.hand_strings,
            manager.players,
            manager.teams,
            manager.scores,
            manager.get_winner(),
            settings=self._game_settings,
        )
        return select_game_awards(data, rng=self._rng, settings=self._game_settings)

    def series_awards(self) -> list[Award]:
        """Awards for the decided series. Raises InvalidActionError otherwise."""
        manager = self.manager
        if not manager.is_series_complete():
            raise InvalidActionError("awards are only available for a decided series")
        data = track_series_award_data(
            manager.completed_games,
            manager.players,
            manager.teams,
            manager.series_winner,
            settings=self._game_settings,
        )
        return select_series_awards(data, rng=self._rng, settings=self._game_settings)


def open_session() -> ScorerSession:  # pragma: no cover
    """Entry point for a scorer process: configure logging from the environment and resume any saved game."""
    settings = ScorerSettings()
    setup_logging(settings.log_dir, settings.logging_level, json_mode=settings.log_format == "json")
    session = ScorerSession(settings)
    session.resume()
    return session
