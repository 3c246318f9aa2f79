"""Snapshot persistence: serialize GameState to a JSON blob and restore it.

The blob is opaque to the key-value store holding it. Restoring validates
the structure (roster sizes, hand field order, hand completion order) and
raises SnapshotLoadError for anything that cannot be reconstructed. Scores
in the blob are ignored in favor of totals re-derived from the hands.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from pepper.logic.enums import HAND_FIELD_ORDER
from pepper.logic.exceptions import SnapshotLoadError
from pepper.logic.game import GameManager
from pepper.logic.scoring import total_scores
from pepper.logic.settings import NUM_PLAYERS, NUM_TEAMS
from pepper.logic.state import GameState

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from pepper.logic.codec import Hand
    from pepper.logic.settings import GameSettings
    from shared.storage import KeyValueStore

logger = structlog.get_logger()

DEFAULT_SNAPSHOT_KEY = "currentGame"


def _validate_hand_order(hands: tuple[Hand, ...], *, where: str) -> None:
    for index, hand in enumerate(hands):
        populated = sum(getattr(hand, f.value) is not None for f in HAND_FIELD_ORDER)
        if populated != hand.field_count:
            raise SnapshotLoadError(f"{where} hand {index} has fields out of order")
        if not hand.is_complete and index != len(hands) - 1:
            raise SnapshotLoadError(f"{where} hand {index} is incomplete but not the last hand")


def load_state(blob: str) -> GameState:
    """Parse and validate a snapshot blob into a GameState.

    Raises SnapshotLoadError for malformed JSON, missing fields, wrong
    roster sizes or a hand history that violates field ordering.
    """
    try:
        state = GameState.model_validate_json(blob)
    except ValidationError as e:
        raise SnapshotLoadError(f"invalid snapshot data: {e.error_count()} error(s)") from e

    if len(state.players) != NUM_PLAYERS:
        raise SnapshotLoadError(f"expected {NUM_PLAYERS} players, got {len(state.players)}")
    if len(state.teams) != NUM_TEAMS:
        raise SnapshotLoadError(f"expected {NUM_TEAMS} teams, got {len(state.teams)}")
    if state.is_series and state.series_scores is None:
        raise SnapshotLoadError("series snapshot is missing series_scores")

    _validate_hand_order(state.hands, where="current game")
    for number, summary in enumerate(state.completed_games or (), start=1):
        _validate_hand_order(summary.hands, where=f"completed game {number}")

    derived = total_scores(state.hands)
    if derived != state.scores:
        logger.warning("snapshot scores out of sync", stored=state.scores, derived=derived)
    return state.model_copy(update={"scores": derived})


def save_game(store: KeyValueStore, manager: GameManager, key: str = DEFAULT_SNAPSHOT_KEY) -> None:
    store.set(key, manager.to_snapshot())
    logger.debug("saved snapshot", key=key, hand_count=len(manager.hands))


def load_game(
    store: KeyValueStore,
    key: str = DEFAULT_SNAPSHOT_KEY,
    *,
    settings: GameSettings | None = None,
    clock: Callable[[], datetime] | None = None,
) -> GameManager | None:
    """Restore the manager saved under ``key``, or None if nothing is stored."""
    blob = store.get(key)
    if blob is None:
        return None
    manager = GameManager.from_state(load_state(blob), settings=settings, clock=clock)
    logger.info("restored snapshot", key=key, hand_count=len(manager.hands), scores=manager.scores)
    return manager


def clear_game(store: KeyValueStore, key: str = DEFAULT_SNAPSHOT_KEY) -> None:
    store.remove(key)
