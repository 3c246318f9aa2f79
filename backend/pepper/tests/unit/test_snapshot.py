import json
import logging

import pytest

from pepper.logic.enums import HandField, HandPhase, Trump
from pepper.logic.exceptions import SnapshotLoadError
from pepper.logic.game import GameManager
from pepper.logic.settings import GameSettings
from pepper.logic.snapshot import DEFAULT_SNAPSHOT_KEY, clear_game, load_game, load_state, save_game
from pepper.tests.helpers.builders import OPENING_DEALER, PEPPER_OPENING, PLAYERS, TEAMS, FixedClock
from pepper.tests.helpers.hands import play_hand, play_hands

QUICK = GameSettings(target_score=10, pepper_rounds=0)


def _blob_with(manager: GameManager, **changes) -> str:
    data = manager.state.model_dump(mode="json")
    data.update(changes)
    return json.dumps(data)


class TestSnapshotRoundTrip:
    def test_in_progress_phase_and_forced_markers(self, manager):
        manager.set_trump(Trump.CLUBS)
        restored = GameManager.from_snapshot(manager.to_snapshot())
        assert restored.hand_strings == ["41PCP"]
        assert restored.current_phase == HandPhase.TRICKS
        assert restored.hands[0].forced == frozenset(
            {HandField.DEALER, HandField.BIDDER, HandField.BID, HandField.DECISION},
        )

    def test_restored_game_undoes_like_the_live_one(self, manager):
        manager.set_trump(Trump.CLUBS)
        restored = GameManager.from_snapshot(manager.to_snapshot())
        restored.undo()
        assert restored.hand_strings == ["41P"]

    def test_scores_and_start_time(self, manager):
        play_hands(manager, PEPPER_OPENING)
        restored = GameManager.from_snapshot(manager.to_snapshot())
        assert restored.scores == (12, 12)
        assert restored.state.start_time == manager.state.start_time
        assert restored.state == manager.state

    def test_series_bookkeeping(self):
        manager = GameManager(PLAYERS, TEAMS, settings=QUICK, is_series=True, dealer=OPENING_DEALER, clock=FixedClock())
        play_hand(manager, "41DNP0")
        manager.start_next_game()
        restored = GameManager.from_snapshot(manager.to_snapshot(), settings=QUICK)
        assert restored.series_scores == (1, 0)
        assert restored.game_number == 2
        assert restored.completed_games == manager.completed_games
        assert restored.hand_strings == ["1"]


class TestLoadStateValidation:
    def test_malformed_json(self):
        with pytest.raises(SnapshotLoadError, match="invalid snapshot data"):
            load_state("{not json")

    def test_missing_fields(self):
        with pytest.raises(SnapshotLoadError, match="invalid snapshot data"):
            load_state(json.dumps({"players": list(PLAYERS)}))

    def test_wrong_player_count(self, manager):
        with pytest.raises(SnapshotLoadError, match="expected 4 players, got 3"):
            load_state(_blob_with(manager, players=["Alice", "Bob", "Charlie"]))

    def test_wrong_team_count(self, manager):
        with pytest.raises(SnapshotLoadError, match="expected 2 teams"):
            load_state(_blob_with(manager, teams=["Team 1"]))

    def test_series_without_scores(self, manager):
        with pytest.raises(SnapshotLoadError, match="series_scores"):
            load_state(_blob_with(manager, is_series=True, series_scores=None))

    def test_fields_out_of_order(self, manager):
        with pytest.raises(SnapshotLoadError, match="out of order"):
            load_state(_blob_with(manager, hands=[{"dealer": 1, "bid": "4"}]))

    def test_incomplete_hand_before_the_last(self, manager):
        hands = [{"dealer": 1, "bidder": 2}, {"dealer": 2, "bidder": 0}]
        with pytest.raises(SnapshotLoadError, match="incomplete but not the last"):
            load_state(_blob_with(manager, hands=hands))

    def test_stale_scores_are_rederived(self, manager, caplog):
        play_hand(manager, "41PHP2")
        with caplog.at_level(logging.WARNING):
            state = load_state(_blob_with(manager, scores=[99, 0]))
        assert state.scores == (4, 2)
        warnings = [r.msg for r in caplog.records if r.levelno == logging.WARNING]
        assert warnings[0]["event"] == "snapshot scores out of sync"

    def test_error_keeps_reason(self):
        with pytest.raises(SnapshotLoadError) as exc_info:
            load_state("[]")
        assert exc_info.value.reason.startswith("invalid snapshot data")


class TestStoreHelpers:
    def test_save_and_load(self, manager, store):
        play_hand(manager, "41PHP2")
        save_game(store, manager)
        restored = load_game(store)
        assert restored is not None
        assert restored.hand_strings == manager.hand_strings
        assert store.get(DEFAULT_SNAPSHOT_KEY) == manager.to_snapshot()

    def test_load_nothing_saved(self, store):
        assert load_game(store) is None

    def test_custom_key(self, manager, store):
        save_game(store, manager, "table-2")
        assert load_game(store) is None
        assert load_game(store, "table-2") is not None

    def test_clear(self, manager, store):
        save_game(store, manager)
        clear_game(store)
        assert load_game(store) is None

    def test_corrupt_value_raises(self, store):
        store.set(DEFAULT_SNAPSHOT_KEY, "garbage")
        with pytest.raises(SnapshotLoadError):
            load_game(store)
