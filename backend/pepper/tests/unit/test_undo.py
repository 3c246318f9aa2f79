import logging

from pepper.logic.enums import Decision, HandPhase, Trump, UndoResult
from pepper.logic.game import GameManager
from pepper.logic.settings import GameSettings
from pepper.tests.helpers.builders import OPENING_DEALER, PEPPER_OPENING, PLAYERS, TEAM_ONE_ROUT, TEAMS, FixedClock
from pepper.tests.helpers.hands import play_hand

QUICK = GameSettings(target_score=10, pepper_rounds=0)


def _view(manager: GameManager):
    state = manager.state
    return (
        manager.hand_strings,
        manager.scores,
        manager.current_phase,
        state.is_complete,
        state.series_scores,
        len(manager.completed_games),
        state.series_winner,
    )


class TestUndoSteps:
    def test_nothing_to_undo_returns_to_setup(self, manager):
        before = manager.state
        assert not manager.can_undo()
        assert manager.undo() == UndoResult.RETURN_TO_SETUP
        assert manager.state == before

    def test_undo_trump(self, manager):
        manager.set_trump(Trump.HEARTS)
        assert manager.undo() == UndoResult.STEPPED
        assert manager.hand_strings == ["41P"]
        assert manager.current_phase == HandPhase.TRUMP

    def test_undo_clubs_removes_forced_play(self, manager):
        manager.set_trump(Trump.CLUBS)
        manager.undo()
        assert manager.hand_strings == ["41P"]

    def test_undo_completed_hand(self, manager):
        play_hand(manager, "41PHP2")
        assert manager.scores == (4, 2)
        manager.undo()
        assert manager.hand_strings == ["41PHP"]
        assert manager.scores == (0, 0)
        assert manager.current_phase == HandPhase.TRICKS

    def test_undo_fold_removes_concession(self, manager):
        manager.set_trump(Trump.SPADES)
        manager.set_decision(Decision.FOLD, concession=1)
        manager.undo()
        assert manager.hand_strings == ["41PS"]
        assert manager.current_phase == HandPhase.DECISION

    def test_undo_throw_in(self, manager):
        for encoded in PEPPER_OPENING:
            play_hand(manager, encoded)
        manager.throw_in()
        manager.undo()
        assert manager.hand_strings[-1] == "4"
        assert manager.current_phase == HandPhase.BIDDER

    def test_undo_user_dealer_back_to_setup(self):
        manager = GameManager(PLAYERS)
        manager.add_field("2")
        assert manager.undo() == UndoResult.STEPPED
        assert manager.hands == ()
        assert manager.undo() == UndoResult.RETURN_TO_SETUP

    def test_undo_is_logged(self, manager, caplog):
        manager.set_trump(Trump.HEARTS)
        with caplog.at_level(logging.INFO):
            manager.undo()
        events = [r.msg for r in caplog.records if isinstance(r.msg, dict)]
        assert events[-1]["event"] == "undo"
        assert events[-1]["scores"] == (0, 0)


class TestUndoInverse:
    def test_every_append_is_reversible(self, manager):
        for encoded in PEPPER_OPENING + TEAM_ONE_ROUT:
            index = manager.current_hand_index
            while not (index < len(manager.hands) and manager.hands[index].is_complete):
                hand = manager.hands[index] if index < len(manager.hands) else None
                token = encoded[hand.field_count if hand is not None else 0]
                before = _view(manager)
                manager.add_field(token)
                manager.undo()
                assert _view(manager) == before, f"undo after {token!r} in {encoded!r}"
                manager.add_field(token)
        assert manager.state.is_complete

    def test_undo_reopens_finished_game(self, manager):
        for encoded in PEPPER_OPENING + TEAM_ONE_ROUT:
            play_hand(manager, encoded)
        manager.undo()
        assert not manager.state.is_complete
        assert manager.scores == (40, -16)
        manager.add_field("0")
        assert manager.state.is_complete
        assert manager.scores == (54, -30)


class TestUndoSeries:
    def _series(self) -> GameManager:
        return GameManager(PLAYERS, TEAMS, settings=QUICK, is_series=True, dealer=OPENING_DEALER, clock=FixedClock())

    def test_undo_rolls_back_series_win(self):
        manager = self._series()
        play_hand(manager, "41DNP0")
        assert manager.series_scores == (1, 0)
        manager.undo()
        assert manager.series_scores == (0, 0)
        assert manager.completed_games == ()
        assert not manager.state.is_complete
        assert manager.hand_strings == ["41DNP"]

    def test_undo_rolls_back_series_winner(self):
        manager = self._series()
        play_hand(manager, "41DNP0")
        manager.start_next_game()
        play_hand(manager, "11DNP0")
        assert manager.series_winner == 0
        manager.undo()
        assert manager.series_winner is None
        assert manager.series_scores == (1, 0)
        assert len(manager.completed_games) == 1

    def test_undo_at_start_of_next_game_returns_to_setup(self):
        manager = self._series()
        play_hand(manager, "41DNP0")
        manager.start_next_game()
        assert manager.undo() == UndoResult.RETURN_TO_SETUP
        assert manager.game_number == 2
        assert manager.hand_strings == ["1"]
