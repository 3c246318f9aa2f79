"""
Game and series lifecycle for Pepper scoring.

GameManager owns an immutable GameState and replaces it on every mutation.
Scores are never accumulated incrementally: after each append or undo they
are re-derived from the completed hands, so a rolled-back hand can never
leave a stale delta behind.

Input arrives one field at a time. Some fields are filled in automatically
and marked forced on the hand:
- the dealer of every hand after the first (rotates seat n -> n % 4 + 1),
  and of the first hand when the manager is created with a dealer
- the bidder and bid of pepper rounds (the first hands of each game)
- the Play decision when clubs are trump
- a fold's negotiated tricks, recorded together with the fold

undo() strips trailing forced fields plus exactly one field the user
entered, which reverses the last forward step regardless of phase.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from pepper.logic.codec import (
    Hand,
    append_field,
    is_pepper_round,
    next_dealer,
    strip_last_field,
)
from pepper.logic.enums import HAND_FIELD_ORDER, Bid, Decision, HandField, HandKind, HandPhase, Trump, UndoResult
from pepper.logic.exceptions import InvalidActionError, InvalidSetupError
from pepper.logic.scoring import bidding_team_for, classify_hand, total_scores
from pepper.logic.settings import (
    NUM_PLAYERS,
    NUM_TEAMS,
    GameSettings,
    pepper_bid_for_round,
    validate_settings,
)
from pepper.logic.state import DEFAULT_TEAMS, GameState, GameSummary, HandClassification

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

logger = structlog.get_logger()

FIRST_DEALER = 1


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _has_user_field(hands: Sequence[Hand]) -> bool:
    return any(f not in hand.forced for hand in hands for f in hand.present_fields)


class GameManager:
    """
    Scorekeeper for one game, optionally part of a best-of-three series.

    All mutations go through add_field (or its typed helpers), undo,
    complete_game, convert_to_series and start_next_game.
    """

    def __init__(
        self,
        players: Sequence[str],
        teams: Sequence[str] = DEFAULT_TEAMS,
        *,
        settings: GameSettings | None = None,
        is_series: bool = False,
        dealer: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if len(players) != NUM_PLAYERS:
            raise InvalidSetupError(f"expected {NUM_PLAYERS} players, got {len(players)}")
        if len(teams) != NUM_TEAMS:
            raise InvalidSetupError(f"expected {NUM_TEAMS} teams, got {len(teams)}")
        if dealer is not None and not (1 <= dealer <= NUM_PLAYERS):
            raise InvalidSetupError(f"dealer seat must be 1-{NUM_PLAYERS}, got {dealer}")
        self._settings = settings if settings is not None else GameSettings()
        validate_settings(self._settings)
        self._clock = clock if clock is not None else _utc_now
        self._state = GameState(
            players=tuple(players),
            teams=tuple(teams),
            start_time=self._clock(),
            is_series=is_series,
            series_scores=(0, 0) if is_series else None,
            game_number=1 if is_series else None,
            completed_games=() if is_series else None,
        )
        if dealer is not None:
            self._state = self._state.model_copy(update={"hands": (self._seed_hand(0, dealer),)})

    @classmethod
    def from_state(
        cls,
        state: GameState,
        *,
        settings: GameSettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> GameManager:
        """Rebuild a manager around an existing state, re-deriving its scores."""
        manager = cls(state.players, state.teams, settings=settings, clock=clock)
        manager._state = state.model_copy(update={"scores": total_scores(state.hands)})
        return manager

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def settings(self) -> GameSettings:
        return self._settings

    @property
    def players(self) -> tuple[str, ...]:
        return self._state.players

    @property
    def teams(self) -> tuple[str, ...]:
        return self._state.teams

    @property
    def hands(self) -> tuple[Hand, ...]:
        return self._state.hands

    @property
    def hand_strings(self) -> list[str]:
        return self._state.hand_strings

    @property
    def scores(self) -> tuple[int, int]:
        return self._state.scores

    @property
    def is_series(self) -> bool:
        return self._state.is_series

    @property
    def series_scores(self) -> tuple[int, int] | None:
        return self._state.series_scores

    @property
    def game_number(self) -> int | None:
        return self._state.game_number

    @property
    def series_winner(self) -> int | None:
        return self._state.series_winner

    @property
    def completed_games(self) -> tuple[GameSummary, ...]:
        return self._state.completed_games or ()

    @property
    def current_hand(self) -> Hand | None:
        """The in-progress hand, or None when the last hand is complete."""
        hands = self._state.hands
        if hands and not hands[-1].is_complete:
            return hands[-1]
        return None

    @property
    def current_hand_index(self) -> int:
        hands = self._state.hands
        if self.current_hand is not None:
            return len(hands) - 1
        return len(hands)

    @property
    def current_phase(self) -> HandPhase | None:
        """Input expected next, or None once the game is over."""
        if self._state.is_complete:
            return None
        current = self.current_hand
        if current is None:
            return HandPhase.BIDDER
        return current.phase

    def is_pepper_round(self, hand_index: int) -> bool:
        return is_pepper_round(hand_index, self._settings.pepper_rounds)

    # ------------------------------------------------------------------
    # Winner and team queries
    # ------------------------------------------------------------------

    def has_winner(self) -> bool:
        team_a, team_b = self._state.scores
        return max(team_a, team_b) >= self._settings.target_score and team_a != team_b

    def is_game_complete(self) -> bool:
        return self.has_winner()

    def get_winner(self) -> int | None:
        if not self.has_winner():
            return None
        team_a, team_b = self._state.scores
        return 0 if team_a > team_b else 1

    def get_winning_team_name(self) -> str | None:
        winner = self.get_winner()
        return self._state.teams[winner] if winner is not None else None

    def bidding_team(self) -> int | None:
        """Team index of the latest hand's bid winner, if one has been entered."""
        hands = self._state.hands
        if not hands or hands[-1].bidder is None or hands[-1].is_throw_in:
            return None
        return bidding_team_for(hands[-1].bidder)

    def defending_team(self) -> int | None:
        bidding = self.bidding_team()
        return None if bidding is None else 1 - bidding

    def bidding_team_name(self) -> str | None:
        bidding = self.bidding_team()
        return None if bidding is None else self._state.teams[bidding]

    def defending_team_name(self) -> str | None:
        defending = self.defending_team()
        return None if defending is None else self._state.teams[defending]

    def next_dealer_seat(self) -> int:
        """Seat that deals the hand after the latest one (seat 1 for an empty game)."""
        hands = self._state.hands
        if not hands or hands[-1].dealer is None:
            return FIRST_DEALER
        return next_dealer(hands[-1].dealer)

    def next_dealer_name(self) -> str:
        return self._state.players[self.next_dealer_seat() - 1]

    def get_hand_classification(self, hand_index: int) -> HandClassification:
        hands = self._state.hands
        if not (0 <= hand_index < len(hands)):
            return HandClassification(kind=HandKind.INCOMPLETE)
        return classify_hand(hands[hand_index], hand_index, self._settings.pepper_rounds)

    # ------------------------------------------------------------------
    # Field input
    # ------------------------------------------------------------------

    def add_field(self, token: str) -> None:
        """Append one raw field token to the hand history.

        Starts a new hand when none is in progress. Unrecognized tokens are
        stored as the position's default rather than rejected.
        """
        self._append(str(token))

    def set_dealer(self, seat: int) -> None:
        self._set_field(HandField.DEALER, str(seat))

    def set_bidder(self, seat: int) -> None:
        self._set_field(HandField.BIDDER, str(seat))

    def throw_in(self) -> None:
        """Record that nobody bid: the hand scores nothing."""
        self._set_field(HandField.BIDDER, "0")

    def set_bid(self, bid: Bid | str | int) -> None:
        self._set_field(HandField.BID, bid.value if isinstance(bid, Bid) else str(bid))

    def set_trump(self, trump: Trump | str) -> None:
        self._set_field(HandField.TRUMP, trump.value if isinstance(trump, Trump) else trump)

    def set_decision(self, decision: Decision | str, concession: int = 0) -> None:
        """Record the defenders' decision.

        A fold also records the negotiated ``concession`` tricks as part of
        the same step, so a single undo reverses both.
        """
        token = decision.value if isinstance(decision, Decision) else decision
        if token == Decision.FOLD.value:
            self._set_field(HandField.DECISION, token, concession=str(concession))
        else:
            self._set_field(HandField.DECISION, token)

    def set_tricks(self, tricks: int) -> None:
        self._set_field(HandField.TRICKS, str(tricks))

    def _set_field(self, hand_field: HandField, token: str, *, concession: str | None = None) -> None:
        """Append ``token`` as ``hand_field``, skipping fields the rules already filled."""
        self._ensure_open()
        current = self.current_hand
        if current is not None and current.is_forced(hand_field):
            logger.debug("field already forced", field=hand_field, token=token)
            return
        expected = HAND_FIELD_ORDER[current.field_count] if current is not None else HandField.DEALER
        if hand_field != expected:
            raise InvalidActionError(f"expected {expected.value} input, got {hand_field.value}")
        self._append(token, concession=concession)

    def _ensure_open(self) -> None:
        if self._state.is_complete or self.has_winner():
            raise InvalidActionError("cannot record a hand after the game is complete")

    def _append(self, token: str, *, concession: str | None = None) -> None:
        self._ensure_open()

        hands = list(self._state.hands)
        if not hands or hands[-1].is_complete:
            hands.append(Hand())
        hand_index = len(hands) - 1

        hand = append_field(hands[-1], token)
        if concession is not None and hand.last_field == HandField.DECISION:
            hand = append_field(hand, concession, forced=True)
        hands[hand_index] = self._apply_forced_rules(hand, hand_index)
        self._commit(hands)

    def _apply_forced_rules(self, hand: Hand, hand_index: int) -> Hand:
        if hand.field_count == 1 and self.is_pepper_round(hand_index):
            hand = append_field(hand, str(next_dealer(hand.dealer or FIRST_DEALER)), forced=True)
            hand = append_field(hand, pepper_bid_for_round(self._settings, hand_index).value, forced=True)
        if hand.last_field == HandField.TRUMP and hand.trump == Trump.CLUBS:
            hand = append_field(hand, Decision.PLAY.value, forced=True)
        return hand

    def _seed_hand(self, hand_index: int, dealer: int) -> Hand:
        hand = append_field(Hand(), str(dealer), forced=True)
        return self._apply_forced_rules(hand, hand_index)

    def _commit(self, hands: list[Hand]) -> None:
        scores = total_scores(hands)
        self._state = self._state.model_copy(update={"hands": tuple(hands), "scores": scores})

        last = hands[-1]
        if not last.is_complete:
            return
        logger.info(
            "hand completed",
            hand_index=len(hands) - 1,
            hand=last.encoded,
            scores=scores,
        )
        if self.has_winner():
            self.complete_game()
            return
        hands.append(self._seed_hand(len(hands), next_dealer(last.dealer or FIRST_DEALER)))
        self._state = self._state.model_copy(update={"hands": tuple(hands)})

    # ------------------------------------------------------------------
    # Undo
    # ------------------------------------------------------------------

    def can_undo(self) -> bool:
        return _has_user_field(self._state.hands)

    def undo(self) -> UndoResult:
        """
        Reverse exactly one logical input step.

        Strips trailing forced fields, then one user-entered field, popping
        hands that become empty on the way. Returns RETURN_TO_SETUP without
        changing anything when the game holds no user-entered field.
        """
        hands = list(self._state.hands)
        if not _has_user_field(hands):
            logger.info("undo reached game start")
            return UndoResult.RETURN_TO_SETUP

        was_complete = self._state.is_complete
        while hands:
            hand = hands[-1]
            last = hand.last_field
            if last is None:
                hands.pop()
                continue
            was_forced = hand.is_forced(last)
            hands[-1] = strip_last_field(hand)
            if hands[-1].is_empty:
                hands.pop()
            if not was_forced:
                break

        self._state = self._state.model_copy(update={"hands": tuple(hands), "scores": total_scores(hands)})
        if was_complete and not self.has_winner():
            self._reopen_game()
        logger.info("undo", hand_count=len(hands), scores=self._state.scores)
        return UndoResult.STEPPED

    def _reopen_game(self) -> None:
        update: dict[str, object] = {"is_complete": False}
        completed = self._state.completed_games
        if self._state.is_series and completed:
            summary = completed[-1]
            series_scores = list(self._state.series_scores or (0, 0))
            series_scores[summary.winner] -= 1
            update["series_scores"] = (series_scores[0], series_scores[1])
            update["completed_games"] = completed[:-1]
            update["series_winner"] = None
        self._state = self._state.model_copy(update=update)
        logger.info("game reopened", game_number=self._state.game_number)

    # ------------------------------------------------------------------
    # Game and series transitions
    # ------------------------------------------------------------------

    def _summarize(self, winner: int) -> GameSummary:
        return GameSummary(
            winner=winner,
            final_scores=self._state.scores,
            hands=self._state.hands,
            start_time=self._state.start_time,
            end_time=self._clock(),
        )

    def complete_game(self) -> None:
        """Mark the game finished and record it in the series. Idempotent."""
        if self._state.is_complete:
            return
        winner = self.get_winner()
        if winner is None:
            raise InvalidActionError("cannot complete a game without a winner")

        update: dict[str, object] = {"is_complete": True}
        if self._state.is_series:
            series_scores = list(self._state.series_scores or (0, 0))
            series_scores[winner] += 1
            update["series_scores"] = (series_scores[0], series_scores[1])
            update["completed_games"] = (*(self._state.completed_games or ()), self._summarize(winner))
            if series_scores[winner] >= self._settings.series_games_to_win:
                update["series_winner"] = winner
        self._state = self._state.model_copy(update=update)
        logger.info(
            "game completed",
            winner=self._state.teams[winner],
            scores=self._state.scores,
            game_number=self._state.game_number,
            series_scores=self._state.series_scores,
        )

    def is_series_complete(self) -> bool:
        return self._state.is_series and self._state.series_winner is not None

    def convert_to_series(self) -> None:
        """Turn a finished standalone game into game 1 of a series."""
        if self._state.is_series:
            raise InvalidActionError("game is already part of a series")
        if not self.has_winner():
            raise InvalidActionError("cannot convert an unfinished game to a series")

        self._state = self._state.model_copy(
            update={
                "is_series": True,
                "is_complete": False,
                "series_scores": (0, 0),
                "game_number": 1,
                "completed_games": (),
                "series_winner": None,
            },
        )
        self.complete_game()
        logger.info("series converted", series_scores=self._state.series_scores)

    def start_next_game(self) -> None:
        """Begin the next game of an undecided series, keeping series bookkeeping."""
        if not self._state.is_series:
            raise InvalidActionError("not playing a series")
        if self.is_series_complete():
            raise InvalidActionError("series is already decided")
        if not self._state.is_complete:
            raise InvalidActionError("current game is not finished")

        dealer = self.next_dealer_seat()
        game_number = (self._state.game_number or 1) + 1
        self._state = self._state.model_copy(
            update={
                "hands": (self._seed_hand(0, dealer),),
                "scores": (0, 0),
                "is_complete": False,
                "game_number": game_number,
                "start_time": self._clock(),
            },
        )
        logger.info("next game started", game_number=game_number, dealer=dealer)

    def start_new_series(self) -> GameManager:
        """Return a fresh series manager for the same table, seeded with the next dealer."""
        dealer = self.next_dealer_seat()
        manager = GameManager(
            self._state.players,
            self._state.teams,
            settings=self._settings,
            is_series=True,
            dealer=dealer,
            clock=self._clock,
        )
        logger.info("new series started", dealer=dealer)
        return manager

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def to_snapshot(self) -> str:
        """Serialize the full state, including forced-field markers, to JSON."""
        return self._state.model_dump_json()

    @classmethod
    def from_snapshot(
        cls,
        blob: str,
        *,
        settings: GameSettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> GameManager:
        from pepper.logic.snapshot import load_state  # noqa: PLC0415

        return cls.from_state(load_state(blob), settings=settings, clock=clock)
