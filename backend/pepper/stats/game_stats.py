"""Summary statistics for a finished game's hand history."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from pepper.logic.codec import decode_hand, is_hand_complete
from pepper.logic.enums import Bid, Decision, Trump
from pepper.logic.scoring import bid_value, bidding_team_for, is_bid_made, score_hand
from pepper.stats.tracking import calculate_longest_streak

if TYPE_CHECKING:
    from collections.abc import Sequence

UNKNOWN_PLAYER = "Unknown"


class HighestBid(BaseModel):
    model_config = ConfigDict(frozen=True)

    bid: Bid
    player: str
    points: int


class GameStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_hands: int = 0
    highest_bid: HighestBid | None = None
    most_common_trump: Trump | None = None
    most_common_trump_count: int = 0
    shutouts: int = 0  # played hands where the defenders took no tricks
    set_hands: int = 0  # played hands where the bidders went set
    trump_counts: dict[Trump, int] = {}
    bidding_points: int = 0
    defensive_points: int = 0
    average_points_per_hand: float = 0.0
    longest_streaks: tuple[int, int] = (0, 0)


def calculate_game_stats(hands: Sequence[str], players: Sequence[str]) -> GameStats:
    """
    Compute overview statistics for a hand history.

    total_hands counts every complete hand including throw-ins; the other
    figures only look at hands where someone bid. The average is the sum
    of both teams' absolute point swings divided by total_hands.
    """
    completed = [encoded for encoded in hands if is_hand_complete(encoded)]
    trump_counts = dict.fromkeys(Trump, 0)
    highest: HighestBid | None = None
    shutouts = 0
    set_hands = 0
    bidding_points = 0
    defensive_points = 0
    swing = 0

    for encoded in completed:
        fields = decode_hand(encoded)
        if fields.is_throw_in:
            continue
        trump_counts[fields.trump] += 1

        points = bid_value(fields.bid)
        if highest is None or points > highest.points:
            seat = fields.bidder
            player = players[seat - 1] if seat <= len(players) else UNKNOWN_PLAYER
            highest = HighestBid(bid=fields.bid, player=player, points=points)

        if fields.decision == Decision.PLAY:
            if fields.tricks == 0:
                shutouts += 1
            elif not is_bid_made(fields):
                set_hands += 1

        deltas = score_hand(fields)
        bidding_team = bidding_team_for(fields.bidder)
        bidding_points += deltas[bidding_team]
        defensive_points += deltas[1 - bidding_team]
        swing += abs(deltas[0]) + abs(deltas[1])

    most_common: Trump | None = None
    most_common_count = 0
    for trump, count in trump_counts.items():
        if count > most_common_count:
            most_common = trump
            most_common_count = count

    total_hands = len(completed)
    return GameStats(
        total_hands=total_hands,
        highest_bid=highest,
        most_common_trump=most_common,
        most_common_trump_count=most_common_count,
        shutouts=shutouts,
        set_hands=set_hands,
        trump_counts=trump_counts,
        bidding_points=bidding_points,
        defensive_points=defensive_points,
        average_points_per_hand=round(swing / total_hands, 1) if total_hands else 0.0,
        longest_streaks=(calculate_longest_streak(hands, 0), calculate_longest_streak(hands, 1)),
    )
