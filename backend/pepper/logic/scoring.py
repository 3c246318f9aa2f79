"""
Scoring for a single Pepper hand.

Every function here is pure: the same six fields always produce the same
delta, so running totals can be re-derived from the hand history at any time.
"""

from __future__ import annotations

from pepper.logic.codec import Hand, HandFields, decode_hand
from pepper.logic.enums import Bid, Decision, HandKind, Trump
from pepper.logic.state import HandClassification

NUM_TRICKS = 6

BID_POINTS: dict[Bid, int] = {
    Bid.PEPPER: 4,
    Bid.FOUR: 4,
    Bid.FIVE: 5,
    Bid.SIX: 6,
    Bid.MOON: 7,
    Bid.DOUBLE_MOON: 14,
}

# Bids that require every trick.
_ALL_TRICKS_BIDS = frozenset({Bid.SIX, Bid.MOON, Bid.DOUBLE_MOON})
_DEFAULT_BID_POINTS = 4


def bid_value(bid: Bid | None) -> int:
    """Points at stake for ``bid``; unknown or missing bids count as 4."""
    if bid is None:
        return _DEFAULT_BID_POINTS
    return BID_POINTS.get(bid, _DEFAULT_BID_POINTS)


def tricks_needed(bid: Bid | None) -> int:
    if bid in _ALL_TRICKS_BIDS:
        return NUM_TRICKS
    return bid_value(bid)


def bidding_team_for(bidder: int) -> int:
    """Team index (0 or 1) of a bidder seat 1-4."""
    return (bidder - 1) % 2


def is_bid_made(hand: HandFields) -> bool:
    """True if the bidders folded the defenders or covered their bid."""
    if hand.decision == Decision.FOLD:
        return True
    return hand.tricks + tricks_needed(hand.bid) <= NUM_TRICKS


def score_hand(hand: HandFields | Hand) -> tuple[int, int]:
    """
    Compute (team A delta, team B delta) for a completed hand.

    Rules:
    - throw-in scores nothing
    - fold: bidders take the bid, defenders take their negotiated tricks
    - defenders held to zero tricks lose the bid value
    - bidders set: they lose the bid; defenders take their tricks, or the
      full bid when a Moon or Double Moon failed
    - otherwise bidders take the bid and defenders their tricks
    """
    if isinstance(hand, Hand):
        hand = hand.resolved()
    if hand.is_throw_in:
        return (0, 0)

    bidding_team = bidding_team_for(hand.bidder)
    points = bid_value(hand.bid)

    if hand.decision == Decision.FOLD:
        bidder_delta = points
        defender_delta = hand.tricks if hand.tricks > 0 else 0
    elif hand.tricks == 0:
        bidder_delta = points
        defender_delta = -points
    elif hand.tricks + tricks_needed(hand.bid) > NUM_TRICKS:
        bidder_delta = -points
        defender_delta = points if points > NUM_TRICKS else hand.tricks
    else:
        bidder_delta = points
        defender_delta = hand.tricks

    if bidding_team == 0:
        return (bidder_delta, defender_delta)
    return (defender_delta, bidder_delta)


def calculate_score(encoded: str) -> tuple[int, int]:
    """Score an encoded hand string; never raises on malformed input."""
    return score_hand(decode_hand(encoded))


def total_scores(hands: list[Hand] | tuple[Hand, ...]) -> tuple[int, int]:
    """Fold-sum of the deltas of every completed hand in ``hands``."""
    team_a = 0
    team_b = 0
    for hand in hands:
        if not hand.is_complete:
            continue
        delta_a, delta_b = score_hand(hand)
        team_a += delta_a
        team_b += delta_b
    return (team_a, team_b)


def classify_hand(hand: Hand, hand_index: int, pepper_rounds: int = 4) -> HandClassification:
    """
    Classify a hand as incomplete, pass, play, forced-set or unforced-set.

    A set is forced when the rules left the set team no choice: the bidders
    in a pepper round, or the defenders when clubs forced them to play.
    """
    if hand.is_throw_in:
        return HandClassification(kind=HandKind.PASS)
    if not hand.is_complete:
        return HandClassification(kind=HandKind.INCOMPLETE)

    fields = hand.resolved()
    if fields.decision == Decision.FOLD:
        return HandClassification(kind=HandKind.PASS)

    delta_a, delta_b = score_hand(fields)
    if delta_a >= 0 and delta_b >= 0:
        return HandClassification(kind=HandKind.PLAY)

    set_team = 0 if delta_a < 0 else 1
    bidding_team = bidding_team_for(fields.bidder)
    pepper_set = hand_index < pepper_rounds and set_team == bidding_team
    clubs_set = fields.trump == Trump.CLUBS and set_team != bidding_team
    kind = HandKind.FORCED_SET if pepper_set or clubs_set else HandKind.UNFORCED_SET
    return HandClassification(kind=kind, set_team=set_team)
