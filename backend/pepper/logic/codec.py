"""
Compact hand encoding and the per-hand phase state machine.

A hand is six ordered positions: dealer seat, bid winner seat, bid, trump,
decision, defending tricks. ``"114HP2"`` reads as: seat 1 dealt, seat 1 won
the bid at 4, hearts are trump, the defenders played and took 2 tricks.
A bid winner of ``0`` marks a throw-in, which is complete after two positions.

Decoding is total. Missing, truncated or unparseable positions fall back to
fixed defaults instead of raising, so a corrupted history still renders and
scores.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from pepper.logic.enums import HAND_FIELD_ORDER, Bid, Decision, HandField, HandPhase, Trump

if TYPE_CHECKING:
    from enum import Enum

NUM_SEATS = 4
HAND_LENGTH = len(HAND_FIELD_ORDER)
THROW_IN_SEAT = 0

DEFAULT_DEALER = 1
DEFAULT_BIDDER = 1
DEFAULT_BID = Bid.FOUR
DEFAULT_TRUMP = Trump.NO_TRUMP
DEFAULT_DECISION = Decision.PLAY
DEFAULT_TRICKS = 0

_MAX_TRICKS_DIGIT = 9


class HandFields(BaseModel):
    """Fully resolved hand: every position populated, defaults applied."""

    model_config = ConfigDict(frozen=True)

    dealer: int = DEFAULT_DEALER
    bidder: int = DEFAULT_BIDDER
    bid: Bid = DEFAULT_BID
    trump: Trump = DEFAULT_TRUMP
    decision: Decision = DEFAULT_DECISION
    tricks: int = DEFAULT_TRICKS

    @property
    def is_throw_in(self) -> bool:
        return self.bidder == THROW_IN_SEAT


class Hand(BaseModel):
    """
    In-progress or completed hand with one optional field per stage.

    Fields are populated strictly in order. ``forced`` names the fields the
    game manager filled in automatically (seeded dealer, pepper-round bidder
    and bid, the Play decision under clubs, a fold's negotiated tricks);
    undo rolls those back together with the user entry that caused them.
    """

    model_config = ConfigDict(frozen=True)

    dealer: int | None = None
    bidder: int | None = None
    bid: Bid | None = None
    trump: Trump | None = None
    decision: Decision | None = None
    tricks: int | None = None
    forced: frozenset[HandField] = frozenset()

    @property
    def present_fields(self) -> tuple[HandField, ...]:
        present: list[HandField] = []
        for hand_field in HAND_FIELD_ORDER:
            if getattr(self, hand_field.value) is None:
                break
            present.append(hand_field)
        return tuple(present)

    @property
    def field_count(self) -> int:
        return len(self.present_fields)

    @property
    def is_empty(self) -> bool:
        return self.field_count == 0

    @property
    def is_throw_in(self) -> bool:
        return self.bidder == THROW_IN_SEAT

    @property
    def is_complete(self) -> bool:
        return self.is_throw_in or self.field_count == HAND_LENGTH

    @property
    def phase(self) -> HandPhase | None:
        """Next expected input, or None once the hand is complete."""
        if self.is_complete:
            return None
        return phase_for_count(self.field_count)

    @property
    def last_field(self) -> HandField | None:
        present = self.present_fields
        return present[-1] if present else None

    def is_forced(self, hand_field: HandField) -> bool:
        return hand_field in self.forced

    def resolved(self) -> HandFields:
        """Return the hand with defaults substituted for missing fields."""
        return HandFields(
            dealer=self.dealer if self.dealer is not None else DEFAULT_DEALER,
            bidder=self.bidder if self.bidder is not None else DEFAULT_BIDDER,
            bid=self.bid if self.bid is not None else DEFAULT_BID,
            trump=self.trump if self.trump is not None else DEFAULT_TRUMP,
            decision=self.decision if self.decision is not None else DEFAULT_DECISION,
            tricks=self.tricks if self.tricks is not None else DEFAULT_TRICKS,
        )

    @property
    def encoded(self) -> str:
        return encode_hand(self)


def phase_for_count(count: int) -> HandPhase:
    """Map a count of populated positions to the next expected input."""
    if count <= 1:
        return HandPhase.BIDDER
    if count == 2:  # noqa: PLR2004
        return HandPhase.BID
    if count == 3:  # noqa: PLR2004
        return HandPhase.TRUMP
    if count == 4:  # noqa: PLR2004
        return HandPhase.DECISION
    return HandPhase.TRICKS


def _parse_enum(enum_cls: type[Enum], token: str, default: Enum) -> Enum:
    try:
        return enum_cls(token)
    except ValueError:
        return default


def _parse_seat(token: str, default: int, *, allow_throw_in: bool) -> int:
    if not token.isdecimal():
        return default
    seat = int(token)
    lowest = THROW_IN_SEAT if allow_throw_in else 1
    if lowest <= seat <= NUM_SEATS:
        return seat
    return default


def _parse_tricks(token: str) -> int:
    if not token.isdecimal():
        return DEFAULT_TRICKS
    tricks = int(token)
    if tricks > _MAX_TRICKS_DIGIT:
        return DEFAULT_TRICKS
    return tricks


def coerce_field(hand_field: HandField, token: str) -> int | Bid | Trump | Decision:
    """Convert a raw token into the typed value for ``hand_field``.

    Unrecognized tokens become the position's default.
    """
    match hand_field:
        case HandField.DEALER:
            return _parse_seat(token, DEFAULT_DEALER, allow_throw_in=False)
        case HandField.BIDDER:
            return _parse_seat(token, DEFAULT_BIDDER, allow_throw_in=True)
        case HandField.BID:
            return _parse_enum(Bid, token, DEFAULT_BID)
        case HandField.TRUMP:
            return _parse_enum(Trump, token, DEFAULT_TRUMP)
        case HandField.DECISION:
            return _parse_enum(Decision, token, DEFAULT_DECISION)
        case HandField.TRICKS:
            return _parse_tricks(token)


def _token_for(value: int | Bid | Trump | Decision) -> str:
    if isinstance(value, int):
        return str(value)
    return value.value


def append_field(hand: Hand, token: str, *, forced: bool = False) -> Hand:
    """Return a new hand with ``token`` stored in the next empty position.

    Raises ValueError if the hand is already complete.
    """
    if hand.is_complete:
        raise ValueError(f"Cannot append {token!r} to complete hand {hand.encoded!r}")
    hand_field = HAND_FIELD_ORDER[hand.field_count]
    update: dict[str, object] = {hand_field.value: coerce_field(hand_field, token)}
    if forced:
        update["forced"] = hand.forced | {hand_field}
    return hand.model_copy(update=update)


def strip_last_field(hand: Hand) -> Hand:
    """Return a new hand with its last populated position cleared."""
    last = hand.last_field
    if last is None:
        return hand
    return hand.model_copy(update={last.value: None, "forced": hand.forced - {last}})


def encode_hand(hand: Hand | HandFields) -> str:
    """Concatenate the populated positions of ``hand`` into its compact form."""
    if isinstance(hand, HandFields):
        values = [getattr(hand, f.value) for f in HAND_FIELD_ORDER]
    else:
        values = [getattr(hand, f.value) for f in hand.present_fields]
    return "".join(_token_for(v) for v in values)


def decode_hand(encoded: str) -> HandFields:
    """Decode any string into fully resolved hand fields.

    Never raises. Missing or unparseable positions take their defaults
    (dealer 1, bidder 1, bid 4, no trump, play, 0 tricks) and characters
    beyond the sixth are ignored.
    """
    values: dict[str, object] = {}
    for index, hand_field in enumerate(HAND_FIELD_ORDER):
        if index >= len(encoded):
            break
        values[hand_field.value] = coerce_field(hand_field, encoded[index])
    return HandFields(**values)


def parse_hand(encoded: str, forced: frozenset[HandField] = frozenset()) -> Hand:
    """Build an in-progress Hand holding only the positions present in ``encoded``."""
    hand = Hand()
    for char in encoded:
        if hand.is_complete:
            break
        hand = append_field(hand, char)
    return hand.model_copy(update={"forced": frozenset(f for f in forced if f in hand.present_fields)})


def is_hand_complete(encoded: str) -> bool:
    return len(encoded) >= HAND_LENGTH or (len(encoded) > 1 and encoded[1] == str(THROW_IN_SEAT))


def get_current_phase(encoded: str) -> HandPhase:
    """Phase of an encoded hand, judged purely from how many positions exist."""
    return phase_for_count(len(encoded))


def is_pepper_round(hand_index: int, pepper_rounds: int = 4) -> bool:
    return hand_index < pepper_rounds


def next_dealer(dealer: int) -> int:
    """Seat that deals after ``dealer`` (seat 4 wraps to seat 1)."""
    return (dealer % NUM_SEATS) + 1
