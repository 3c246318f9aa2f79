"""
String enum definitions for Pepper game concepts.

Values are the single-character tokens used by the compact hand encoding,
so ``Trump("H")`` and ``Bid("M")`` parse encoded positions directly.
"""

from enum import Enum


class Trump(str, Enum):
    """Trump suit called by the bid winner."""

    CLUBS = "C"
    DIAMONDS = "D"
    HEARTS = "H"
    SPADES = "S"
    NO_TRUMP = "N"


TRUMP_NAMES = {
    Trump.CLUBS: "Clubs",
    Trump.DIAMONDS: "Diamonds",
    Trump.HEARTS: "Hearts",
    Trump.SPADES: "Spades",
    Trump.NO_TRUMP: "No Trump",
}


class Bid(str, Enum):
    """Winning bid. PEPPER is the reserved marker for forced pepper rounds."""

    PEPPER = "P"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    MOON = "M"
    DOUBLE_MOON = "D"


class Decision(str, Enum):
    """Defenders' choice once trump is known."""

    PLAY = "P"
    FOLD = "F"


class HandField(str, Enum):
    """Ordered positions of a hand record."""

    DEALER = "dealer"
    BIDDER = "bidder"
    BID = "bid"
    TRUMP = "trump"
    DECISION = "decision"
    TRICKS = "tricks"


HAND_FIELD_ORDER = (
    HandField.DEALER,
    HandField.BIDDER,
    HandField.BID,
    HandField.TRUMP,
    HandField.DECISION,
    HandField.TRICKS,
)


class HandPhase(str, Enum):
    """Input expected next for an in-progress hand."""

    BIDDER = "bidder"
    BID = "bid"
    TRUMP = "trump"
    DECISION = "decision"
    TRICKS = "tricks"


class HandKind(str, Enum):
    """Classification of a hand for history display."""

    INCOMPLETE = "incomplete"
    PASS = "pass"  # noqa: S105
    PLAY = "play"
    FORCED_SET = "forced-set"
    UNFORCED_SET = "unforced-set"


class PepperBidSchedule(str, Enum):
    """How the forced bid is recorded across the pepper rounds."""

    FIXED = "fixed"  # every pepper round records the P marker, worth 4
    ESCALATING = "escalating"  # rounds record 4, 5, 6, Moon


class UndoResult(str, Enum):
    """Outcome of GameManager.undo()."""

    STEPPED = "stepped"
    RETURN_TO_SETUP = "return_to_setup"
