import pytest

from pepper.logic.codec import (
    Hand,
    HandFields,
    append_field,
    decode_hand,
    encode_hand,
    get_current_phase,
    is_hand_complete,
    is_pepper_round,
    next_dealer,
    parse_hand,
    strip_last_field,
)
from pepper.logic.enums import Bid, Decision, HandField, HandPhase, Trump


class TestDecodeHand:
    def test_full_hand(self):
        fields = decode_hand("114HP2")
        assert fields == HandFields(
            dealer=1,
            bidder=1,
            bid=Bid.FOUR,
            trump=Trump.HEARTS,
            decision=Decision.PLAY,
            tricks=2,
        )

    def test_moon_fold(self):
        fields = decode_hand("32MSF3")
        assert fields.bidder == 2
        assert fields.bid == Bid.MOON
        assert fields.trump == Trump.SPADES
        assert fields.decision == Decision.FOLD
        assert fields.tricks == 3

    def test_empty_string_uses_defaults(self):
        assert decode_hand("") == HandFields()

    def test_truncated_hand_fills_defaults(self):
        fields = decode_hand("23")
        assert fields.dealer == 2
        assert fields.bidder == 3
        assert fields.bid == Bid.FOUR
        assert fields.trump == Trump.NO_TRUMP
        assert fields.decision == Decision.PLAY
        assert fields.tricks == 0

    def test_garbage_never_raises(self):
        fields = decode_hand("9x?ZQ!")
        assert fields == HandFields()

    def test_invalid_bid_digit_becomes_four(self):
        assert decode_hand("337HP1").bid == Bid.FOUR

    def test_throw_in(self):
        fields = decode_hand("10")
        assert fields.is_throw_in

    def test_extra_characters_ignored(self):
        assert decode_hand("114HP2XYZ") == decode_hand("114HP2")


class TestEncodeHand:
    def test_fields_round_trip(self):
        fields = HandFields(dealer=3, bidder=4, bid=Bid.DOUBLE_MOON, trump=Trump.CLUBS, tricks=0)
        assert encode_hand(fields) == "34DCP0"
        assert decode_hand(encode_hand(fields)) == fields

    def test_partial_hand_encodes_present_positions(self):
        assert encode_hand(parse_hand("225")) == "225"

    def test_empty_hand(self):
        assert encode_hand(Hand()) == ""


class TestHandPhase:
    @pytest.mark.parametrize(
        ("encoded", "phase"),
        [
            ("", HandPhase.BIDDER),
            ("1", HandPhase.BIDDER),
            ("11", HandPhase.BID),
            ("114", HandPhase.TRUMP),
            ("114H", HandPhase.DECISION),
            ("114HP", HandPhase.TRICKS),
        ],
    )
    def test_phase_from_length(self, encoded, phase):
        assert get_current_phase(encoded) == phase
        assert parse_hand(encoded).phase == phase

    def test_complete_hand_has_no_phase(self):
        assert parse_hand("114HP2").phase is None
        assert parse_hand("10").phase is None

    @pytest.mark.parametrize(
        ("encoded", "complete"),
        [("114HP2", True), ("10", True), ("", False), ("1", False), ("11", False), ("114HP", False)],
    )
    def test_is_hand_complete(self, encoded, complete):
        assert is_hand_complete(encoded) is complete
        assert parse_hand(encoded).is_complete is complete


class TestAppendAndStrip:
    def test_append_fills_next_position(self):
        hand = append_field(parse_hand("11"), "5")
        assert hand.bid == Bid.FIVE
        assert hand.last_field == HandField.BID
        assert not hand.is_forced(HandField.BID)

    def test_append_forced_marks_field(self):
        hand = append_field(parse_hand("1"), "2", forced=True)
        assert hand.is_forced(HandField.BIDDER)

    def test_append_to_complete_hand_raises(self):
        with pytest.raises(ValueError, match="complete hand"):
            append_field(parse_hand("114HP2"), "3")

    def test_strip_clears_last_field_and_marker(self):
        hand = append_field(parse_hand("114H"), "P", forced=True)
        stripped = strip_last_field(hand)
        assert stripped.encoded == "114H"
        assert stripped.forced == frozenset()

    def test_strip_empty_hand_is_noop(self):
        assert strip_last_field(Hand()) == Hand()

    def test_parse_keeps_only_present_forced_fields(self):
        hand = parse_hand("12", frozenset({HandField.DEALER, HandField.TRICKS}))
        assert hand.forced == frozenset({HandField.DEALER})


class TestDealerAndPepperRounds:
    @pytest.mark.parametrize(("dealer", "expected"), [(1, 2), (2, 3), (3, 4), (4, 1)])
    def test_next_dealer_rotates(self, dealer, expected):
        assert next_dealer(dealer) == expected

    def test_first_four_hands_are_pepper_rounds(self):
        assert [is_pepper_round(i) for i in range(6)] == [True, True, True, True, False, False]

    def test_pepper_rounds_can_be_disabled(self):
        assert not is_pepper_round(0, pepper_rounds=0)
