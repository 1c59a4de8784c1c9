import itertools

import pytest

from teenpatti.cards import RANKS, parse_cards
from teenpatti.evaluator import HandCategory, HandRank, compare, evaluate


def rank_of(*labels: str) -> HandRank:
    return evaluate(parse_cards(list(labels)))


def test_evaluate_identifies_all_hand_categories():
    cases = [
        (HandCategory.TRAIL, 7, ["7h", "7d", "7c"]),
        (HandCategory.PURE_SEQUENCE, 11, ["9s", "10s", "Js"]),
        (HandCategory.SEQUENCE, 6, ["4h", "5d", "6c"]),
        (HandCategory.COLOR, 13, ["Kd", "8d", "2d"]),
        (HandCategory.PAIR, 5, ["5h", "5s", "Ac"]),
        (HandCategory.HIGH_CARD, 14, ["Ah", "9d", "4c"]),
    ]

    for category, value, labels in cases:
        result = rank_of(*labels)
        assert result.category == category, f"labels={labels}"
        assert result.value == value, f"labels={labels}"


def test_evaluate_is_order_independent():
    hands = [
        ["Qh", "Kh", "Ah"],
        ["2c", "3d", "Ah"],
        ["9h", "9d", "4c"],
        ["Jd", "3d", "7d"],
        ["10s", "6h", "2c"],
    ]
    for labels in hands:
        expected = rank_of(*labels)
        for permutation in itertools.permutations(labels):
            assert rank_of(*permutation) == expected


def test_ace_two_three_is_the_lowest_sequence():
    low = rank_of("Ah", "2d", "3c")
    assert low.category == HandCategory.SEQUENCE
    assert low.value == 3
    assert low < rank_of("2h", "3d", "4c")
    assert rank_of("Qh", "Kd", "Ac").value == 14
    assert rank_of("As", "2s", "3s").category == HandCategory.PURE_SEQUENCE


def test_no_other_wraparound_counts_as_sequence():
    assert rank_of("Kh", "Ad", "2c").category == HandCategory.HIGH_CARD
    assert rank_of("Qh", "Ad", "2c").category == HandCategory.HIGH_CARD
    assert rank_of("4h", "6d", "8c").category == HandCategory.HIGH_CARD


def test_sequence_needs_exactly_three_cards():
    with pytest.raises(ValueError, match="Expected 3 cards"):
        evaluate(parse_cards(["3h", "4d", "5c", "6s"]))
    with pytest.raises(ValueError, match="Expected 3 cards"):
        evaluate(parse_cards(["3h", "4d"]))


def test_trail_outranks_pure_sequence():
    assert rank_of("2h", "2d", "2c") > rank_of("Qs", "Ks", "As")


def test_any_pair_outranks_any_high_card():
    best_high_card = rank_of("Ah", "Kd", "Jc")
    for rank in RANKS:
        kicker = "3" if rank == "2" else "2"
        pair = rank_of(f"{rank}h", f"{rank}d", f"{kicker}c")
        assert pair.category == HandCategory.PAIR
        assert pair > best_high_card


def test_compare_uses_category_then_value():
    assert compare(rank_of("Kh", "Kd", "2c"), rank_of("Qh", "Qd", "Ac")) == 1
    assert compare(rank_of("4h", "5h", "7h"), rank_of("4d", "5d", "6d")) == -1
    # Only the top card breaks ties inside high card.
    assert compare(rank_of("Ah", "Kd", "2c"), rank_of("Ad", "Qh", "3s")) == 0


def test_rank_serialises_with_display_name():
    assert rank_of("9s", "10s", "Js").to_dict() == {"rank": 5, "value": 11, "name": "Pure Sequence"}
    assert rank_of("Ah", "9d", "4c").name == "High Card"
