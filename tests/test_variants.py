from basics.identity_set import Identity
from utils import Clue, ClueType
from variants import (
    BLACK,
    BROWN,
    NO_VARIANT,
    PINK,
    PRISM,
    RAINBOW,
    WHITE,
    all_clues,
    card_count,
    card_touched,
    find_variant,
    short_forms,
)

RED = Clue(ClueType.COLOUR, 0)
YELLOW = Clue(ClueType.COLOUR, 1)
THREE = Clue(ClueType.RANK, 3)


def test_plain_suits():
    assert card_touched(Identity(0, 3), NO_VARIANT, RED)
    assert not card_touched(Identity(1, 3), NO_VARIANT, RED)
    assert card_touched(Identity(1, 3), NO_VARIANT, THREE)


def test_unknown_cards_are_never_touched():
    assert not card_touched(Identity(-1, -1), NO_VARIANT, RED)


def test_special_suits():
    special = Identity(5, 3)
    assert card_touched(special, RAINBOW, RED) and card_touched(special, RAINBOW, YELLOW)
    assert not card_touched(special, WHITE, RED)
    assert card_touched(Identity(5, 1), PINK, THREE)
    assert not card_touched(special, BROWN, THREE)


def test_prism_cycles_through_colours():
    assert card_touched(Identity(5, 1), PRISM, RED)
    assert card_touched(Identity(5, 2), PRISM, YELLOW)
    assert not card_touched(Identity(5, 2), PRISM, RED)
    assert card_touched(Identity(5, 2), PRISM, Clue(ClueType.RANK, 2))


def test_dark_suits_have_one_copy():
    assert card_count(BLACK, Identity(5, 1)) == 1
    assert card_count(BLACK, Identity(0, 1)) == 3
    assert card_count(NO_VARIANT, Identity(0, 5)) == 1


def test_only_colourable_suits_get_colour_clues():
    assert len(all_clues(NO_VARIANT)) == 10
    assert len(all_clues(RAINBOW)) == 10
    assert len(all_clues(BLACK)) == 11


def test_find_variant():
    assert find_variant("Rainbow (6 Suits)") is RAINBOW
    custom = find_variant("Red, Teal")
    assert custom.suits == ["Red", "Teal"]
    assert short_forms(custom) == ["r", "t"]
