import re
from typing import Final

from utils import Clue, ClueType


MAX_RANK: Final[int] = 5
COUNTS: Final[list[int]] = [3, 2, 2, 2, 1]

SHORT_FORMS: Final[dict[str, str]] = {
    "Red": "r",
    "Yellow": "y",
    "Green": "g",
    "Blue": "b",
    "Purple": "p",
    "Teal": "t",
    "Black": "k",
    "Rainbow": "m",
    "White": "w",
    "Pink": "i",
    "Brown": "n",
    "Omni": "o",
    "Null": "u",
    "Prism": "i",
}

ALL_COLOUR_REGEX = re.compile(r"Rainbow|Omni")
NO_COLOUR_REGEX = re.compile(r"White|Gray|Light|Null")
ALL_RANK_REGEX = re.compile(r"Pink|Omni")
NO_RANK_REGEX = re.compile(r"Brown|Muddy|Cocoa|Null")
DARK_REGEX = re.compile(r"Black|Dark|Gray|Cocoa")
PRISM_REGEX = re.compile(r"Prism")


class Variant:
    def __init__(self, name: str, suits: list[str]) -> None:
        self.name = name
        self.suits = list(suits)

    @property
    def num_suits(self) -> int:
        return len(self.suits)

    def __eq__(self, other):
        return isinstance(other, Variant) and self.suits == other.suits

    def __hash__(self):
        return hash(tuple(self.suits))

    def __repr__(self):
        return f"Variant({self.name!r})"


NO_VARIANT = Variant("No Variant", ["Red", "Yellow", "Green", "Blue", "Purple"])
SIX_SUITS = Variant("6 Suits", ["Red", "Yellow", "Green", "Blue", "Purple", "Teal"])
BLACK = Variant("Black (6 Suits)", ["Red", "Yellow", "Green", "Blue", "Purple", "Black"])
RAINBOW = Variant("Rainbow (6 Suits)", ["Red", "Yellow", "Green", "Blue", "Purple", "Rainbow"])
PINK = Variant("Pink (6 Suits)", ["Red", "Yellow", "Green", "Blue", "Purple", "Pink"])
WHITE = Variant("White (6 Suits)", ["Red", "Yellow", "Green", "Blue", "Purple", "White"])
BROWN = Variant("Brown (6 Suits)", ["Red", "Yellow", "Green", "Blue", "Purple", "Brown"])
PRISM = Variant("Prism (6 Suits)", ["Red", "Yellow", "Green", "Blue", "Purple", "Prism"])

VARIANTS: Final[dict[str, Variant]] = {
    v.name: v for v in (NO_VARIANT, SIX_SUITS, BLACK, RAINBOW, PINK, WHITE, BROWN, PRISM)
}


def colourable_suits(variant: Variant) -> list[str]:
    """Suits that have a colour clue of their own."""
    return [
        s
        for s in variant.suits
        if not ALL_COLOUR_REGEX.search(s)
        and not NO_COLOUR_REGEX.search(s)
        and not PRISM_REGEX.search(s)
    ]


def card_touched(card, variant: Variant, clue: Clue) -> bool:
    """
    Whether a card (anything with suit_index and rank) would be touched by the
    clue. Unknown cards are never touched.
    """
    suit_index, rank = card.suit_index, card.rank
    if suit_index == -1 or rank == -1:
        return False

    suit = variant.suits[suit_index]

    if clue.type == ClueType.COLOUR:
        if NO_COLOUR_REGEX.search(suit):
            return False
        if ALL_COLOUR_REGEX.search(suit):
            return True
        if PRISM_REGEX.search(suit):
            colourable = colourable_suits(variant)
            return variant.suits.index(colourable[(rank - 1) % len(colourable)]) == clue.value
        return suit_index == clue.value

    if NO_RANK_REGEX.search(suit):
        return False
    if ALL_RANK_REGEX.search(suit):
        return True
    return rank == clue.value


def is_cluable(variant: Variant, clue: Clue) -> bool:
    if clue.type == ClueType.COLOUR:
        return 0 <= clue.value < len(variant.suits) and variant.suits[
            clue.value
        ] in colourable_suits(variant)
    return 1 <= clue.value <= MAX_RANK


def all_clues(variant: Variant) -> list[Clue]:
    colours = [
        Clue(ClueType.COLOUR, variant.suits.index(s)) for s in colourable_suits(variant)
    ]
    return colours + [Clue(ClueType.RANK, r) for r in range(1, MAX_RANK + 1)]


def card_count(variant: Variant, identity) -> int:
    """Number of physical copies of an identity in the deck."""
    if DARK_REGEX.search(variant.suits[identity.suit_index]):
        return 1
    return COUNTS[identity.rank - 1]


def all_identities(variant: Variant) -> list:
    from basics.card import Identity

    return [
        Identity(suit_index, rank)
        for suit_index in range(variant.num_suits)
        for rank in range(1, MAX_RANK + 1)
    ]


def find_possibilities(clue: Clue, variant: Variant) -> list:
    """All identities that would be touched by the clue."""
    return [i for i in all_identities(variant) if card_touched(i, variant, clue)]


def short_forms(variant: Variant) -> list[str]:
    forms = []
    for suit in variant.suits:
        base = suit.removeprefix("Dark ")
        form = SHORT_FORMS.get(base, base[0].lower())
        if form in forms:
            form = next(c for c in base.lower() if c not in forms)
        forms.append(form)
    return forms


def find_variant(name: str) -> Variant:
    """
    Look up a preset by name. Unknown names are treated as a plain list of
    comma-separated suits.
    """
    if name in VARIANTS:
        return VARIANTS[name]
    return Variant(name, [s.strip() for s in name.split(",")])
