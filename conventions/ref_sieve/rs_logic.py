"""
Referential Sieve hand geometry. Cards are discarded from the left: the chop
is the newest card that nobody has said anything about.
"""
from typing import TYPE_CHECKING, Iterable, Sequence

if TYPE_CHECKING:
    from basics.card import Card
    from basics.hand import Hand


def rs_chop(hand: "Hand", thoughts: Sequence["Card"]) -> int | None:
    """A card called to discard, else the leftmost unsaved card."""
    for order in hand:
        if thoughts[order].called_to_discard:
            return order

    for order in hand:
        if not thoughts[order].saved:
            return order
    return None


def refer(hand: "Hand", thoughts: Sequence["Card"], order: int, direction: str = "left") -> int:
    """
    The next unsaved card from `order` in the given direction, wrapping around
    the hand. A hand with nothing unsaved refers to the card itself.
    """
    assert direction in ("left", "right")
    index = hand.index(order)
    step = -1 if direction == "left" else 1

    for offset in range(1, len(hand)):
        other = hand[(index + step * offset) % len(hand)]
        if not thoughts[other].saved:
            return other
    return order


def newest(orders: Iterable[int]) -> int:
    """Cards are numbered as they are drawn."""
    return max(orders)


def ref_discard_target(hand: "Hand", thoughts: Sequence["Card"], focus: int) -> int | None:
    """The first unsaved card right of the focus, or None if the hand is locked."""
    index = hand.index(focus)
    for order in hand[index + 1 :]:
        if not thoughts[order].saved:
            return order
    return None
