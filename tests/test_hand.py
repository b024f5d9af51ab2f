from basics.card import Card
from basics.hand import Hand
from basics.identity_set import IdentitySet
from state_proxy import freeze


def make_thoughts(n, **flags):
    """`flags` maps a field name to the orders that have it set."""
    thoughts = []
    for order in range(n):
        card = Card(-1, -1, IdentitySet.create(5), order=order)
        for field, orders in flags.items():
            if order in orders:
                setattr(card, field, True)
        thoughts.append(freeze(card))
    return thoughts


def test_chop_is_oldest_unsaved_card():
    hand = Hand([4, 3, 2, 1, 0])
    thoughts = make_thoughts(5, clued=[0], chop_moved=[1])
    assert hand.chop(thoughts) == 2
    assert hand.chop_index(thoughts) == 2


def test_no_chop_when_everything_is_saved():
    hand = Hand([1, 0])
    thoughts = make_thoughts(2, clued=[0], finessed=[1])
    assert hand.chop(thoughts) is None
    assert hand.chop_index(thoughts) == -1


def test_chop_after_clue_ignores_newly_clued():
    hand = Hand([2, 1, 0])
    thoughts = make_thoughts(3, clued=[0], newly_clued=[0])
    assert hand.chop(thoughts) == 1
    assert hand.chop(thoughts, after_clue=True) == 0


def test_remove_order():
    hand = Hand([2, 1, 0])
    hand.remove_order(1)
    assert hand == [2, 0]
    assert hand.find_index(1) == -1
