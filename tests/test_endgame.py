import time

import pytest

from basics.identity_set import Identity
from conventions.h_group import HGroup
from conventions.shared.endgame import EndgameCard, EndgameState, UnsolvedGame, find_endgame_action, solve_game
from tests.helpers import setup_game
from utils import PerformAction

P5 = Identity(4, 5)
R1 = Identity(0, 1)


def almost_won(hands, clue_tokens=0, turns_left=2):
    return EndgameState((5, 5, 5, 5, 4), (5,) * 5, hands, clue_tokens, turns_left, 0)


def test_plays_the_last_card():
    es = almost_won(((EndgameCard(3, P5, True),), (EndgameCard(7, R1, True),)))
    assert solve_game(es, time.monotonic() + 5) == PerformAction(PerformAction.ActionType.PLAY, 3)


def test_discards_trash_to_hand_over_the_last_card():
    es = almost_won(((EndgameCard(3, R1, True),), (EndgameCard(7, P5, True),)))
    assert es.won() is False
    assert solve_game(es, time.monotonic() + 5) == PerformAction(PerformAction.ActionType.DISCARD, 3)


def test_unknown_last_card_is_unsolvable():
    es = almost_won(((EndgameCard(3, P5, False),), ()), clue_tokens=1)
    with pytest.raises(UnsolvedGame):
        solve_game(es, time.monotonic() + 5)


def test_not_attempted_with_cards_left():
    game = setup_game(HGroup, [["xx"] * 5, ["r1", "g3", "b1", "y4", "p4"], ["g4", "b3", "y3", "r4", "p3"]])
    assert find_endgame_action(game) is None
