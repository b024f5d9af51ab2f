import pandas as pd
import pytest

import hanabi
from basics.identity_set import Identity
from hanabi import IllegalAction, Table, make_deck
from utils import Action, NullStream, PerformAction
from variants import NO_VARIANT

PLAY = PerformAction.ActionType.PLAY
DISCARD = PerformAction.ActionType.DISCARD
COLOUR = PerformAction.ActionType.COLOUR


def make_table(convention="HGroup"):
    """
    An unshuffled deck: Alice holds the red 1s and 2s, Bob the rest of red
    and Cathy starts on yellow.
    """
    return Table(convention, 3, NO_VARIANT, log=NullStream(), deck=make_deck(NO_VARIANT))


def test_deal():
    table = make_table()
    assert len(table.deck) == 50
    assert table.hands[0] == [4, 3, 2, 1, 0]
    assert table.cards_left == 35
    assert all(len(game.state.hands[2]) == 5 for game in table.games)


def test_seats_cannot_see_their_own_cards():
    table = make_table()
    assert table.games[0].state.deck[0].identity() is None
    assert table.games[1].state.deck[0].identity() == Identity(0, 1)


def test_illegal_actions():
    table = make_table()
    with pytest.raises(IllegalAction):
        table.to_action(PerformAction(DISCARD, 0))
    with pytest.raises(IllegalAction):
        table.to_action(PerformAction(PLAY, 5))
    with pytest.raises(IllegalAction):
        table.to_action(PerformAction(COLOUR, 0, 0))
    with pytest.raises(IllegalAction):
        table.to_action(PerformAction(COLOUR, 1, 1))


def test_clue_touches_matching_cards():
    action = make_table().to_action(PerformAction(COLOUR, 1, 0))
    assert action.action_type == Action.ActionType.CLUE
    assert action.touched == [9, 8, 7, 6, 5]


def test_misplay_becomes_failed_discard():
    action = make_table().to_action(PerformAction(PLAY, 3))
    assert action.action_type == Action.ActionType.DISCARD
    assert action.failed


def test_play_advances_the_table():
    table = make_table()
    table.perform(PerformAction(PLAY, 0))

    assert table.play_stacks[0] == 1
    assert table.hands[0][0] == 15
    assert table.turn == 1 and table.current_player == 1
    for game in table.games:
        assert game.state.play_stacks[0] == 1
        assert game.state.turn_count == 2
    assert table.games[0].state.deck[15].identity() is None
    assert table.games[1].state.deck[15].identity() == Identity(1, 3)


def test_three_strikes_end_the_game():
    table = make_table()
    # a red 2, the red 5 and a yellow 2, all onto empty stacks
    for order in (3, 9, 14):
        assert not table.done()
        table.perform(PerformAction(PLAY, order))
    assert table.strikes == 3
    assert table.clue_tokens == 8
    assert table.done()


def test_main_writes_results(tmp_path):
    out = tmp_path / "results.csv"
    results = hanabi.main(["--games", "1", "--seed", "3", "--out", str(out)])

    assert len(results) == 1
    frame = pd.read_csv(out)
    assert list(frame["seed"]) == [3]
    assert 0 <= frame["score"][0] <= 25
