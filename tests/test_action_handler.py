import pytest

from action_handler import RewindError
from conventions.h_group import HGroup
from tests.helpers import ALICE, BOB, setup_game
from utils import Action, Clue, ClueType

XX = ["xx"] * 5


def make_game():
    return setup_game(HGroup, [XX, ["b4", "g3", "r1", "y4", "p4"], ["g4", "b3", "y3", "r4", "p3"]])


def test_clue_on_cards_outside_the_hand_is_dropped():
    game = make_game()
    state = game.state
    before = len(state.action_list)

    game.handle_action(Action.make_clue(ALICE, BOB, [999], Clue(ClueType.RANK, 1)), catchup=True)

    assert len(state.action_list) == before
    assert state.clue_tokens == 8
    assert not any(game.common.thoughts[o].clued for o in state.hands[BOB])


def test_clue_touching_nothing_is_dropped():
    game = make_game()
    before = len(game.state.action_list)

    game.handle_action(Action.make_clue(ALICE, BOB, [], Clue(ClueType.RANK, 5)), catchup=True)

    assert len(game.state.action_list) == before
    assert game.state.clue_tokens == 8


@pytest.mark.parametrize("error", [RewindError("Rewind depth went too deep!"), RecursionError("Maximum recursive depth reached")])
def test_depth_errors_abort_only_the_action(monkeypatch, error):
    game = make_game()
    state = game.state
    r1 = state.hands[BOB][2]
    before = len(state.action_list)

    def too_deep(game, action):
        raise error

    monkeypatch.setattr(game.convention, "interpret_clue", too_deep)
    game.handle_action(Action.make_clue(ALICE, BOB, [r1], Clue(ClueType.COLOUR, 0)), catchup=True)

    assert len(state.action_list) == before

    # the game carries on with the next action
    game.handle_action(Action.turn(state.turn_count, BOB), catchup=True)
    assert state.current_player_index == BOB
