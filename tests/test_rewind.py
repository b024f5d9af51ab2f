import pytest

from action_handler import RewindError
from basics.identity_set import Identity
from conventions.h_group import HGroup
from tests.helpers import ALICE, BOB, CATHY, clue, setup_game
from utils import Action

P5 = Identity(4, 5)


def make_game():
    game = setup_game(HGroup, [["xx"] * 5, ["b4", "g3", "r1", "y4", "p4"], ["g4", "b3", "y3", "r4", "p3"]])
    clue(game, ALICE, BOB, "red")
    return game


def test_rewind_identifies_card_from_when_it_was_drawn():
    game = make_game()
    order = game.state.our_hand[4]
    drawn_index = game.me.thoughts[order].drawn_index
    identify = Action.identify(order, ALICE, [P5])

    assert game.rewind(drawn_index, identify)

    assert game.state.action_list[drawn_index + 1] == identify
    card = game.me.thoughts[order]
    assert card.rewinded
    assert card.identity() == P5
    # the actions after the rewind point were replayed
    assert game.state.clue_tokens == 7
    assert game.state.turn_count == 2


def test_rewinding_twice_is_refused():
    game = make_game()
    order = game.state.our_hand[4]
    identify = Action.identify(order, ALICE, [P5])
    game.rewind(0, identify)

    with pytest.raises(RewindError):
        game.rewind(0, identify)


def test_invalid_index_is_rejected():
    game = make_game()
    assert not game.rewind(len(game.state.action_list) + 5, Action.identify(0, ALICE, [P5]))


def test_navigate_drops_rewinds():
    game = make_game()
    order = game.state.our_hand[4]
    game.rewind(0, Action.identify(order, ALICE, [P5]))

    start = game.navigate(1)
    assert start.state.clue_tokens == 8
    assert len(start.state.hands[CATHY]) == 5
    assert not start.me.thoughts[order].rewinded
    assert all(not a.synthetic for a in start.state.action_list)

    now = game.navigate(2)
    assert now.state.clue_tokens == 7


def test_rewind_without_new_action_replays_the_same_beliefs():
    game = make_game()
    state = game.state
    orders = [o for hand in state.hands for o in hand]
    before = {o: (game.common.thoughts[o].inferred, game.me.thoughts[o].inferred) for o in orders}
    hypo_stacks = list(game.common.hypo_stacks)

    assert game.rewind(len(state.action_list) // 2)

    assert {o: (game.common.thoughts[o].inferred, game.me.thoughts[o].inferred) for o in orders} == before
    assert game.common.hypo_stacks == hypo_stacks
    assert game.state.clue_tokens == 7
    assert len(game.state.action_list) == len(state.action_list)
