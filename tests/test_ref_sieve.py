from basics.identity_set import Identity, IdentitySet
from conventions.ref_sieve import RefSieve
from conventions.ref_sieve.interpret_clue import interpret_clue
from conventions.ref_sieve.rs_constants import CLUE_INTERP
from conventions.ref_sieve.rs_logic import refer, ref_discard_target, rs_chop
from conventions.ref_sieve.update_turn import update_turn
from conventions.shared.sarcastic import find_sarcastic
from tests.helpers import ALICE, BOB, CATHY, clue, discard, setup_game
from utils import Action, Clue, ClueType, PerformAction

XX = ["xx"] * 5
CATHY_HAND = ["g4", "b3", "y3", "r4", "p3"]


def ones_except(suit_index):
    return IdentitySet.create(5, [Identity(s, 1) for s in range(5) if s != suit_index])


def test_colour_clue_refers_left():
    game = setup_game(RefSieve, [XX, ["r1", "b4", "g4", "y3", "p4"], CATHY_HAND])
    state, common = game.state, game.common
    slot1 = state.hands[BOB][0]

    clue(game, ALICE, BOB, "blue")

    card = common.thoughts[slot1]
    assert card.finessed
    assert card.inferred == ones_except(3)
    assert common.thinks_playables(state, BOB) == [slot1]


def test_rank_clue_refers_right_to_discard():
    game = setup_game(RefSieve, [XX, ["r3", "b4", "g2", "y3", "p3"], CATHY_HAND])
    state, common = game.state, game.common
    slot3 = state.hands[BOB][2]

    clue(game, ALICE, BOB, 4)

    assert common.thoughts[slot3].called_to_discard
    assert rs_chop(state.hands[BOB], common.thoughts) == slot3


def test_discarding_answers_the_call():
    game = setup_game(RefSieve, [XX, ["r3", "b4", "g2", "y3", "p3"], CATHY_HAND])
    state, common = game.state, game.common

    clue(game, ALICE, BOB, 4)
    discard(game, BOB, 3, "g2", draw="r5")

    assert state.discard_stacks[2][1] == 1
    assert state.clue_tokens == 8
    assert not any(common.thoughts[o].called_to_discard for o in state.hands[BOB])
    assert rs_chop(state.hands[BOB], common.thoughts) == state.hands[BOB][0]


def test_rank_clue_on_last_card_locks():
    game = setup_game(RefSieve, [XX, ["r3", "b3", "g2", "y3", "p4"], CATHY_HAND])
    state, common = game.state, game.common
    hand = state.hands[BOB]

    action = Action.make_clue(ALICE, BOB, [hand[4]], Clue(ClueType.RANK, 4))
    state.action_list.append(action)

    assert interpret_clue(game, action) == CLUE_INTERP.LOCK
    assert all(common.thoughts[o].saved for o in hand)
    assert common.thinks_locked(state, BOB)
    assert rs_chop(hand, common.thoughts) is None


def test_we_play_a_referred_card():
    game = setup_game(RefSieve, [XX, ["r3", "b3", "g2", "y3", "p4"], CATHY_HAND])
    state = game.state
    slot1 = state.our_hand[0]

    clue(game, BOB, ALICE, "red", slots=[2])

    assert game.common.thoughts[slot1].inferred == ones_except(0)
    assert game.take_action() == PerformAction(PerformAction.ActionType.PLAY, slot1)


def test_sarcastic_targets_in_our_hand():
    game = setup_game(RefSieve, [XX, ["r3", "b3", "g2", "y3", "p4"], CATHY_HAND])
    hand = game.state.our_hand

    clue(game, BOB, ALICE, "red", slots=[2, 3])

    assert find_sarcastic(game, ALICE, game.me, Identity(0, 4)) == [hand[1], hand[2]]
    # cards we can see are found by identity
    assert find_sarcastic(game, CATHY, game.me, Identity(3, 3)) == [game.state.hands[CATHY][1]]


def test_stale_play_call_is_dropped():
    game = setup_game(RefSieve, [XX, ["r1", "b4", "g4", "y3", "p4"], CATHY_HAND])
    state, common = game.state, game.common
    slot1 = state.hands[BOB][0]

    clue(game, ALICE, BOB, "blue")
    old_inferred = common.thoughts[slot1].old_inferred

    # every red 1 is gone, and the call had narrowed to it
    with common.edit(slot1) as draft:
        draft.inferred = IdentitySet.create(5, Identity(0, 1))
    state.play_stacks[0] = 1

    update_turn(game, Action.turn(state.turn_count, CATHY))

    card = common.thoughts[slot1]
    assert not card.finessed
    assert card.inferred == old_inferred.subtract(Identity(0, 1))


def test_refer_wraps_around():
    game = setup_game(RefSieve, [XX, ["r3", "b3", "g2", "y3", "p4"], CATHY_HAND])
    hand, thoughts = game.state.hands[BOB], game.common.thoughts

    assert refer(hand, thoughts, hand[0], "left") == hand[4]
    assert refer(hand, thoughts, hand[4], "right") == hand[0]
    assert ref_discard_target(hand, thoughts, hand[4]) is None
