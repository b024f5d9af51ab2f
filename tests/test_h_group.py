from basics.connection import ConnectionType
from basics.identity_set import Identity, IdentitySet
from conventions.h_group import LEVEL, HGroup
from conventions.h_group.clue_safe import clue_safe
from conventions.h_group.connecting_cards import find_connecting
from conventions.h_group.fix_clues import find_fix_clues
from conventions.h_group.hanabi_logic import determine_focus, order_1s, stall_severity
from conventions.h_group.urgent_actions import find_unlock
from tests.helpers import ALICE, BOB, CATHY, clue, discard, play, setup_game
from utils import Action, Clue, ClueType, PerformAction

XX = ["xx"] * 5


def test_play_clue_on_one():
    game = setup_game(HGroup, [XX, ["b4", "g3", "r1", "y4", "p4"], ["g4", "b3", "y3", "r4", "p3"]])
    state, common = game.state, game.common
    r1 = state.hands[BOB][2]

    clue(game, ALICE, BOB, "red")

    assert common.thoughts[r1].inferred.array == [Identity(0, 1)]
    assert common.thinks_playables(state, BOB) == [r1]
    assert game.players[BOB].thoughts[r1].inferred.array == [Identity(0, 1)]
    assert state.clue_tokens == 7


def test_finesse_on_next_player_in_line():
    game = setup_game(HGroup, [XX, ["b4", "g3", "r2", "y4", "p4"], ["r1", "g4", "b3", "y3", "p3"]])
    state, common = game.state, game.common
    r2 = state.hands[BOB][2]
    r1 = state.hands[CATHY][0]

    clue(game, ALICE, BOB, "red")

    assert common.thoughts[r1].finessed
    assert common.thoughts[r1].inferred.array == [Identity(0, 1)]
    assert common.thoughts[r2].inferred.array == [Identity(0, 2)]
    assert common.hypo_stacks[0] == 2
    assert len(common.waiting_connections) == 1


def test_two_save_on_chop():
    game = setup_game(HGroup, [XX, ["b4", "g3", "r3", "y4", "y2"], ["g4", "b3", "y3", "r4", "p3"]])
    state, common = game.state, game.common
    y2, y4 = state.hands[BOB][4], state.hands[BOB][3]

    clue(game, ALICE, BOB, 2)

    twos = IdentitySet.create(5, [Identity(s, 2) for s in range(5)])
    assert common.thoughts[y2].inferred == twos
    assert common.thinks_playables(state, BOB) == []
    assert state.hands[BOB].chop(common.thoughts) == y4


def test_focus_prefers_chop():
    game = setup_game(HGroup, [XX, ["r3", "g3", "b1", "y4", "r4"], ["g4", "b3", "y3", "r4", "p3"]])
    state, common = game.state, game.common
    hand = state.hands[BOB]

    assert determine_focus(hand, common, [hand[0], hand[4]], before_clue=True) == (hand[4], True)
    assert determine_focus(hand, common, [hand[0], hand[2]], before_clue=True) == (hand[0], False)


def test_stall_severity_in_early_game():
    game = setup_game(HGroup, [XX, ["r3", "g3", "b1", "y4", "r4"], ["g4", "b3", "y3", "r4", "p3"]])
    assert stall_severity(game.state, game.common, ALICE) == 1

    game.state.early_game = False
    assert stall_severity(game.state, game.common, ALICE) == 0


def test_level_is_configurable():
    assert HGroup().level == LEVEL.BLUFFS
    assert HGroup(LEVEL.BASICS).level == 1


def test_rank_one_clue_in_two_player_game():
    game = setup_game(HGroup, [XX, ["r1", "g3", "b1", "y4", "p4"]])
    state, common = game.state, game.common
    r1, b1 = state.hands[BOB][0], state.hands[BOB][2]

    clue(game, ALICE, BOB, 1)

    ones = IdentitySet.create(5, [Identity(s, 1) for s in range(5)])
    assert common.thoughts[r1].inferred == ones
    assert common.thoughts[b1].inferred == ones
    assert sorted(common.thinks_playables(state, BOB)) == sorted([r1, b1])
    # older 1s play first
    assert order_1s(state, common, [r1, b1]) == [b1, r1]


def test_save_two_counts_giver_copy_only_when_known():
    # we are Bob: Alice can't see the b2 in her own hand
    hands = [["b2", "g3", "r3", "y4", "p4"], XX, ["g2", "y3", "r4", "g4", "b2"]]
    game = setup_game(HGroup, hands, our_player_index=BOB)
    state, common = game.state, game.common
    b2 = state.hands[CATHY][4]

    clue(game, ALICE, CATHY, 2)

    assert common.thoughts[b2].inferred.has(Identity(3, 2))
    assert not common.thoughts[state.hands[BOB][0]].finessed
    assert common.waiting_connections == []


def test_bluff_only_promises_a_playable_card():
    game = setup_game(HGroup, [XX, ["b1", "g3", "r4", "g4", "p4"], ["y3", "r2", "b3", "y4", "p3"]])
    state, common = game.state, game.common
    b1 = state.hands[BOB][0]

    clue(game, ALICE, CATHY, "red")

    assert common.thoughts[b1].finessed
    assert common.thoughts[b1].bluffed
    assert common.thoughts[b1].inferred == IdentitySet.create(5, [Identity(s, 1) for s in range(5)])
    assert len(common.waiting_connections) == 1
    assert common.waiting_connections[0].connections[0].bluff


def test_prompt_on_clued_card():
    game = setup_game(HGroup, [XX, ["r1", "g3", "b4", "y4", "p4"], ["g4", "b3", "y3", "p3", "r2"]])

    clue(game, ALICE, BOB, "red")
    play(game, BOB, 1, "r1", draw="b5")
    clue(game, CATHY, ALICE, 5, slots=[5])
    clue(game, ALICE, CATHY, 2)
    discard(game, BOB, 5, "p4", draw="r3")
    discard(game, CATHY, 4, "p3", draw="g3")

    state, common = game.state, game.common
    r2 = state.hands[CATHY][4]
    r3 = state.hands[BOB][0]
    assert len(common.thoughts[r2].inferred) == 5

    clue(game, ALICE, BOB, "red")

    assert common.thoughts[r3].inferred.array == [Identity(0, 3)]
    assert common.thoughts[r2].inferred.array == [Identity(0, 2)]
    assert not common.thoughts[r2].finessed

    wc = common.waiting_connections[0]
    assert [(c.type, c.reacting, c.order) for c in wc.connections] == [(ConnectionType.PROMPT, CATHY, r2)]


def test_wrong_prompt_terminates():
    game = setup_game(HGroup, [XX, ["b4", "g3", "r3", "y4", "p4"], ["g4", "b3", "y3", "p3", "y2"]])
    state = game.state
    y2 = state.hands[CATHY][4]
    r3 = state.hands[BOB][2]

    clue(game, ALICE, CATHY, 2)

    action = Action.make_clue(ALICE, BOB, [r3], Clue(ClueType.COLOUR, 0))
    found = find_connecting(game, action, Identity(0, 2), [1, 0, 0, 0, 0], True, [r3])

    assert len(found) == 1
    assert found[0].type == ConnectionType.TERMINATE
    assert (found[0].reacting, found[0].order) == (CATHY, y2)


def test_layered_finesse_plays_through_hidden_card():
    game = setup_game(
        HGroup,
        [XX, ["b1", "r1", "g4", "y4", "p4"], ["r2", "g3", "b3", "y3", "p3"]],
        level=LEVEL.INTERMEDIATE_FINESSES,
    )
    state, common = game.state, game.common
    b1, r1 = state.hands[BOB][0], state.hands[BOB][1]
    r2 = state.hands[CATHY][0]

    clue(game, ALICE, CATHY, "red")

    assert common.thoughts[b1].finessed and common.thoughts[b1].hidden
    assert common.thoughts[b1].inferred.array == [Identity(3, 1)]
    assert common.thoughts[r1].finessed and not common.thoughts[r1].hidden
    assert common.thoughts[r1].inferred.array == [Identity(0, 1)]
    assert common.thoughts[r2].inferred.has(Identity(0, 2))

    wc = common.waiting_connections[0]
    assert [(c.order, c.hidden) for c in wc.connections] == [(b1, True), (r1, False)]


def test_layered_finesse_blocked_below_level():
    game = setup_game(
        HGroup,
        [XX, ["b1", "r1", "g4", "y4", "p4"], ["r2", "g3", "b3", "y3", "p3"]],
        level=LEVEL.BASIC_CM,
    )
    state, common = game.state, game.common

    clue(game, ALICE, CATHY, "red")

    assert not any(common.thoughts[o].finessed for o in state.hands[BOB])


def test_hypo_stacks_stay_between_play_stacks_and_max_ranks():
    game = setup_game(HGroup, [XX, ["b4", "g3", "r2", "y4", "p4"], ["r1", "g4", "b3", "y3", "p3"]])
    state, common = game.state, game.common

    clue(game, ALICE, BOB, "red")

    assert common.hypo_stacks[0] == 2
    for player in game.all_players:
        for played, hypo, max_rank in zip(state.play_stacks, player.hypo_stacks, state.max_ranks):
            assert played <= hypo <= max_rank


def test_discarding_last_two_makes_higher_ranks_trash():
    game = setup_game(HGroup, [XX, ["b4", "g3", "y4", "p4", "r2"], ["g4", "b3", "y3", "p3", "r2"]])

    discard(game, ALICE, 5, "g4")
    discard(game, BOB, 5, "r2", draw="b2")
    discard(game, CATHY, 5, "r2", draw="y2")

    state = game.state
    assert state.max_ranks[0] == 1
    assert state.max_score() == 21
    assert not state.is_basic_trash(Identity(0, 1))
    assert all(state.is_basic_trash(Identity(0, rank)) for rank in range(2, 6))
    assert not any(game.common.thoughts[o].possible.has(Identity(0, 2)) for o in state.our_hand)
    assert game.common.hypo_stacks[0] <= state.max_ranks[0]


def test_misplayed_self_finesse_rewinds():
    game = setup_game(HGroup, [["g4", "b3", "y3", "r4", "p3"], ["r2", "g3", "b4", "y4", "p4"], XX], our_player_index=CATHY)
    slot1, slot2 = game.state.hands[CATHY][0], game.state.hands[CATHY][1]

    clue(game, ALICE, BOB, "red")
    assert game.common.thoughts[slot1].finessed
    assert game.me.thoughts[slot1].inferred.array == [Identity(0, 1)]

    discard(game, BOB, 5, "p4", draw="g4")
    # the finessed card turns out to be b1
    play(game, CATHY, 1, "b1")

    state, common = game.state, game.common
    assert any(a.action_type == Action.ActionType.IDENTIFY for a in state.action_list)
    assert state.play_stacks[3] == 1
    assert common.thoughts[slot2].finessed
    assert common.thoughts[slot2].inferred.array == [Identity(0, 1)]
    assert len(common.waiting_connections) == 1


def test_clue_safe_when_next_player_must_discard_critical():
    game = setup_game(HGroup, [XX, ["r1", "g3", "b4", "y4", "g5"], ["g4", "b3", "y3", "r4", "p5"]])
    state = game.state
    g5 = state.hands[BOB][4]
    p5 = state.hands[CATHY][4]

    five = Action.make_clue(ALICE, CATHY, [p5], Clue(ClueType.RANK, 5))
    assert clue_safe(game, five) == (False, g5)

    # Bob now has a play, and could save Cathy's 5 instead of playing
    red = Action.make_clue(ALICE, BOB, [state.hands[BOB][0]], Clue(ClueType.COLOUR, 0))
    assert clue_safe(game, red) == (True, None)


def test_simulate_action_leaves_game_alone():
    game = setup_game(HGroup, [XX, ["b4", "g3", "r1", "y4", "p4"], ["g4", "b3", "y3", "r4", "p3"]])
    r1 = game.state.hands[BOB][2]
    clue(game, ALICE, BOB, "red")

    hypo_game = game.simulate_action(Action.play(BOB, r1, 0, 1))

    assert hypo_game.state.play_stacks[0] == 1
    assert r1 not in hypo_game.state.hands[BOB]
    assert game.state.play_stacks[0] == 0
    assert r1 in game.state.hands[BOB]


def test_fix_clue_for_bad_two_save():
    # Cathy's g2 is visible, so the 2 clue can't be read as saving Bob's g2
    game = setup_game(HGroup, [XX, ["b4", "g3", "r4", "y4", "g2"], ["g2", "b3", "y3", "r3", "p3"]])
    state, common = game.state, game.common
    g2 = state.hands[BOB][4]

    clue(game, ALICE, BOB, 2)
    assert not common.thoughts[g2].inferred.has(Identity(2, 2))

    fixes = find_fix_clues(game, {BOB: [], CATHY: []}, {BOB: None, CATHY: None})

    assert fixes[CATHY] == []
    assert len(fixes[BOB]) == 1
    fix = fixes[BOB][0]
    assert fix.order == g2
    assert fix.candidate.clue == Clue(ClueType.COLOUR, 2)
    assert not fix.trash
    assert not fix.urgent


def unlock_game(alice_hand):
    game = setup_game(HGroup, [alice_hand, ["b3", "y3", "r4", "g4", "p3"], XX], our_player_index=CATHY)
    clue(game, ALICE, CATHY, "red", slots=[1])
    return game


def test_unlock_before_save():
    game = unlock_game(["r2", "b4", "g3", "y4", "g5"])
    ours = game.state.hands[CATHY][0]
    clue(game, BOB, ALICE, "red")

    assert game.common.thoughts[game.state.hands[ALICE][0]].inferred.array == [Identity(0, 2)]
    assert find_unlock(game, ALICE) == PerformAction(PerformAction.ActionType.PLAY, ours)
    assert game.take_action() == PerformAction(PerformAction.ActionType.PLAY, ours)


def test_save_before_own_play():
    game = unlock_game(["b4", "g3", "y4", "p4", "g5"])
    discard(game, BOB, 5, "p3", draw="b2")

    ours = game.state.hands[CATHY][0]
    assert game.me.thinks_playables(game.state, CATHY) == [ours]
    assert find_unlock(game, ALICE) is None
    assert game.take_action() == PerformAction(PerformAction.ActionType.RANK, ALICE, 5)
