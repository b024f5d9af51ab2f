"""
What a clue means under H-Group: good touch, fixes, stalls, chop moves, and
otherwise the identity of the focused card together with the connections that
make it playable.
"""
import logging
from typing import TYPE_CHECKING

from basics.connection import Connection, ConnectionType, WaitingConnection
from basics.helper import check_fix, on_clue
from basics.identity_set import Identity
from conventions.h_group.focus_possible import FocusPossibility, find_focus_possible
from conventions.h_group.h_constants import LEVEL
from conventions.h_group.hanabi_logic import determine_focus, log_focus, stall_severity
from conventions.h_group.interpret_cm import interpret_5cm, interpret_tcm
from conventions.h_group.interpret_stall import stalling_situation
from conventions.h_group.own_finesses import IllegalInterpretation, find_own_finesses
from state_proxy import produce
from utils import Action, ClueType, log_card, log_identities

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


def apply_good_touch(game: "Game", action: Action) -> bool:
    """
    Apply the clue and eliminate on touched cards. Returns whether the clue
    fixes a card the team had the wrong idea about.
    """
    old_thoughts = list(game.common.thoughts)

    on_clue(game, action)
    resets = game.common.good_touch_elim(game.state)
    return check_fix(game, old_thoughts, action, resets)


def assign_connections(game: "Game", connections: list[Connection], assigned: set[int]) -> None:
    """
    Give every connecting card the identity its connection needs. A card
    already assigned by another possibility of the same clue keeps both.
    """
    state, common = game.state, game.common
    action_index = len(state.action_list) - 1

    for conn in connections:
        if conn.type == ConnectionType.KNOWN:
            continue

        order = conn.order
        card = common.thoughts[order]
        logger.info(
            "connecting on %s order %d type %s%s",
            log_card(state.deck[order], state.variant),
            order,
            conn.type,
            " (hidden)" if conn.hidden else "",
        )

        def recipe(draft, card=card):
            if order in assigned:
                draft.union("inferred", conn.identities)
            else:
                draft.old_inferred = card.inferred
                draft.inferred = card.possible.intersect(conn.identities)
            if conn.type == ConnectionType.FINESSE:
                draft.finessed = True
                draft.hidden = conn.hidden
                draft.bluffed = conn.bluff
                if draft.finesse_index == -1:
                    draft.finesse_index = action_index
            if conn.self_finesse and (not card.reasoning or card.reasoning[-1] != action_index):
                draft.reasoning = card.reasoning + [action_index]
                draft.reasoning_turn = card.reasoning_turn + [state.turn_count]

        common.thoughts[order] = produce(
            card,
            recipe,
            on_patches=lambda patches, order=order: logger.debug("card %d: %s", order, patches),
        )
        assigned.add(order)


def _wait_for(game: "Game", action: Action, focus: int, identity: Identity, connections: list[Connection], symmetric: bool) -> None:
    if not any(conn.type in (ConnectionType.PROMPT, ConnectionType.FINESSE) for conn in connections):
        return

    state = game.state
    game.common.waiting_connections.append(
        WaitingConnection(
            list(connections),
            action.giver,
            action.target,
            focus,
            identity,
            len(state.action_list) - 1,
            state.turn_count,
            symmetric=symmetric,
        )
    )


def _looks_direct(focus_possible: list[FocusPossibility]) -> bool:
    """Whether the target could take the clue as a save or a direct play."""
    return any(
        fp.save
        or all(c.type in (ConnectionType.KNOWN, ConnectionType.PLAYABLE, ConnectionType.PROMPT) for c in fp.connections)
        for fp in focus_possible
    )


def _own_finesse_options(
    game: "Game", action: Action, focus: int, looks_direct: bool
) -> list[tuple[Identity, list[Connection]]]:
    state = game.state
    us = state.our_player_index
    focus_card = game.common.thoughts[focus]

    if action.target == us:
        candidates = [i for i in focus_card.inferred if not state.is_basic_trash(i)]
    else:
        actual = state.deck[focus].identity()
        candidates = [actual] if actual is not None and not state.is_basic_trash(actual) else []

    options = []
    self_option, min_blind_plays = None, len(state.our_hand) + 1
    others_found = False

    for identity in candidates:
        try:
            connections = find_own_finesses(game, action, focus, identity, looks_direct)
        except IllegalInterpretation as err:
            logger.info("%s not possible: %s", log_card(identity, state.variant), err)
            continue

        blind_plays = sum(1 for c in connections if c.type == ConnectionType.FINESSE)
        logger.info("%s feasible with %d blind plays", log_card(identity, state.variant), blind_plays)

        if action.target == us and connections and connections[0].self_finesse:
            if blind_plays < min_blind_plays:
                self_option, min_blind_plays = (identity, connections), blind_plays
        else:
            others_found = True
            options.append((identity, connections))

    # a connection nobody has to find in their own hand beats any self-finesse
    if not others_found and self_option is not None:
        options.append(self_option)
    return options


def interpret_clue(game: "Game", action: Action) -> None:
    state, common = game.state, game.common
    giver, target, clue = action.giver, action.target, action.clue
    hand = state.hands[target]
    level = game.convention.level
    us = state.our_player_index

    severity = stall_severity(state, common, giver)
    focus, chop = determine_focus(hand, common, action.touched, before_clue=True)

    fix = apply_good_touch(game, action)

    focus_card = common.thoughts[focus]
    with common.edit(focus) as draft:
        draft.focused = True
        if len(focus_card.inferred) == 0:
            logger.error("focused card had no inferences after applying good touch")
            draft.inferred = focus_card.possible

    logger.info("focus %s%s", log_focus(state, focus), ", on chop" if chop else "")
    logger.debug("pre-inferences %s", log_identities(common.thoughts[focus].inferred, state.variant))

    if fix and level >= LEVEL.FIX:
        logger.info("fix clue! not inferring anything else")
        _finish(game)
        return

    stall = stalling_situation(game, action, severity, focus, chop)
    if stall is not None:
        logger.info("stalling situation, interpreted as %s", stall)
        _finish(game)
        return

    if level >= LEVEL.BASIC_CM and common.thoughts[focus].newly_clued:
        if common.thoughts[focus].possible.every(state.is_basic_trash):
            interpret_tcm(game, target)
            _finish(game)
            return

        if clue.type == ClueType.RANK and clue.value == 5 and not chop and interpret_5cm(game, action):
            _finish(game)
            return

    focus_possible = find_focus_possible(game, action, focus, chop)
    if target == us:
        matched = [fp for fp in focus_possible if common.thoughts[focus].inferred.has(fp.identity)]
    else:
        matched = [fp for fp in focus_possible if state.deck[focus].matches(fp.identity)]

    assigned: set[int] = set()

    if matched:
        with common.edit(focus) as draft:
            draft.intersect("inferred", [fp.identity for fp in focus_possible])

        plays = [fp for fp in matched if not fp.save]
        for fp in plays:
            assign_connections(game, fp.connections, assigned)
            _wait_for(game, action, focus, fp.identity, fp.connections, symmetric=len(plays) > 1)
    else:
        logger.info(
            "card %s doesn't match any inferences! inferences %s",
            log_focus(state, focus),
            log_identities(common.thoughts[focus].inferred, state.variant),
        )
        options = _own_finesse_options(game, action, focus, _looks_direct(focus_possible))

        if not options:
            saved = common.thoughts[focus].inferred
            with common.edit(focus) as draft:
                draft.reset = True
                if target != us:
                    # adopt the target's view so that we notice it needs fixing
                    draft.intersect("inferred", [fp.identity for fp in focus_possible])
                    if len(draft.inferred) == 0:
                        draft.inferred = saved
            logger.info("no inference on card, looks like %s", log_identities(common.thoughts[focus].inferred, state.variant))
        else:
            with common.edit(focus) as draft:
                draft.inferred = draft.possible.intersect([identity for identity, _ in options])

            for identity, connections in options:
                assign_connections(game, connections, assigned)
                _wait_for(game, action, focus, identity, connections, symmetric=len(options) > 1)

    logger.info("final inference on focused card %s", log_identities(common.thoughts[focus].inferred, state.variant))
    _finish(game)


def _finish(game: "Game") -> None:
    state, common = game.state, game.common
    common.good_touch_elim(state)
    common.refresh_links(state)
    common.update_hypo_stacks(state)
    game.convention.team_elim(game)
