import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from basics.connection import ConnectionType, WaitingConnection
from basics.identity_set import Identity
from utils import Action, log_card

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


def remove_finesse(game: "Game", wc: WaitingConnection) -> None:
    """Undo what the connection assumed: unfinesse its cards and drop the inference."""
    state, common = game.state, game.common

    for conn in wc.remaining:
        if conn.type == ConnectionType.KNOWN or state.holder_of(conn.order) is None:
            continue

        card = common.thoughts[conn.order]
        with common.edit(conn.order) as draft:
            if conn.type == ConnectionType.FINESSE:
                draft.finessed = False
                draft.hidden = False
            if card.old_inferred is not None:
                draft.inferred = card.old_inferred
                draft.old_inferred = None
            else:
                logger.error("no old inferences on card %d, current inferences %s", conn.order, card.inferred)

    focus = wc.focused_card
    if state.holder_of(focus) is not None:
        remaining = common.thoughts[focus].inferred.subtract(wc.inference)
        if len(remaining) > 0:
            with common.edit(focus) as draft:
                draft.inferred = remaining
    logger.info("removed inference %s on card %d", log_card(wc.inference, state.variant), focus)


def update_turn(game: "Game", action: Action) -> None:
    """
    Check every waiting connection against what the player who just moved did:
    advance it if they played into it, drop it if they showed it was wrong.
    """
    state, common = game.state, game.common
    last_player = state.last_player_index(action.current_player_index)
    last_action = game.last_actions[last_player]

    kept = []
    demonstrated: dict[int, list[Identity]] = defaultdict(list)
    changed = False

    for wc in common.waiting_connections:
        conn = wc.current
        if conn is None or state.holder_of(wc.focused_card) is None:
            changed = True
            continue

        if conn.reacting != last_player:
            kept.append(wc)
            continue

        logger.info(
            "next conn %d (%s) for inference %s",
            conn.order,
            conn.type,
            log_card(wc.inference, state.variant),
        )

        if state.holder_of(conn.order) is not None:
            if conn.type == ConnectionType.FINESSE and any(state.is_playable(i) for i in conn.identities):
                logger.info("didn't play into finesse, removing inference %s", log_card(wc.inference, state.variant))
                remove_finesse(game, wc)
                changed = True
                continue
            kept.append(wc)
            continue

        changed = True
        if last_action is None or last_action.order != conn.order:
            logger.warning("card %d left %s's hand unexpectedly", conn.order, state.player_names[last_player])
            remove_finesse(game, wc)
            continue

        if last_action.action_type == Action.ActionType.PLAY:
            played = Identity(last_action.suit_index, last_action.rank)
            if not conn.hidden and not conn.bluff and not any(played.matches(i) for i in conn.identities):
                logger.info("card %d was %s, not the connection", conn.order, log_card(played, state.variant))
                remove_finesse(game, wc)
                continue

            logger.info("waiting card %d played", conn.order)
            wc.conn_index += 1
            if conn.type == ConnectionType.FINESSE and not conn.hidden:
                demonstrated[wc.focused_card].append(wc.inference)
            if not wc.done:
                kept.append(wc)
            continue

        logger.info("waiting card %d discarded, removing finesse", conn.order)
        remove_finesse(game, wc)

    # a demonstrated finesse shows the focus is one of the inferences it was for
    for focus, inferences in demonstrated.items():
        if state.holder_of(focus) is None:
            continue
        narrowed = common.thoughts[focus].inferred.intersect(inferences)
        if len(narrowed) > 0:
            logger.info("intersecting card %d with inferences %s", focus, [log_card(i, state.variant) for i in inferences])
            with common.edit(focus) as draft:
                draft.inferred = narrowed

    common.waiting_connections = kept
    if changed:
        common.update_hypo_stacks(state)
        game.convention.team_elim(game)
