import logging
from typing import TYPE_CHECKING

from basics.helper import on_discard
from basics.identity_set import Identity
from conventions.h_group.h_constants import DISCARD_INTERP, LEVEL
from conventions.h_group.update_turn import remove_finesse
from conventions.shared.rewind import check_rewind
from conventions.shared.sarcastic import interpret_sarcastic
from utils import Action, log_card

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


def interpret_discard(game: "Game", action: Action) -> DISCARD_INTERP:
    state, common = game.state, game.common
    order, player_index = action.order, action.player_index
    identity = Identity(action.suit_index, action.rank)
    level = game.convention.level

    card = common.thoughts[order]
    known_trash = common.thinks_trash(state, player_index)
    useful = card.clued and not state.is_basic_trash(identity)
    chop = state.hands[player_index].chop(common.thoughts)
    interp = DISCARD_INTERP.NONE

    if action.failed:
        logger.info("bomb on card %d (%s)", order, log_card(identity, state.variant))
        interp = DISCARD_INTERP.MISPLAY
        if not card.inferred.has(identity):
            for player in game.all_players:
                player.restore_elim(state, order, identity)

        for wc in list(common.waiting_connections):
            if any(conn.order == order for conn in wc.remaining):
                logger.info("bombed a card in a waiting connection, removing it")
                remove_finesse(game, wc)
                common.waiting_connections.remove(wc)
    elif not state.is_basic_trash(identity):
        check_rewind(game, action)

    if state.early_game and not action.failed and order not in known_trash:
        logger.info("discarded a card that wasn't known trash, ending early game")
        state.early_game = False

    on_discard(game, action)

    if not action.failed and useful and level >= LEVEL.SARCASTIC:
        interpret_sarcastic(game, action)
        interp = DISCARD_INTERP.SARCASTIC
    elif not action.failed and not card.saved and chop is not None and order != chop and order not in known_trash:
        # positional discards are not part of this convention
        logger.debug("not interpreting discard of card %d as positional", order)

    for player in game.all_players:
        player.good_touch_elim(state)
    common.refresh_links(state)
    common.update_hypo_stacks(state)
    game.convention.team_elim(game)
    return interp
