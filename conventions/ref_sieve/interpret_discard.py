import logging
from typing import TYPE_CHECKING

from basics.helper import on_discard
from basics.identity_set import Identity
from conventions.ref_sieve.rs_constants import DISCARD_INTERP
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

    card = common.thoughts[order]
    useful = card.clued and not state.is_basic_trash(identity)
    interp = DISCARD_INTERP.NONE

    if action.failed:
        logger.info("bomb on card %d (%s)", order, log_card(identity, state.variant))
        interp = DISCARD_INTERP.MISPLAY
    elif not state.is_basic_trash(identity):
        check_rewind(game, action)

    if useful or (action.failed and not card.inferred.has(identity)):
        for player in game.all_players:
            player.restore_elim(state, order, identity)

    on_discard(game, action)

    if useful and not action.failed:
        logger.warning("discarded useful card!")
        interpret_sarcastic(game, action)
        interp = DISCARD_INTERP.SARCASTIC

    # the call to discard has been answered
    for other in state.hands[player_index]:
        if common.thoughts[other].called_to_discard:
            with common.edit(other) as draft:
                draft.called_to_discard = False

    common.good_touch_elim(state)
    common.refresh_links(state)
    common.update_hypo_stacks(state)
    game.convention.team_elim(game)
    return interp
