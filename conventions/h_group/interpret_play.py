import logging
from typing import TYPE_CHECKING

from basics.helper import on_play
from basics.identity_set import Identity
from conventions.h_group.h_constants import LEVEL
from conventions.h_group.hanabi_logic import order_1s
from conventions.h_group.interpret_cm import interpret_ocm
from conventions.shared.rewind import check_rewind
from utils import Action, ClueType

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


def check_ocm(game: "Game", action: Action) -> None:
    """Playing an unknown 1 out of order moves someone's chop."""
    state, common = game.state, game.common
    card = common.thoughts[action.order]

    if not card.clues or not all(c.type == ClueType.RANK and c.value == 1 for c in card.clues):
        return
    if len(card.inferred) <= 1 and not card.rewinded:
        return

    ordered = order_1s(state, common, state.hands[action.player_index])
    if action.order in ordered:
        interpret_ocm(game, action, ordered)


def interpret_play(game: "Game", action: Action) -> None:
    state, common = game.state, game.common
    identity = Identity(action.suit_index, action.rank)

    check_rewind(game, action)

    if game.convention.level >= LEVEL.BASIC_CM and identity.rank == 1:
        check_ocm(game, action)

    if not common.thoughts[action.order].inferred.has(identity):
        for player in game.all_players:
            player.restore_elim(state, action.order, identity)

    on_play(game, action)

    for player in game.all_players:
        player.good_touch_elim(state)
    common.refresh_links(state)
    common.update_hypo_stacks(state)
    game.convention.team_elim(game)
