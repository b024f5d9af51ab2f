import logging
from typing import TYPE_CHECKING

from basics.helper import on_play
from basics.identity_set import Identity
from conventions.shared.rewind import check_rewind
from utils import Action

if TYPE_CHECKING:
    from game import Game

logger = logging.getLogger(__name__)


def interpret_play(game: "Game", action: Action) -> None:
    state, common = game.state, game.common
    identity = Identity(action.suit_index, action.rank)

    check_rewind(game, action)

    if not common.thoughts[action.order].inferred.has(identity):
        for player in game.all_players:
            player.restore_elim(state, action.order, identity)

    on_play(game, action)

    common.good_touch_elim(state)
    common.refresh_links(state)
    common.update_hypo_stacks(state)
    game.convention.team_elim(game)
